# orders/services/order_entry.py

"""
ORDER ENTRY PROCESSOR (APPLICATION SERVICE)

Purpose:
- Turn a storefront cart submission into a Pending order.
- Reserve inventory and settle loyalty points in the same transaction.
- Leave exactly one history entry describing the points transaction.

Validation order (first failure wins, nothing is written before commit):
1. Header: required fields, numbers, payment method, GCash reference,
   service-area city, order number not taken, customer exists.
2. Lines: active product, known size, positive quantity and price.
3. Discount: only legal with a promo code (0.01 tolerance).
4. Loyalty: balance >= redemption cost and at least one coffee line.
5. Stock: every (product, size) counter covers the summed request.

Commit (one DB transaction):
    Order -> OrderItems -> reserve_stock per (product, size)
    -> loyalty credit / redemption -> history entry (Pending)

Hard rules:
- total_amount is caller-computed and NOT recomputed here; only its
  discount component is validated.
- Loyalty redemption is never expressed through discount_amount.
- Stock and points writes are conditional UPDATEs, so a concurrent order
  that slips past step 4/5 is still rejected at commit and rolled back.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction

from customers.services.loyalty import (
    InsufficientPointsError,
    credit_points,
    get_balance,
    points_for_total,
    redeem_points,
    redemption_cost,
)
from orders.models import Order, OrderHistoryEntry, OrderItem
from orders.services.exceptions import (
    InsufficientLoyaltyPointsError,
    InsufficientStockError,
    InvalidDiscountError,
    OrderValidationError,
    PersistenceFailureError,
)
from products.models import ProductVariant
from products.services.classification import is_coffee_type
from products.services.inventory import StockReservationError, reserve_stock

logger = logging.getLogger(__name__)

User = get_user_model()

TWOPLACES = Decimal("0.01")
DISCOUNT_TOLERANCE = Decimal("0.01")
GCASH_REFERENCE_RE = re.compile(r"^\d{13}$")

REQUIRED_HEADER_FIELDS = (
    "order_number",
    "total_amount",
    "payment_method",
    "delivery_first_name",
    "delivery_last_name",
    "delivery_phone",
    "delivery_email",
    "delivery_address",
    "delivery_zipcode",
)

PAYMENT_METHODS = {
    Order.PAYMENT_GCASH.lower(): Order.PAYMENT_GCASH,
    Order.PAYMENT_PICKUP.lower(): Order.PAYMENT_PICKUP,
}


# ============================================================
# INPUT / OUTPUT RECORDS
# ============================================================


@dataclass(frozen=True)
class CartLine:
    product_id: object
    size: str
    quantity: object
    unit_price: object


@dataclass(frozen=True)
class CartSubmission:
    order_number: str
    total_amount: object
    payment_method: str
    delivery_first_name: str
    delivery_last_name: str
    delivery_phone: str
    delivery_email: str
    delivery_address: str
    delivery_zipcode: str
    items: list = field(default_factory=list)
    customer_id: object = None
    payment_reference: str = ""
    delivery_city: str = ""
    promo_code: str = ""
    discount_amount: object = None
    use_loyalty_points: bool = False


@dataclass(frozen=True)
class FreeItem:
    product_id: int
    name: str
    size: str
    unit_price: Decimal


@dataclass(frozen=True)
class OrderCreationResult:
    order_id: int
    order_number: str
    points_earned: int
    points_balance: int | None
    low_stock_product_ids: list
    loyalty_points_redeemed: int
    free_item: FreeItem | None


@dataclass
class _ValidatedLine:
    variant: ProductVariant
    quantity: int
    unit_price: Decimal

    @property
    def key(self):
        return (self.variant.product_id, self.variant.size)


@dataclass
class _ValidatedOrder:
    submission: CartSubmission
    order_number: str
    total_amount: Decimal
    discount_amount: Decimal
    promo_code: str
    payment_method: str
    payment_reference: str | None
    delivery_city: str
    customer_id: object
    lines: list
    requested: dict
    points_earned: int
    free_item: FreeItem | None


# ============================================================
# HELPERS
# ============================================================


def _text(value) -> str:
    return str(value if value is not None else "").strip()


def _money(value, *, field_name: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise OrderValidationError(
            f"{field_name} must be a valid amount",
            code="INVALID_NUMBER",
            details={"field": field_name},
        )
    if not amount.is_finite():
        raise OrderValidationError(
            f"{field_name} must be a valid amount",
            code="INVALID_NUMBER",
            details={"field": field_name},
        )
    return amount.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _to_int_qty(value) -> int:
    if isinstance(value, bool):
        raise ValueError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, Decimal) and value == value.to_integral_value():
        return int(value)

    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)

    raise ValueError("quantity must be a whole integer unit")


def _to_product_id(value) -> int:
    try:
        return _to_int_qty(value)
    except ValueError:
        raise OrderValidationError(
            "product_id must be an integer",
            code="INVALID_PRODUCT",
            details={"product_id": value},
        )


def _service_area() -> list[str]:
    return list(getattr(settings, "ORDER_SERVICE_AREA_CITIES", None) or ["Carcar"])


def _customer_exists(customer_id) -> bool:
    try:
        return User.objects.filter(pk=customer_id, is_active=True).exists()
    except (DjangoValidationError, ValueError, TypeError):
        return False


def _history_note(*, points_earned: int, free_item: FreeItem | None) -> str:
    if free_item is not None:
        return (
            f"Order placed with loyalty points redemption "
            f"({redemption_cost()} points, 1 free coffee: {free_item.name})"
        )
    per_unit = int(getattr(settings, "LOYALTY_POINTS_PER_UNIT", 10))
    return (
        f"Order placed with {points_earned} loyalty points earned "
        f"(1 point per ₱{per_unit} of total order)"
    )


# ============================================================
# VALIDATION STAGES
# ============================================================


def _validate_header(sub: CartSubmission) -> dict:
    for name in REQUIRED_HEADER_FIELDS:
        if not _text(getattr(sub, name)):
            raise OrderValidationError(
                f"Missing required field: {name}",
                code="MISSING_FIELD",
                details={"field": name},
            )

    if not sub.items:
        raise OrderValidationError(
            "Order must contain at least one item",
            code="MISSING_FIELD",
            details={"field": "items"},
        )

    total = _money(sub.total_amount, field_name="total_amount")
    if total < Decimal("0.00"):
        raise OrderValidationError(
            "total_amount cannot be negative",
            code="INVALID_NUMBER",
            details={"field": "total_amount"},
        )

    payment_method = PAYMENT_METHODS.get(_text(sub.payment_method).lower())
    if payment_method is None:
        raise OrderValidationError(
            f"Unsupported payment method '{_text(sub.payment_method)}'",
            code="INVALID_PAYMENT_METHOD",
            details={"allowed": sorted(PAYMENT_METHODS.values())},
        )

    payment_reference = None
    if payment_method == Order.PAYMENT_GCASH:
        payment_reference = _text(sub.payment_reference)
        if not payment_reference:
            raise OrderValidationError(
                "GCash payments require a payment reference",
                code="MISSING_PAYMENT_REFERENCE",
                details={"field": "payment_reference"},
            )
        if not GCASH_REFERENCE_RE.match(payment_reference):
            raise OrderValidationError(
                "GCash reference must be exactly 13 digits",
                code="INVALID_PAYMENT_REFERENCE",
                details={"field": "payment_reference"},
            )

    area = _service_area()
    city = _text(sub.delivery_city) or area[0]
    canonical_city = next((c for c in area if c.lower() == city.lower()), None)
    if canonical_city is None:
        raise OrderValidationError(
            f"Delivery is only available in: {', '.join(area)}",
            code="OUTSIDE_SERVICE_AREA",
            details={"city": city, "allowed": area},
        )

    order_number = _text(sub.order_number)
    if Order.objects.filter(order_number=order_number).exists():
        raise OrderValidationError(
            f"Order number {order_number} already exists",
            code="DUPLICATE_ORDER_NUMBER",
            details={"order_number": order_number},
        )

    customer_id = sub.customer_id
    if customer_id in ("", None):
        customer_id = None
    elif not _customer_exists(customer_id):
        raise OrderValidationError(
            "Customer account not found",
            code="UNKNOWN_CUSTOMER",
            details={"customer_id": str(customer_id)},
        )

    return {
        "order_number": order_number,
        "total_amount": total,
        "payment_method": payment_method,
        "payment_reference": payment_reference,
        "delivery_city": canonical_city,
        "customer_id": customer_id,
    }


def _validate_lines(sub: CartSubmission) -> list[_ValidatedLine]:
    parsed = []
    for index, line in enumerate(sub.items):
        product_id = _to_product_id(line.product_id)

        size = ProductVariant.normalize_size(line.size)
        if not size:
            raise OrderValidationError(
                f"Invalid size '{_text(line.size)}' for item {index + 1}",
                code="INVALID_SIZE",
                details={"index": index, "allowed": list(ProductVariant.Size.values)},
            )

        try:
            quantity = _to_int_qty(line.quantity)
        except ValueError:
            raise OrderValidationError(
                f"Quantity for item {index + 1} must be a whole number",
                code="INVALID_QUANTITY",
                details={"index": index},
            )
        if quantity <= 0:
            raise OrderValidationError(
                f"Quantity for item {index + 1} must be at least 1",
                code="INVALID_QUANTITY",
                details={"index": index},
            )

        unit_price = _money(line.unit_price, field_name="price")
        if unit_price <= Decimal("0.00"):
            raise OrderValidationError(
                f"Price for item {index + 1} must be greater than zero",
                code="INVALID_PRICE",
                details={"index": index},
            )

        parsed.append((index, product_id, size, quantity, unit_price))

    variants = {
        (v.product_id, v.size): v
        for v in ProductVariant.objects.select_related("product", "product__category").filter(
            product_id__in={p[1] for p in parsed},
            product__is_active=True,
        )
    }

    lines = []
    for index, product_id, size, quantity, unit_price in parsed:
        variant = variants.get((product_id, size))
        if variant is None:
            raise OrderValidationError(
                f"Product {product_id} is not available in size {size}",
                code="UNKNOWN_PRODUCT",
                details={"index": index, "product_id": product_id, "size": size},
            )
        lines.append(_ValidatedLine(variant=variant, quantity=quantity, unit_price=unit_price))

    return lines


def _validate_discount(sub: CartSubmission) -> tuple[Decimal, str]:
    promo_code = _text(sub.promo_code)
    discount = _money(sub.discount_amount, field_name="discount_amount")

    if discount < Decimal("0.00"):
        raise InvalidDiscountError("Discount cannot be negative")

    expected = discount if promo_code else Decimal("0.00")
    if abs(discount - expected) > DISCOUNT_TOLERANCE:
        raise InvalidDiscountError(
            "Invalid discount amount",
            details={"discount_amount": str(discount), "expected": str(expected)},
        )

    return discount, promo_code


def _select_free_item(*, sub: CartSubmission, customer_id, lines) -> FreeItem | None:
    if not sub.use_loyalty_points:
        return None

    if customer_id is None:
        raise OrderValidationError(
            "Sign in to redeem loyalty points",
            code="LOYALTY_REQUIRES_ACCOUNT",
        )

    cost = redemption_cost()
    balance = get_balance(user_id=customer_id)
    if balance < cost:
        raise InsufficientLoyaltyPointsError(
            f"At least {cost} loyalty points are required to redeem a free coffee",
            details={"points_balance": balance, "required": cost},
        )

    coffee_lines = [ln for ln in lines if is_coffee_type(ln.variant.product)]
    if not coffee_lines:
        raise OrderValidationError(
            "Loyalty redemption requires at least one coffee item in the order",
            code="NO_COFFEE_ITEM",
        )

    cheapest = min(coffee_lines, key=lambda ln: Decimal(ln.variant.unit_price))
    return FreeItem(
        product_id=cheapest.variant.product_id,
        name=cheapest.variant.product.name,
        size=cheapest.variant.size,
        unit_price=Decimal(cheapest.variant.unit_price),
    )


def _validate_stock(lines) -> dict:
    requested = {}
    for ln in lines:
        requested[ln.key] = requested.get(ln.key, 0) + ln.quantity

    seen = {}
    for ln in lines:
        seen.setdefault(ln.key, ln.variant)

    for key, qty in requested.items():
        variant = seen[key]
        if int(variant.quantity) < qty:
            raise InsufficientStockError(
                product_id=variant.product_id,
                size=variant.size,
                requested=qty,
                available=int(variant.quantity),
            )

    return requested


def validate_submission(sub: CartSubmission) -> _ValidatedOrder:
    header = _validate_header(sub)
    lines = _validate_lines(sub)
    discount, promo_code = _validate_discount(sub)
    free_item = _select_free_item(sub=sub, customer_id=header["customer_id"], lines=lines)
    requested = _validate_stock(lines)

    points_earned = 0
    if header["customer_id"] is not None:
        points_earned = points_for_total(header["total_amount"])

    return _ValidatedOrder(
        submission=sub,
        discount_amount=discount,
        promo_code=promo_code,
        lines=lines,
        requested=requested,
        points_earned=points_earned,
        free_item=free_item,
        **header,
    )


# ============================================================
# COMMIT
# ============================================================


@transaction.atomic
def _commit(v: _ValidatedOrder, *, actor_id):
    sub = v.submission

    order = Order.objects.create(
        customer_id=v.customer_id,
        order_number=v.order_number,
        total_amount=v.total_amount,
        discount_amount=v.discount_amount,
        promo_code=v.promo_code,
        payment_method=v.payment_method,
        payment_reference=v.payment_reference,
        delivery_first_name=_text(sub.delivery_first_name),
        delivery_last_name=_text(sub.delivery_last_name),
        delivery_phone=_text(sub.delivery_phone),
        delivery_email=_text(sub.delivery_email),
        delivery_address=_text(sub.delivery_address),
        delivery_city=v.delivery_city,
        delivery_zipcode=_text(sub.delivery_zipcode),
        loyalty_points_used=redemption_cost() if v.free_item else 0,
        loyalty_points_earned=v.points_earned,
        status=Order.STATUS_PENDING,
    )

    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                product_id=ln.variant.product_id,
                size=ln.variant.size,
                quantity=ln.quantity,
                unit_price=ln.unit_price,
            )
            for ln in v.lines
        ]
    )

    low_stock_product_ids = []
    thresholds = {ln.key: int(ln.variant.product.low_stock_threshold or 0) for ln in v.lines}
    for (product_id, size), qty in v.requested.items():
        remaining = reserve_stock(product_id=product_id, size=size, quantity=qty)
        if remaining <= thresholds[(product_id, size)] and product_id not in low_stock_product_ids:
            low_stock_product_ids.append(product_id)

    points_balance = None
    if v.customer_id is not None:
        if v.free_item is not None:
            points_balance = redeem_points(user_id=v.customer_id, earned=v.points_earned)
        else:
            points_balance = credit_points(user_id=v.customer_id, points=v.points_earned)

    OrderHistoryEntry.objects.create(
        order=order,
        status=Order.STATUS_PENDING,
        notes=_history_note(points_earned=v.points_earned, free_item=v.free_item),
        actor_id=actor_id or v.customer_id,
    )

    return order, points_balance, low_stock_product_ids


def create_order(submission: CartSubmission, *, actor_id=None) -> OrderCreationResult:
    """
    Validate then atomically persist an order.

    actor_id: the authenticated caller, if any. Recorded on the history entry
    (falls back to the order's customer; NULL for guest checkout).
    """
    validated = validate_submission(submission)

    try:
        order, points_balance, low_stock_product_ids = _commit(validated, actor_id=actor_id)

    except StockReservationError as exc:
        raise InsufficientStockError(
            product_id=exc.product_id,
            size=exc.size,
            requested=exc.requested,
        ) from exc

    except InsufficientPointsError as exc:
        raise InsufficientLoyaltyPointsError(
            str(exc),
            details={"required": exc.required},
        ) from exc

    except IntegrityError as exc:
        if Order.objects.filter(order_number=validated.order_number).exists():
            raise OrderValidationError(
                f"Order number {validated.order_number} already exists",
                code="DUPLICATE_ORDER_NUMBER",
                details={"order_number": validated.order_number},
            ) from exc
        logger.exception(
            "Order commit failed (integrity)",
            extra={"order_number": validated.order_number},
        )
        raise PersistenceFailureError() from exc

    except DatabaseError as exc:
        logger.exception(
            "Order commit failed",
            extra={"order_number": validated.order_number},
        )
        raise PersistenceFailureError() from exc

    loyalty_points_redeemed = order.loyalty_points_used

    logger.info(
        "Order created",
        extra={
            "order_id": order.id,
            "order_number": order.order_number,
            "customer_id": str(validated.customer_id) if validated.customer_id else None,
            "points_earned": validated.points_earned,
            "loyalty_points_redeemed": loyalty_points_redeemed,
            "low_stock_product_ids": low_stock_product_ids,
        },
    )

    return OrderCreationResult(
        order_id=order.id,
        order_number=order.order_number,
        points_earned=validated.points_earned,
        points_balance=points_balance,
        low_stock_product_ids=low_stock_product_ids,
        loyalty_points_redeemed=loyalty_points_redeemed,
        free_item=validated.free_item,
    )
