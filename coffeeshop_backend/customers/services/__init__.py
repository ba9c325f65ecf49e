from .loyalty import (
    InsufficientPointsError,
    LoyaltyError,
    credit_points,
    get_balance,
    get_or_create_profile,
    points_for_total,
    redeem_points,
    redemption_cost,
    reverse_points,
)

__all__ = [
    "InsufficientPointsError",
    "LoyaltyError",
    "credit_points",
    "get_balance",
    "get_or_create_profile",
    "points_for_total",
    "redeem_points",
    "redemption_cost",
    "reverse_points",
]
