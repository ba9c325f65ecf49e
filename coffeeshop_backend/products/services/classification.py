# products/services/classification.py

"""
COFFEE-TYPE CLASSIFICATION

Decides whether a product can be handed out as the free item of a loyalty
redemption.

Rules:
- Product.is_coffee, when set, wins.
- Otherwise: case-insensitive substring match of the category name or the
  product name against COFFEE_KEYWORDS.
"""

from __future__ import annotations

COFFEE_KEYWORDS = frozenset({"coffee", "hot", "latte", "espresso", "cappuccino"})


def matches_coffee_keywords(*texts: str, keywords=COFFEE_KEYWORDS) -> bool:
    for text in texts:
        haystack = (text or "").lower()
        if any(keyword in haystack for keyword in keywords):
            return True
    return False


def is_coffee_type(product) -> bool:
    explicit = getattr(product, "is_coffee", None)
    if explicit is not None:
        return bool(explicit)

    return matches_coffee_keywords(product.category_name, product.name)
