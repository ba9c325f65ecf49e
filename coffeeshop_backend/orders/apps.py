# orders/apps.py

"""
ORDERS APP CONFIG

Order fulfillment engine:
- Order entry (cart -> order, stock + loyalty reserved atomically)
- Status state machine + history trail
- Pending auto-confirmation sweep
- Administrative deletion with loyalty reversal
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
