# orders/management/commands/sweep_pending_orders.py

from __future__ import annotations

from django.core.management.base import BaseCommand

from orders.services.expiry_sweeper import expired_pending_orders, expiry_minutes, sweep_expired_pending_orders


class Command(BaseCommand):
    help = "Auto-confirm Pending orders older than ORDER_PENDING_EXPIRY_MINUTES. Safe to run from cron."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="List the orders that would be confirmed")

    def handle(self, *args, **options):
        if options.get("dry_run"):
            numbers = list(expired_pending_orders().values_list("order_number", flat=True))
            self.stdout.write(
                f"{len(numbers)} pending order(s) older than {expiry_minutes()} minutes."
            )
            for number in numbers:
                self.stdout.write(f"  {number}")
            return

        result = sweep_expired_pending_orders()

        for number in result.skipped:
            self.stdout.write(self.style.WARNING(f"Skipped {number} (status changed meanwhile)"))
        for failure in result.failures:
            self.stderr.write(self.style.ERROR(failure))

        self.stdout.write(self.style.SUCCESS(f"Confirmed {result.promoted_count} order(s)."))
