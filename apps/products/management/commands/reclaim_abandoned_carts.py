# products/management/commands/reclaim_abandoned_carts.py
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.products.conf import shop_setting
from apps.products.models import LineItem
from apps.products.services.cart import reclaim_abandoned


class Command(BaseCommand):
    help = (
        "Give back the stock held by cart lines older than the cart lifetime "
        "and cancel those lines."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--minutes", type=int, default=None,
            help="Cart lifetime in minutes (default: SHOP['CART_LIFETIME_MINUTES'])"
        )
        parser.add_argument("--dry-run", action="store_true", help="Only show what would be released")

    def handle(self, *args, **opts):
        minutes = opts["minutes"]
        if minutes is None:
            minutes = shop_setting("CART_LIFETIME_MINUTES")
        older_than = timedelta(minutes=minutes)

        if opts["dry_run"]:
            pending = LineItem.objects.filter(
                order_status=LineItem.STATUS_CART,
                created_at__lt=timezone.now() - older_than,
            ).count()
            self.stdout.write(f"Abandoned cart lines: {pending}")
            self.stdout.write("DRY-RUN: nothing released.")
            return

        released = reclaim_abandoned(older_than)
        self.stdout.write(self.style.SUCCESS(f"Released {released} abandoned cart lines."))
