"""
Management command to re-reconcile compliance of open transports.

Useful after changing the matcher or the country rules.
"""

from django.core.management.base import BaseCommand

from equiroute_compliance.services import evaluate_transport, refresh_confirmations
from equiroute_transports.models import OPEN_STATUSES, Transport


class Command(BaseCommand):
    help = "Re-evaluate or re-reconcile compliance of planned and active transports"

    def add_arguments(self, parser):
        parser.add_argument(
            "--reevaluate",
            action="store_true",
            help="Rebuild the requirement checklist, not just the confirmations",
        )

    def handle(self, *args, **options):
        refresh = evaluate_transport if options["reevaluate"] else refresh_confirmations
        count = 0
        for transport in Transport.objects.filter(status__in=OPEN_STATUSES).iterator():
            refresh(transport)
            count += 1
        self.stdout.write(self.style.SUCCESS(f"Refreshed compliance of {count} transports"))
