"""
Management command to (re)settle the bundles of an event.

Without --group-code every bundle of the event is settled; a failing bundle
is reported and the remaining ones are still settled.
"""

from django.core.management.base import BaseCommand, CommandError

from tipgame.predictions.services import get_service
from tipgame.settlement_core.errors import SettlementError
from tipgame.settlement_core.structure import SettlementStatus


class Command(BaseCommand):
    help = "Settle one bundle, or every bundle, of an event"

    def add_arguments(self, parser):
        parser.add_argument("event_id", type=int, help="ID of the event to settle")
        parser.add_argument(
            "--group-code",
            type=int,
            default=None,
            help="Only settle the bundle with this group code",
        )

    def handle(self, *args, **options):
        event_id = options["event_id"]
        group_code = options["group_code"]
        service = get_service()

        try:
            if group_code is None:
                reports = service.settle_event(event_id)
            else:
                reports = [service.settle_bundle(event_id, group_code)]
        except SettlementError as e:
            raise CommandError(e.message)

        for report in reports:
            line = (
                f"Bundle {report.group_code}: {report.status.value}, "
                f"{len(report.allocations)} rows, {report.total_points():g} points"
            )
            if report.status == SettlementStatus.SETTLED:
                self.stdout.write(self.style.SUCCESS(line))
            elif report.status == SettlementStatus.PENDING:
                self.stdout.write(self.style.WARNING(f"{line} ({report.message})"))
            else:
                self.stdout.write(self.style.ERROR(f"{line} ({report.message})"))
            for warning in report.warnings:
                self.stdout.write(self.style.WARNING(f"  - {warning}"))
