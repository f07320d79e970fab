from django.core.management.base import BaseCommand, CommandError

from tipgame.predictions.models import Season
from tipgame.predictions.services import get_service
from tipgame.settlement_core.errors import SettlementError


class Command(BaseCommand):
    help = "Store squad standings for the latest settled event of a season"

    def add_arguments(self, parser):
        parser.add_argument("season_tag", type=str, help="Tag of the season")
        parser.add_argument(
            "--margin-aware",
            action="store_true",
            help="Count every accepted ladder value as its own scoring unit",
        )

    def handle(self, *args, **options):
        try:
            season = Season.objects.get(tag=options["season_tag"])
        except Season.DoesNotExist:
            raise CommandError(f"Season not found: {options['season_tag']}")

        try:
            snapshots = get_service().rebuild_squad_snapshot(
                season.pk, margin_aware=options["margin_aware"]
            )
        except SettlementError as e:
            raise CommandError(e.message)

        if not snapshots:
            self.stdout.write(self.style.WARNING(f"{season.name} has no settled events yet"))
            return

        self.stdout.write(
            self.style.SUCCESS(
                f"Squad standings for {season.name} after event {snapshots[0].sequence}:"
            )
        )
        for snapshot in snapshots:
            self.stdout.write(
                f"  {snapshot.seed:>3}. {snapshot.squad.name}: {snapshot.score:g} "
                f"({snapshot.evolution})"
            )
