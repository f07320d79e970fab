"""
Management command to seed a demo season with one prediction event:
- a time trial bundle (main question with a margin ladder, winning team bonus)
- a podium bundle (list selection main question, score sub question)
- randomly generated players split over squads, answering every question
"""

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from faker import Faker

from tipgame.predictions import models
from tipgame.predictions.services import SettlementService
from tipgame.settlement_core.structure import ResultType

TEAMS = ["Breakaway", "Peloton", "Gruppetto", "Echelon", "Domestiques"]


class Command(BaseCommand):
    help = "Seed a demo season with one event, players, squads and answers"

    def add_arguments(self, parser):
        parser.add_argument(
            "--season-tag",
            type=str,
            default="demo",
            help="Tag of the demo season (default: demo)",
        )
        parser.add_argument(
            "--players",
            type=int,
            default=12,
            help="Number of players to create (default: 12)",
        )
        parser.add_argument(
            "--squads",
            type=int,
            default=3,
            help="Number of squads to split the players over (default: 3)",
        )
        parser.add_argument(
            "--settle",
            action="store_true",
            help="Declare solutions, settle the event and store squad snapshots",
        )
        parser.add_argument(
            "--seed",
            type=int,
            default=None,
            help="Random seed for reproducible demo data",
        )

    def handle(self, *args, **options):
        if options["seed"] is not None:
            random.seed(options["seed"])
            Faker.seed(options["seed"])
        fake = Faker()
        service = SettlementService()

        self.stdout.write(self.style.WARNING("Creating demo event..."))

        with transaction.atomic():
            season, _ = models.Season.objects.get_or_create(
                tag=options["season_tag"],
                defaults={"name": f"Demo season {options['season_tag']}", "is_active": True},
            )
            sequence = (
                season.events.order_by("-sequence")
                .values_list("sequence", flat=True)
                .first()
                or 0
            ) + 1
            event = models.Event.objects.create(
                season=season, name=f"{fake.city()} time trial", sequence=sequence
            )

            time_trial = models.Question.objects.create(
                event=event,
                group_code=1,
                lineup=1,
                text="Winning time",
                points=12,
                margin=3,
                step=Decimal(10),
                result_type=ResultType.TIME.value,
            )
            winning_team = models.Question.objects.create(
                event=event,
                parent=time_trial,
                group_code=1,
                lineup=2,
                text="Winning team",
                points=8,
                result_type=ResultType.EXACT_TEXT.value,
            )
            podium = models.Question.objects.create(
                event=event,
                group_code=2,
                lineup=3,
                text="Stage winner",
                points=20,
                result_type=ResultType.LIST_SELECTION.value,
            )
            riders = [
                models.ListItem.objects.create(question=podium, label=fake.name(), lineup=i)
                for i in range(1, 6)
            ]
            final_score = models.Question.objects.create(
                event=event,
                parent=podium,
                group_code=2,
                lineup=4,
                text="Sprint score",
                result_type=ResultType.SCORE_WITH_DRAW.value,
            )

            players = self._create_players(fake, options["players"])
            squads = self._create_squads(season, players, options["squads"])

            for player in players:
                service.submit_answer(
                    event.pk, player.pk, time_trial.pk, f"0:{random.randint(40, 44)}:{random.choice(['00', '30'])}"
                )
                service.submit_answer(event.pk, player.pk, winning_team.pk, random.choice(TEAMS))
                service.submit_answer(
                    event.pk, player.pk, podium.pk, None, list_item_id=random.choice(riders).pk
                )
                service.submit_answer(
                    event.pk, player.pk, final_score.pk, f"{random.randint(0, 3)}-{random.randint(0, 3)}"
                )

        self.stdout.write(self.style.SUCCESS(f"✓ Created {event.name} in {season.name}"))
        self.stdout.write(f"  - {len(players)} players")
        self.stdout.write(f"  - {len(squads)} squads")
        self.stdout.write(f"  - {event.questions.count()} questions in 2 bundles")
        self.stdout.write(f"\nEvent ID: {event.pk}")

        if not options["settle"]:
            self.stdout.write(f"Use 'settle_bundle {event.pk}' once solutions are declared")
            return

        service.declare_solution(time_trial.pk, "0:42:00")
        service.declare_solution(winning_team.pk, random.choice(TEAMS))
        service.declare_solution(podium.pk, None, list_item_id=random.choice(riders).pk)
        service.declare_solution(final_score.pk, "1-1")

        for report in service.settle_event(event.pk):
            self.stdout.write(
                f"  Bundle {report.group_code}: {report.status.value}, "
                f"{report.total_points():g} points"
            )
        for snapshot in service.rebuild_squad_snapshot(season.pk):
            self.stdout.write(f"  {snapshot.seed}. {snapshot.squad.name}: {snapshot.score:g}")

    def _create_players(self, fake, count):
        User = get_user_model()
        return [
            User.objects.create_user(username=fake.unique.user_name(), email=fake.email())
            for _ in range(count)
        ]

    def _create_squads(self, season, players, count):
        squads = [
            models.Squad.objects.create(name=f"{name} {season.tag}")
            for name in TEAMS[: max(1, min(count, len(TEAMS)))]
        ]
        for i, player in enumerate(players):
            squad = squads[i % len(squads)]
            models.SquadMember.objects.create(
                squad=squad,
                season=season,
                user=player,
                is_captain=i < len(squads),
            )
        return squads
