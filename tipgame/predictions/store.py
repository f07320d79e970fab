"""
Store used by the settlement service, implemented on the Django ORM.

Reads return settlement_core dataclasses; writes take drafts and allocations
produced by the pure core. Nothing in here decides who wins what.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q

from tipgame.predictions import models
from tipgame.predictions.db_to_structure import (
    answer_to_structure,
    list_item_to_structure,
    question_to_structure,
    roster_to_structure,
    solution_to_structure,
)
from tipgame.settlement_core.errors import NotFoundError
from tipgame.settlement_core.structure import (
    Answer,
    ListItem,
    PointAllocation,
    Question,
    Solution,
    Squad,
    SquadStanding,
)
from tipgame.settlement_core.submission import AnswerDraft

logger = logging.getLogger(__name__)


class DjangoStore:
    """Persistence for questions, answers, solutions and squad snapshots."""

    # Lookups

    def get_question(self, question_id: int) -> Optional[Question]:
        question = models.Question.objects.filter(pk=question_id).first()
        return question_to_structure(question) if question is not None else None

    def get_list_item(self, list_item_id: int) -> Optional[ListItem]:
        item = models.ListItem.objects.filter(pk=list_item_id).first()
        return list_item_to_structure(item) if item is not None else None

    def get_event(self, event_id: int) -> models.Event:
        try:
            return models.Event.objects.get(pk=event_id)
        except models.Event.DoesNotExist:
            raise NotFoundError(f"Event not found: {event_id}")

    def get_season(self, season_id: int) -> models.Season:
        try:
            return models.Season.objects.get(pk=season_id)
        except models.Season.DoesNotExist:
            raise NotFoundError(f"Season not found: {season_id}")

    def ensure_user(self, user_id: int) -> None:
        if not get_user_model().objects.filter(pk=user_id).exists():
            raise NotFoundError(f"User not found: {user_id}")

    # Answers

    def _answer_model(self, draft: AnswerDraft) -> models.Answer:
        return models.Answer(
            question_id=draft.question_id,
            user_id=draft.user_id,
            result=draft.result,
            label=draft.label,
            posted=draft.posted,
            list_item_id=draft.list_item_id,
        )

    def insert_answer_row(self, draft: AnswerDraft) -> models.Answer:
        answer = self._answer_model(draft)
        answer.save()
        return answer

    def bulk_insert_answer_rows(self, drafts: Sequence[AnswerDraft]) -> int:
        created = models.Answer.objects.bulk_create(
            [self._answer_model(d) for d in drafts]
        )
        return len(created)

    def delete_answer_rows(self, question_id: int, user_id: int) -> int:
        deleted, _ = models.Answer.objects.filter(
            question_id=question_id, user_id=user_id
        ).delete()
        return deleted

    def has_posted_answer(self, question_id: int, user_id: int) -> bool:
        return models.Answer.objects.filter(
            question_id=question_id, user_id=user_id, posted=True
        ).exists()

    def read_answer_rows(self, question_ids: Iterable[int]) -> List[Answer]:
        rows = models.Answer.objects.filter(question_id__in=list(question_ids)).order_by("pk")
        return [answer_to_structure(a) for a in rows]

    def update_points_where(
        self,
        question_id: int,
        match: Dict,
        points: float,
        correct: bool = False,
        score: float = 0.0,
    ) -> int:
        """Overwrite points, correct and score on the matching rows of a question."""
        return models.Answer.objects.filter(question_id=question_id, **match).update(
            points=points, correct=correct, score=score
        )

    def write_allocations(self, allocations: Iterable[PointAllocation]) -> int:
        """Write allocations with one update per distinct value."""
        groups: Dict[Tuple, List[int]] = defaultdict(list)
        for allocation in allocations:
            key = (
                allocation.question_id,
                allocation.points,
                allocation.correct,
                allocation.score,
            )
            groups[key].append(allocation.answer_id)

        updated = 0
        for (question_id, points, correct, score), answer_ids in groups.items():
            updated += self.update_points_where(
                question_id, {"pk__in": answer_ids}, points, correct, score
            )
        return updated

    # Solutions and questions

    def read_solutions(self, question_ids: Iterable[int]) -> List[Solution]:
        rows = models.Solution.objects.filter(question_id__in=list(question_ids)).order_by("pk")
        return [solution_to_structure(s) for s in rows]

    def replace_solutions(
        self, question_id: int, solution: Solution, replace: bool = True
    ) -> models.Solution:
        """Store an accepted solution, dropping the previous ones unless accepting an alternative."""
        if replace:
            models.Solution.objects.filter(question_id=question_id).delete()
        return models.Solution.objects.create(
            question_id=question_id,
            result=solution.result,
            list_item_id=solution.list_item_id,
        )

    def read_questions_for_event(self, event_id: int) -> List[Question]:
        self.get_event(event_id)
        rows = models.Question.objects.filter(event_id=event_id).order_by(
            "group_code", "lineup", "pk"
        )
        return [question_to_structure(q) for q in rows]

    def set_event_settled(self, event_id: int, is_settled: bool) -> None:
        models.Event.objects.filter(pk=event_id).update(is_settled=is_settled)

    # Squads

    def read_squad_roster(self, season_id: int) -> List[Squad]:
        members = models.SquadMember.objects.filter(season_id=season_id).select_related("squad")
        return roster_to_structure(members)

    def settled_sequences(self, season_id: int) -> Tuple[Optional[int], Optional[int]]:
        """The latest settled event sequence of a season and the one before it."""
        sequences = list(
            models.Event.objects.filter(season_id=season_id, is_settled=True)
            .order_by("-sequence")
            .values_list("sequence", flat=True)[:2]
        )
        current = sequences[0] if sequences else None
        previous = sequences[1] if len(sequences) > 1 else None
        return current, previous

    def question_ids_up_to(self, season_id: int, sequence: int) -> List[int]:
        return list(
            models.Question.objects.filter(
                event__season_id=season_id, event__sequence__lte=sequence
            ).values_list("pk", flat=True)
        )

    def read_settled_scores_for_questions(
        self, question_ids: Iterable[int], margin_aware: bool = False
    ) -> Dict:
        """Settled scores per unit and user.

        Every user who answered a question contributes to it exactly once:
        with the winning row when one of their rows is correct, otherwise
        with their posted row and a score of 0. A unit is a question id, or
        the (question id, result) pair of that row when margin_aware is set.
        """
        rows = (
            models.Answer.objects.filter(question_id__in=list(question_ids))
            .filter(Q(correct=True) | Q(posted=True))
            .order_by("question_id", "user_id", "-correct", "pk")
            .values_list("question_id", "result", "user_id", "score", "correct")
        )
        scores: Dict = {}
        seen = set()
        for question_id, result, user_id, score, correct in rows:
            if (question_id, user_id) in seen:
                continue
            seen.add((question_id, user_id))
            unit = (question_id, result) if margin_aware else question_id
            scores.setdefault(unit, {})[user_id] = (score or 0.0) if correct else 0.0
        return scores

    def read_snapshots(
        self, season_id: int, sequence: int, margin_aware: bool = False
    ) -> List[models.SquadSnapshot]:
        return list(
            models.SquadSnapshot.objects.filter(
                season_id=season_id, sequence=sequence, margin_aware=margin_aware
            ).order_by("seed", "squad__name", "squad_id")
        )

    def write_snapshots(
        self,
        season_id: int,
        sequence: int,
        margin_aware: bool,
        standings: Iterable[SquadStanding],
    ) -> List[models.SquadSnapshot]:
        snapshots = []
        with transaction.atomic():
            for standing in standings:
                snapshot = models.SquadSnapshot.objects.create(
                    squad_id=standing.squad_id,
                    season_id=season_id,
                    sequence=sequence,
                    margin_aware=margin_aware,
                    score=standing.score,
                    seed=standing.seed,
                    previous_seed=standing.previous_seed,
                    previous_score=standing.previous_score,
                    movement=standing.movement,
                )
                models.SquadSnapshotMember.objects.bulk_create(
                    [
                        models.SquadSnapshotMember(
                            snapshot=snapshot, user_id=user_id, contribution=value
                        )
                        for user_id, value in sorted(standing.per_user_contribution.items())
                    ]
                )
                snapshots.append(snapshot)
        logger.info(
            f"Stored {len(snapshots)} squad snapshots for season {season_id}, sequence {sequence}"
        )
        return snapshots
