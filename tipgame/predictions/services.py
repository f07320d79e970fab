"""
Entry points for submitting answers, declaring solutions and settling.

The service glues the pure settlement_core functions to the Django store:
every operation does one bulk read, runs the pure computation and does one
bulk write under the bundle lock.
"""

import logging
from typing import List, Optional

from django.conf import settings

import reversion

from tipgame.predictions.locks import bundle_lock
from tipgame.predictions.models import SquadSnapshot
from tipgame.predictions.store import DjangoStore
from tipgame.settlement_core.bundles import build_bundle, resolve_bundles
from tipgame.settlement_core.codecs import codec_for
from tipgame.settlement_core.errors import AlreadyPostedError, NotFoundError
from tipgame.settlement_core.lookups import LookupCache
from tipgame.settlement_core.rules import SettlementRules
from tipgame.settlement_core.settlement import settle_bundle as settle_pure
from tipgame.settlement_core.squads import build_squad_standings
from tipgame.settlement_core.structure import (
    Bundle,
    SettlementReport,
    SettlementStatus,
    Solution,
)
from tipgame.settlement_core.submission import AnswerDraft, build_answer_rows

logger = logging.getLogger(__name__)


def rules_from_settings() -> SettlementRules:
    return SettlementRules(
        bundle_ceiling=float(getattr(settings, "TIPGAME_BUNDLE_CEILING", 20)),
        score_decimals=int(getattr(settings, "TIPGAME_SCORE_DECIMALS", 2)),
    )


class SettlementService:
    """Submission, solution and settlement operations on stored events."""

    def __init__(
        self,
        store: Optional[DjangoStore] = None,
        lookups: Optional[LookupCache] = None,
        rules: Optional[SettlementRules] = None,
    ):
        self.store = store or DjangoStore()
        self.rules = rules or rules_from_settings()
        self.lookups = lookups or LookupCache(
            self.store.get_question, self.store.get_list_item
        )

    def submit_answer(
        self,
        event_id: int,
        user_id: int,
        question_id: int,
        raw_input,
        list_item_id: Optional[int] = None,
    ) -> List[AnswerDraft]:
        """
        Store a user's answer to a question.

        Margin questions replace the user's whole ladder; other questions
        accept one posted answer per user.

        Raises:
            InvalidInputError: the input does not parse, nothing is written
            AlreadyPostedError: a non-margin question was already answered
            NotFoundError: unknown question, user or list item
        """
        question = self.lookups.question(question_id)
        if question.event_id != event_id:
            raise NotFoundError(f"Question {question_id} is not part of event {event_id}")
        self.store.ensure_user(user_id)

        drafts = build_answer_rows(
            question,
            user_id,
            raw_input,
            codec_for(question, self.lookups),
            list_item_id=list_item_id,
        )

        with bundle_lock(event_id, question.group_code):
            if question.has_margin:
                self.store.delete_answer_rows(question_id, user_id)
                self.store.bulk_insert_answer_rows(drafts)
            else:
                if self.store.has_posted_answer(question_id, user_id):
                    raise AlreadyPostedError(
                        f"Question {question_id} was already answered"
                    )
                self.store.insert_answer_row(drafts[0])

        logger.info(
            f"User {user_id} answered question {question_id} ({len(drafts)} rows)"
        )
        return drafts

    def declare_solution(
        self,
        question_id: int,
        result,
        list_item_id: Optional[int] = None,
        replace: bool = True,
    ) -> SettlementReport:
        """Declare (or correct) the accepted solution and re-settle its bundle.

        With ``replace=False`` the solution is accepted next to the existing
        ones.
        """
        question = self.lookups.question(question_id)
        codec = codec_for(question, self.lookups)
        if question.compares_list_items:
            selected = list_item_id if list_item_id is not None else result
            canonical = codec.encode(selected)
            list_item_id = int(selected)
        else:
            canonical = codec.encode(result)

        with reversion.create_revision():
            reversion.set_comment("Declared solution.")
            self.store.replace_solutions(
                question_id,
                Solution(question_id=question_id, result=canonical, list_item_id=list_item_id),
                replace=replace,
            )
        logger.info(f"Solution {canonical!r} declared for question {question_id}")

        return self.settle_bundle(question.event_id, question.group_code)

    def settle_bundle(self, event_id: int, group_code: int) -> SettlementReport:
        """Recompute and overwrite the allocations of one bundle."""
        questions = [
            q
            for q in self.store.read_questions_for_event(event_id)
            if q.group_code == group_code
        ]
        if not questions:
            raise NotFoundError(f"Bundle {group_code} not found in event {event_id}")
        report = self._settle(build_bundle(group_code, questions, self.rules))
        self._refresh_event_state(event_id)
        return report

    def settle_event(self, event_id: int) -> List[SettlementReport]:
        """Settle every bundle of an event; one failing bundle never stops the rest."""
        questions = self.store.read_questions_for_event(event_id)
        reports = []
        for bundle in resolve_bundles(questions, self.rules):
            try:
                reports.append(self._settle(bundle))
            except Exception as e:
                logger.exception(
                    f"Settling bundle {bundle.group_code} of event {event_id} failed"
                )
                reports.append(
                    SettlementReport(
                        event_id=event_id,
                        group_code=bundle.group_code,
                        status=SettlementStatus.FAILED,
                        warnings=bundle.warnings,
                        message=str(e),
                    )
                )
        self._refresh_event_state(event_id)
        return reports

    def rebuild_squad_snapshot(
        self, season_id: int, margin_aware: bool = False
    ) -> List[SquadSnapshot]:
        """Store squad standings for the season's latest settled sequence.

        Snapshots are immutable: when the sequence already has snapshots they
        are returned as they are.
        """
        self.store.get_season(season_id)
        current, previous = self.store.settled_sequences(season_id)
        if current is None:
            logger.info(f"Season {season_id} has no settled events yet")
            return []

        existing = self.store.read_snapshots(season_id, current, margin_aware)
        if existing:
            return existing

        squads = self.store.read_squad_roster(season_id)
        scores = self.store.read_settled_scores_for_questions(
            self.store.question_ids_up_to(season_id, current), margin_aware
        )
        previous_scores = None
        if previous is not None:
            previous_scores = self.store.read_settled_scores_for_questions(
                self.store.question_ids_up_to(season_id, previous), margin_aware
            )

        standings = build_squad_standings(squads, scores, previous_scores, self.rules)
        return self.store.write_snapshots(season_id, current, margin_aware, standings)

    def _settle(self, bundle: Bundle) -> SettlementReport:
        with bundle_lock(bundle.event_id, bundle.group_code):
            solutions = self.store.read_solutions(bundle.question_ids)
            answers = self.store.read_answer_rows(bundle.question_ids)
            report = settle_pure(bundle, solutions, answers)
            if report.is_settled:
                self.store.write_allocations(report.allocations)
        logger.info(
            f"Bundle {bundle.group_code} of event {bundle.event_id}: {report.status.value}, "
            f"{len(report.allocations)} rows, {report.total_points():g} points"
        )
        return report

    def _refresh_event_state(self, event_id: int) -> None:
        """An event is settled once every bundle has its required solutions."""
        questions = self.store.read_questions_for_event(event_id)
        solved = {s.question_id for s in self.store.read_solutions([q.question_id for q in questions])}
        is_settled = bool(questions) and all(
            set(bundle.required_question_ids) <= solved
            for bundle in resolve_bundles(questions, self.rules)
        )
        self.store.set_event_settled(event_id, is_settled)


_default_service: Optional[SettlementService] = None


def get_service() -> SettlementService:
    """The process-wide service; its lookup cache is invalidated by signals."""
    global _default_service
    if _default_service is None:
        _default_service = SettlementService()
    return _default_service


def submit_answer(event_id, user_id, question_id, raw_input, list_item_id=None):
    return get_service().submit_answer(
        event_id, user_id, question_id, raw_input, list_item_id=list_item_id
    )


def declare_solution(question_id, result, list_item_id=None, replace=True):
    return get_service().declare_solution(
        question_id, result, list_item_id=list_item_id, replace=replace
    )


def settle_bundle(event_id, group_code):
    return get_service().settle_bundle(event_id, group_code)


def settle_event(event_id):
    return get_service().settle_event(event_id)


def rebuild_squad_snapshot(season_id, margin_aware=False):
    return get_service().rebuild_squad_snapshot(season_id, margin_aware=margin_aware)
