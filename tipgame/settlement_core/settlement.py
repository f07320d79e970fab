"""
Settlement of one bundle.

Settlement is a pure function of the bundle, its accepted solutions and every
answer row stored for its questions. It is recomputed from scratch on every
run and produces exactly one allocation per answer row, so running it twice
on the same input produces identical output and callers simply overwrite
the stored values.
"""

import logging
from typing import Dict, Hashable, Iterable, List, Set, Tuple

from tipgame.settlement_core.codecs import CODECS
from tipgame.settlement_core.errors import NotYetSolvableError
from tipgame.settlement_core.structure import (
    Answer,
    Bundle,
    PointAllocation,
    Question,
    SettlementReport,
    SettlementStatus,
    Solution,
)

logger = logging.getLogger(__name__)

# answer id -> points, for every row judged correct
Awarded = Dict[int, float]


def comparison_key(question: Question, result: str, list_item_id=None) -> Hashable:
    return CODECS[question.result_type].key(result, list_item_id)


def accepted_keys(
    bundle: Bundle, solutions: Iterable[Solution]
) -> Dict[int, Set[Hashable]]:
    """Comparison keys of the accepted solutions, per question of the bundle."""
    keys: Dict[int, Set[Hashable]] = {}
    questions = {q.question_id: q for q in bundle.questions}
    for solution in solutions:
        question = questions.get(solution.question_id)
        if question is None:
            continue
        keys.setdefault(question.question_id, set()).add(
            comparison_key(question, solution.result, solution.list_item_id)
        )
    return keys


def winning_rows(
    question: Question, accepted: Set[Hashable], rows: List[Answer]
) -> Dict[int, Answer]:
    """The single winning row of every user that matches an accepted value.

    Only posted rows compete on plain questions. On margin questions every
    ladder row competes; the posted row wins if it matches, otherwise the
    matching row with the lowest id. Gray rows never win.
    """
    winners: Dict[int, Answer] = {}
    candidates = [
        row
        for row in rows
        if row.question_id == question.question_id
        and not row.gray
        and (row.posted or question.has_margin)
    ]
    for row in sorted(candidates, key=lambda r: (not r.posted, r.answer_id)):
        if row.user_id in winners:
            continue
        if comparison_key(question, row.result, row.list_item_id) in accepted:
            winners[row.user_id] = row
    return winners


def _share_evenly(winners: Dict[int, Answer], budget: float, awarded: Awarded):
    if not winners:
        return
    share = budget / len(winners)
    for row in winners.values():
        awarded[row.answer_id] = share


def _settle_independents(
    bundle: Bundle, keys: Dict[int, Set[Hashable]], rows: List[Answer]
) -> Awarded:
    unsolved = [qid for qid in bundle.required_question_ids if qid not in keys]
    if unsolved:
        raise NotYetSolvableError(
            f"Bundle {bundle.group_code} has no accepted solution for questions {unsolved}"
        )
    awarded: Awarded = {}
    for question in bundle.independents:
        if question.question_id not in keys:
            continue
        winners = winning_rows(question, keys[question.question_id], rows)
        _share_evenly(winners, bundle.point_share(question.question_id), awarded)
    return awarded


def _settle_regular(
    bundle: Bundle, keys: Dict[int, Set[Hashable]], rows: List[Answer]
) -> Awarded:
    main = bundle.main
    if main.question_id not in keys:
        raise NotYetSolvableError(
            f"Bundle {bundle.group_code} has no accepted solution for its main question {main.question_id}"
        )

    awarded: Awarded = {}
    main_winners = winning_rows(main, keys[main.question_id], rows)
    _share_evenly(main_winners, bundle.point_share(main.question_id), awarded)

    # Subs only carry the correct flag
    for sub in bundle.subs:
        if sub.question_id not in keys:
            continue
        for row in winning_rows(sub, keys[sub.question_id], rows).values():
            awarded[row.answer_id] = 0.0

    if not bundle.has_bonuses:
        return awarded

    bonus_winners = {
        bonus.question_id: winning_rows(bonus, keys.get(bonus.question_id, set()), rows)
        for bonus in bundle.bonuses
    }
    bundle_winners = set(main_winners)
    for winners in bonus_winners.values():
        bundle_winners &= set(winners)

    for bonus in bundle.bonuses:
        winners = bonus_winners[bonus.question_id]
        share = (
            bundle.point_share(bonus.question_id) / len(bundle_winners)
            if bundle_winners
            else 0.0
        )
        for user_id, row in winners.items():
            awarded[row.answer_id] = share if user_id in bundle_winners else 0.0
    return awarded


def _allocation(row: Answer, awarded: Awarded) -> PointAllocation:
    correct = row.answer_id in awarded
    points = awarded.get(row.answer_id, 0.0)
    return PointAllocation(
        answer_id=row.answer_id,
        question_id=row.question_id,
        user_id=row.user_id,
        points=points,
        correct=correct,
        score=points if correct else 0.0,
    )


def settle_bundle(
    bundle: Bundle,
    solutions: Iterable[Solution],
    answers: Iterable[Answer],
) -> SettlementReport:
    """
    Settle every answer row of a bundle against its accepted solutions.

    Args:
        bundle: The resolved bundle
        solutions: Accepted solutions; several per question are allowed and
                   all matching rows then share one budget
        answers: Answer rows, rows of other bundles are ignored

    Returns:
        A settled report with one allocation per answer row sorted by answer
        id, or a pending report with no allocations when the main question
        has no accepted solution yet.
    """
    question_ids = set(bundle.question_ids)
    rows = sorted(
        (a for a in answers if a.question_id in question_ids),
        key=lambda a: a.answer_id,
    )
    keys = accepted_keys(bundle, solutions)
    unsolved: Tuple[int, ...] = tuple(
        qid for qid in bundle.question_ids if qid not in keys
    )

    try:
        if bundle.is_fallback:
            awarded = _settle_independents(bundle, keys, rows)
        else:
            awarded = _settle_regular(bundle, keys, rows)
    except NotYetSolvableError as e:
        logger.info(f"Event {bundle.event_id}: {e.message}")
        return SettlementReport(
            event_id=bundle.event_id,
            group_code=bundle.group_code,
            status=SettlementStatus.PENDING,
            pending_question_ids=unsolved,
            warnings=bundle.warnings,
            message=e.message,
        )

    return SettlementReport(
        event_id=bundle.event_id,
        group_code=bundle.group_code,
        status=SettlementStatus.SETTLED,
        allocations=tuple(_allocation(row, awarded) for row in rows),
        pending_question_ids=unsolved,
        warnings=bundle.warnings,
    )


def settle(
    bundle: Bundle,
    solutions: Iterable[Solution],
    answers: Iterable[Answer],
) -> Tuple[PointAllocation, ...]:
    """Allocations of a bundle; empty while the bundle is not yet solvable."""
    return settle_bundle(bundle, solutions, answers).allocations
