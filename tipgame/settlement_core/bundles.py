"""
Grouping questions into bundles.

Questions sharing a group code form a bundle. The question without a parent
is the main question; children with a zero point budget are sub questions,
children with a point budget are bonus questions sharing what the main
leaves of the bundle ceiling.
"""

import logging
import warnings
from typing import Dict, Iterable, List

from tipgame.settlement_core.errors import DataIntegrityWarning
from tipgame.settlement_core.rules import SettlementRules, STANDARD_RULES
from tipgame.settlement_core.structure import Bundle, Question

logger = logging.getLogger(__name__)


def _warn(message: str) -> None:
    logger.warning("%s: %s", DataIntegrityWarning.__name__, message)
    warnings.warn(message, DataIntegrityWarning, stacklevel=3)


def _lineup_order(question: Question):
    return (question.lineup, question.question_id)


def build_bundle(
    group_code: int, questions: List[Question], rules: SettlementRules = STANDARD_RULES
) -> Bundle:
    """Classify the questions of one group code."""
    questions = sorted(questions, key=_lineup_order)
    event_id = questions[0].event_id if questions else 0
    mains = [q for q in questions if q.is_main]

    if len(mains) != 1:
        message = (
            f"Bundle {group_code} of event {event_id} has {len(mains)} questions "
            f"without a parent; settling every question on its own"
        )
        _warn(message)
        return Bundle(
            event_id=event_id,
            group_code=group_code,
            independents=tuple(questions),
            is_fallback=True,
            bundle_ceiling=rules.bundle_ceiling,
            warnings=(message,),
        )

    main = mains[0]
    children = [q for q in questions if not q.is_main]
    subs = tuple(q for q in children if q.points == 0)
    bonuses = tuple(q for q in children if q.points != 0)

    warnings = []
    if bonuses:
        configured = float(main.points) + sum(float(q.points) for q in bonuses)
        if abs(configured - rules.bundle_ceiling) > 1e-9:
            message = (
                f"Bundle {group_code} of event {event_id} is configured for "
                f"{configured:g} points; bonuses share {rules.bundle_ceiling:g} "
                f"minus the main points instead"
            )
            _warn(message)
            warnings.append(message)

    return Bundle(
        event_id=event_id,
        group_code=group_code,
        main=main,
        subs=subs,
        bonuses=bonuses,
        bundle_ceiling=rules.bundle_ceiling,
        warnings=tuple(warnings),
    )


def resolve_bundles(
    questions: Iterable[Question], rules: SettlementRules = STANDARD_RULES
) -> List[Bundle]:
    """Group the questions of an event into bundles ordered by group code."""
    groups: Dict[int, List[Question]] = {}
    for question in questions:
        groups.setdefault(question.group_code, []).append(question)
    return [build_bundle(code, groups[code], rules) for code in sorted(groups)]
