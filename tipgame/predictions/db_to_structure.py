"""
Transform database models to settlement_core structure representation.

This module provides functions to convert Django ORM models from
tipgame.predictions into the plain settlement_core dataclasses that
settlement and squad normalization work on.
"""

from decimal import Decimal
from typing import Dict, Iterable, List

from tipgame.settlement_core.structure import (
    Answer,
    ListItem,
    Question,
    ResultType,
    Solution,
    Squad,
    SquadMember,
)


def question_to_structure(question) -> Question:
    """Convert a Question model instance."""
    return Question(
        question_id=question.pk,
        event_id=question.event_id,
        group_code=question.group_code,
        result_type=ResultType(question.result_type),
        points=float(question.points or 0),
        parent_id=question.parent_id,
        lineup=question.lineup,
        margin=question.margin,
        step=Decimal(question.step) if question.step is not None else None,
        decimals=question.decimals,
    )


def list_item_to_structure(list_item) -> ListItem:
    return ListItem(
        list_item_id=list_item.pk,
        question_id=list_item.question_id,
        label=list_item.label,
    )


def answer_to_structure(answer) -> Answer:
    return Answer(
        answer_id=answer.pk,
        question_id=answer.question_id,
        user_id=answer.user_id,
        result=answer.result,
        label=answer.label,
        posted=answer.posted,
        list_item_id=answer.list_item_id,
        points=answer.points,
        score=answer.score,
        correct=answer.correct,
        gray=answer.gray,
    )


def solution_to_structure(solution) -> Solution:
    return Solution(
        question_id=solution.question_id,
        result=solution.result,
        list_item_id=solution.list_item_id,
    )


def roster_to_structure(squad_members: Iterable) -> List[Squad]:
    """Group SquadMember rows of one season into squads.

    Args:
        squad_members: SquadMember instances with their squad selected

    Returns:
        Squads ordered by id, members ordered by user id
    """
    names: Dict[int, str] = {}
    members: Dict[int, List[SquadMember]] = {}
    for member in squad_members:
        names[member.squad_id] = member.squad.name
        members.setdefault(member.squad_id, []).append(
            SquadMember(user_id=member.user_id, is_captain=member.is_captain)
        )
    return [
        Squad(
            squad_id=squad_id,
            name=names[squad_id],
            members=tuple(sorted(members[squad_id], key=lambda m: m.user_id)),
        )
        for squad_id in sorted(members)
    ]
