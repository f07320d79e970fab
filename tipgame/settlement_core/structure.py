"""
Core structures for representing questions, answers and settlement results.

This module provides a simple, clean way to represent a prediction event with:
- Questions grouped into bundles (main, sub and bonus questions)
- Answers, including the margin-ladder rows generated from a guess
- Solutions declared by the organisers
- Point allocations produced by settlement
- Squads and their standings
"""

from decimal import Decimal
from typing import Dict, Hashable, List, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum


class ResultType(Enum):
    """How the answers of a question are encoded."""

    EXACT_TEXT = "text"
    LIST_SELECTION = "list"
    NUMERIC = "number"
    DECIMAL = "decimal"
    TIME = "time"
    LENGTH = "length"
    SCORE_WITH_DRAW = "score"


class QuestionRole(Enum):
    """Role of a question inside its bundle."""

    MAIN = "main"
    SUB = "sub"
    BONUS = "bonus"


@dataclass(frozen=True)
class Question:
    """A single question of an event."""

    question_id: int
    event_id: int
    group_code: int
    result_type: ResultType
    points: float = 0.0
    parent_id: Optional[int] = None  # None for main questions
    lineup: int = 0
    margin: Optional[int] = None  # number of steps on each side of a guess
    step: Optional[Decimal] = None  # step size, same unit as the canonical result
    decimals: Optional[int] = None

    @property
    def is_main(self) -> bool:
        return self.parent_id is None

    @property
    def has_margin(self) -> bool:
        """Margin questions give credit for nearby values on a step ladder."""
        return self.margin is not None and self.step is not None

    @property
    def compares_list_items(self) -> bool:
        return self.result_type == ResultType.LIST_SELECTION


@dataclass(frozen=True)
class ListItem:
    """A selectable option of a list question."""

    list_item_id: int
    question_id: int
    label: str


@dataclass(frozen=True)
class Answer:
    """One stored answer row.

    Exactly one row per (question, user) is posted; the others are margin
    variants generated from the posted guess.
    """

    answer_id: int
    question_id: int
    user_id: int
    result: str
    label: str
    posted: bool = True
    list_item_id: Optional[int] = None
    points: float = 0.0
    score: float = 0.0
    correct: bool = False
    gray: bool = False  # struck out by a correction workflow


@dataclass(frozen=True)
class Solution:
    """An accepted official result for a question."""

    question_id: int
    result: str
    list_item_id: Optional[int] = None


@dataclass(frozen=True)
class Bundle:
    """All questions sharing one group code.

    A regular bundle has exactly one main question. When the stored data has
    zero or several parent-less questions the bundle is a fallback bundle and
    every question is settled on its own.
    """

    event_id: int
    group_code: int
    main: Optional[Question] = None
    subs: Tuple[Question, ...] = ()
    bonuses: Tuple[Question, ...] = ()
    independents: Tuple[Question, ...] = ()  # fallback bundles only
    is_fallback: bool = False
    bundle_ceiling: float = 20.0
    warnings: Tuple[str, ...] = ()

    @property
    def questions(self) -> List[Question]:
        """All questions of the bundle in lineup order."""
        if self.is_fallback:
            return list(self.independents)
        return [self.main] + list(self.subs) + list(self.bonuses)

    @property
    def question_ids(self) -> List[int]:
        return [q.question_id for q in self.questions]

    @property
    def required_question_ids(self) -> List[int]:
        """Questions that need an accepted solution before the bundle settles."""
        return [q.question_id for q in self.questions if q.is_main]

    @property
    def has_subs(self) -> bool:
        return len(self.subs) > 0

    @property
    def has_bonuses(self) -> bool:
        return len(self.bonuses) > 0

    def question(self, question_id: int) -> Question:
        for q in self.questions:
            if q.question_id == question_id:
                return q
        raise KeyError(question_id)

    def role(self, question_id: int) -> QuestionRole:
        question = self.question(question_id)
        if question.is_main:
            return QuestionRole.MAIN
        return QuestionRole.SUB if question.points == 0 else QuestionRole.BONUS

    def point_share(self, question_id: int) -> float:
        """Points one question of this bundle distributes among its winners.

        For bonus questions this is the share of one bonus slot before it is
        divided among the bundle winners.
        """
        question = self.question(question_id)
        if self.is_fallback:
            return self.bundle_ceiling if question.is_main else 0.0
        role = self.role(question_id)
        if role == QuestionRole.MAIN:
            return float(question.points)
        if role == QuestionRole.SUB:
            return 0.0
        remainder = max(0.0, self.bundle_ceiling - float(self.main.points))
        return remainder / len(self.bonuses)


@dataclass(frozen=True)
class PointAllocation:
    """Settled values for one answer row. Callers overwrite, never add."""

    answer_id: int
    question_id: int
    user_id: int
    points: float
    correct: bool
    score: float


class SettlementStatus(Enum):
    SETTLED = "settled"
    PENDING = "pending"  # no accepted solution yet
    FAILED = "failed"


@dataclass(frozen=True)
class SettlementReport:
    """Outcome of settling one bundle."""

    event_id: int
    group_code: int
    status: SettlementStatus
    allocations: Tuple[PointAllocation, ...] = ()
    pending_question_ids: Tuple[int, ...] = ()
    warnings: Tuple[str, ...] = ()
    message: str = ""

    @property
    def is_settled(self) -> bool:
        return self.status == SettlementStatus.SETTLED

    def total_points(self) -> float:
        return sum(a.points for a in self.allocations)

    def points_by_user(self) -> Dict[int, float]:
        """Sum of points per user across the bundle."""
        totals: Dict[int, float] = {}
        for allocation in self.allocations:
            totals[allocation.user_id] = (
                totals.get(allocation.user_id, 0.0) + allocation.points
            )
        return totals


@dataclass(frozen=True)
class SquadMember:
    """A player on a squad roster."""

    user_id: int
    is_captain: bool = False


@dataclass(frozen=True)
class Squad:
    """A squad roster for one season."""

    squad_id: int
    name: str = ""
    members: Tuple[SquadMember, ...] = ()

    @property
    def size(self) -> int:
        return len(self.members)


# A scoring unit is a question id, or (question id, result) in the
# margin-aware view.
UnitKey = Hashable


@dataclass(frozen=True)
class SquadTotals:
    """Normalized total of a squad across all scoring units."""

    squad_id: int
    total_score: float
    per_user_contribution: Dict[int, float] = field(default_factory=dict)


@dataclass(frozen=True)
class SquadStanding:
    """A squad's position in a snapshot."""

    squad_id: int
    name: str
    score: float
    seed: int = 0
    previous_seed: int = 0
    previous_score: float = 0.0
    movement: int = 0
    per_user_contribution: Dict[int, float] = field(default_factory=dict)

    @property
    def evolution(self) -> str:
        if self.movement > 0:
            return "up"
        if self.movement < 0:
            return "down"
        return "equal"
