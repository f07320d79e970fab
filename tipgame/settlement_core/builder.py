"""
Builder for creating prediction events with a fluent API.

This module provides a builder for in-memory events: bundles of questions,
players and their submissions, declared solutions and squads. Submissions go
through the same codecs and ladder generation as real ones, so a built event
looks exactly like one read back from the database.
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field, replace
from decimal import Decimal

from tipgame.settlement_core.bundles import resolve_bundles
from tipgame.settlement_core.codecs import codec_for
from tipgame.settlement_core.lookups import LookupCache
from tipgame.settlement_core.rules import SettlementRules, STANDARD_RULES
from tipgame.settlement_core.settlement import settle_bundle
from tipgame.settlement_core.structure import (
    Answer,
    Bundle,
    ListItem,
    Question,
    ResultType,
    SettlementReport,
    Solution,
    Squad,
    SquadMember,
)
from tipgame.settlement_core.submission import build_answer_rows


@dataclass
class Event:
    """An in-memory event with everything settlement needs."""

    event_id: int
    name: str = ""
    sequence: int = 1
    questions: List[Question] = field(default_factory=list)
    list_items: List[ListItem] = field(default_factory=list)
    answers: List[Answer] = field(default_factory=list)
    solutions: List[Solution] = field(default_factory=list)
    squads: List[Squad] = field(default_factory=list)
    rules: SettlementRules = STANDARD_RULES

    # For tracking questions/players by name
    question_keys: Dict[str, int] = field(default_factory=dict)
    players: Dict[str, int] = field(default_factory=dict)

    def question_id(self, key: str) -> int:
        if key not in self.question_keys:
            raise KeyError(f"Question '{key}' not found in event")
        return self.question_keys[key]

    def player_id(self, name: str) -> int:
        if name not in self.players:
            raise KeyError(f"Player '{name}' not found in event")
        return self.players[name]

    def bundles(self) -> List[Bundle]:
        return resolve_bundles(self.questions, self.rules)

    def bundle(self, group_code: int) -> Bundle:
        for bundle in self.bundles():
            if bundle.group_code == group_code:
                return bundle
        raise KeyError(group_code)

    def settle(self, group_code: int = 1) -> SettlementReport:
        return settle_bundle(self.bundle(group_code), self.solutions, self.answers)

    def settle_all(self) -> List[SettlementReport]:
        return [
            settle_bundle(bundle, self.solutions, self.answers)
            for bundle in self.bundles()
        ]

    def apply(self, report: SettlementReport) -> "Event":
        """Overwrite stored points with the allocations of a report."""
        by_answer = {a.answer_id: a for a in report.allocations}
        answers = []
        for answer in self.answers:
            allocation = by_answer.get(answer.answer_id)
            if allocation is None:
                answers.append(answer)
            else:
                answers.append(
                    replace(
                        answer,
                        points=allocation.points,
                        correct=allocation.correct,
                        score=allocation.score,
                    )
                )
        return replace(self, answers=answers)

    def scores_by_unit(self, margin_aware: bool = False) -> Dict[object, Dict[int, float]]:
        """Settled scores per unit and user.

        Each user counts once per question: with the correct row if any,
        otherwise with the posted row at 0.
        """
        chosen: Dict[Tuple[int, int], Answer] = {}
        for answer in sorted(
            self.answers, key=lambda a: (not a.correct, a.answer_id)
        ):
            if not (answer.correct or answer.posted):
                continue
            chosen.setdefault((answer.question_id, answer.user_id), answer)

        scores: Dict[object, Dict[int, float]] = {}
        for (question_id, user_id), answer in sorted(chosen.items()):
            unit = (question_id, answer.result) if margin_aware else question_id
            scores.setdefault(unit, {})[user_id] = (
                answer.score if answer.correct else 0.0
            )
        return scores


class EventBuilder:
    """Builder for creating prediction events easily."""

    def __init__(self, event_id: int = 1, rules: SettlementRules = STANDARD_RULES):
        self.event = Event(event_id=event_id, rules=rules)
        self._current_main: Optional[Question] = None
        self._next_group_code = 1
        self._next_question_id = 1
        self._next_list_item_id = 1
        self._next_answer_id = 1
        self._next_player_id = 1
        self._next_squad_id = 1
        self.lookups = LookupCache(self._find_question, self._find_list_item)

    # Event metadata

    def named(self, name: str, sequence: int = 1) -> "EventBuilder":
        self.event.name = name
        self.event.sequence = sequence
        return self

    # Questions

    def main(
        self,
        key: str,
        result_type: ResultType = ResultType.EXACT_TEXT,
        points: float = 20,
        group_code: Optional[int] = None,
        **kwargs,
    ) -> "EventBuilder":
        """Start a new bundle with its main question."""
        if group_code is None:
            group_code = self._next_group_code
        self._next_group_code = max(self._next_group_code, group_code) + 1
        self._current_main = self._add_question(
            key, result_type, points, group_code, parent_id=None, **kwargs
        )
        return self

    def sub(
        self, key: str, result_type: ResultType = ResultType.EXACT_TEXT, **kwargs
    ) -> "EventBuilder":
        """Add a zero-point sub question to the current bundle."""
        main = self._require_main()
        self._add_question(
            key, result_type, 0, main.group_code, parent_id=main.question_id, **kwargs
        )
        return self

    def bonus(
        self,
        key: str,
        points: float,
        result_type: ResultType = ResultType.EXACT_TEXT,
        **kwargs,
    ) -> "EventBuilder":
        """Add a bonus question to the current bundle."""
        main = self._require_main()
        self._add_question(
            key, result_type, points, main.group_code, parent_id=main.question_id, **kwargs
        )
        return self

    def orphan(
        self,
        key: str,
        group_code: int,
        result_type: ResultType = ResultType.EXACT_TEXT,
        points: float = 20,
        **kwargs,
    ) -> "EventBuilder":
        """Add a parent-less question to an existing group (a data anomaly)."""
        self._add_question(key, result_type, points, group_code, parent_id=None, **kwargs)
        return self

    def list_item(self, question_key: str, label: str) -> "EventBuilder":
        question_id = self.event.question_id(question_key)
        self.event.list_items.append(
            ListItem(list_item_id=self._next_list_item_id, question_id=question_id, label=label)
        )
        self._next_list_item_id += 1
        return self

    # Players and submissions

    def player(self, name: str) -> "EventBuilder":
        self._get_or_create_player_id(name)
        return self

    def answer(
        self, player: str, question_key: str, raw_input: str, gray: bool = False
    ) -> "EventBuilder":
        """Submit an answer; margin questions replace the player's whole ladder."""
        question = self.lookups.question(self.event.question_id(question_key))
        user_id = self._get_or_create_player_id(player)
        list_item_id = None
        if question.compares_list_items:
            list_item_id = self._list_item_id(question.question_id, raw_input)

        drafts = build_answer_rows(
            question,
            user_id,
            raw_input,
            codec_for(question, self.lookups),
            list_item_id=list_item_id,
        )

        self.event.answers = [
            a
            for a in self.event.answers
            if not (a.question_id == question.question_id and a.user_id == user_id)
        ]
        for draft in drafts:
            self.event.answers.append(
                Answer(
                    answer_id=self._next_answer_id,
                    question_id=draft.question_id,
                    user_id=draft.user_id,
                    result=draft.result,
                    label=draft.label,
                    posted=draft.posted,
                    list_item_id=draft.list_item_id,
                    gray=gray,
                )
            )
            self._next_answer_id += 1
        return self

    def solution(self, question_key: str, raw_result: str) -> "EventBuilder":
        """Declare an accepted solution; call again to accept alternatives."""
        question = self.lookups.question(self.event.question_id(question_key))
        list_item_id = None
        if question.compares_list_items:
            list_item_id = self._list_item_id(question.question_id, raw_result)
            result = codec_for(question, self.lookups).encode(list_item_id)
        else:
            result = codec_for(question, self.lookups).encode(raw_result)
        self.event.solutions.append(
            Solution(
                question_id=question.question_id,
                result=result,
                list_item_id=list_item_id,
            )
        )
        return self

    def correct_solution(self, question_key: str, raw_result: str) -> "EventBuilder":
        """Replace every accepted solution of a question."""
        question_id = self.event.question_id(question_key)
        self.event.solutions = [
            s for s in self.event.solutions if s.question_id != question_id
        ]
        return self.solution(question_key, raw_result)

    # Squads

    def squad(
        self, name: str, *players: str, captain: Optional[str] = None
    ) -> "EventBuilder":
        members: Tuple[SquadMember, ...] = tuple(
            SquadMember(
                user_id=self._get_or_create_player_id(p), is_captain=(p == captain)
            )
            for p in players
        )
        self.event.squads.append(
            Squad(squad_id=self._next_squad_id, name=name, members=members)
        )
        self._next_squad_id += 1
        return self

    def build(self) -> Event:
        return self.event

    # Helpers

    def _add_question(
        self,
        key: str,
        result_type: ResultType,
        points: float,
        group_code: int,
        parent_id: Optional[int],
        margin: Optional[int] = None,
        step=None,
        decimals: Optional[int] = None,
        lineup: Optional[int] = None,
    ) -> Question:
        question = Question(
            question_id=self._next_question_id,
            event_id=self.event.event_id,
            group_code=group_code,
            result_type=result_type,
            points=float(points),
            parent_id=parent_id,
            lineup=self._next_question_id if lineup is None else lineup,
            margin=margin,
            step=Decimal(str(step)) if step is not None else None,
            decimals=decimals,
        )
        self._next_question_id += 1
        self.event.questions.append(question)
        self.event.question_keys[key] = question.question_id
        return question

    def _require_main(self) -> Question:
        if self._current_main is None:
            raise ValueError("Add a main question first")
        return self._current_main

    def _get_or_create_player_id(self, name: str) -> int:
        if name not in self.event.players:
            self.event.players[name] = self._next_player_id
            self._next_player_id += 1
        return self.event.players[name]

    def _list_item_id(self, question_id: int, label: str) -> int:
        for item in self.event.list_items:
            if item.question_id == question_id and item.label == label:
                return item.list_item_id
        raise KeyError(f"List item '{label}' not found for question {question_id}")

    def _find_question(self, question_id: int) -> Optional[Question]:
        for question in self.event.questions:
            if question.question_id == question_id:
                return question
        return None

    def _find_list_item(self, list_item_id: int) -> Optional[ListItem]:
        for item in self.event.list_items:
            if item.list_item_id == list_item_id:
                return item
        return None
