"""
Fluent assertion interface for testing settlement reports.

This module provides a clean way to assert what a settlement run allocated,
per player and per question, using the names given to an event's players and
questions by the builder.
"""

from typing import List, Optional
from dataclasses import dataclass

from tipgame.settlement_core.builder import Event
from tipgame.settlement_core.structure import (
    PointAllocation,
    SettlementReport,
    SettlementStatus,
)

TOLERANCE = 1e-9


@dataclass
class ReportAssertion:
    """Fluent interface for asserting a settlement report."""

    report: SettlementReport
    event: Event

    def settled(self) -> "ReportAssertion":
        if self.report.status != SettlementStatus.SETTLED:
            raise AssertionError(
                f"Bundle {self.report.group_code} expected settled, got {self.report.status.value}"
            )
        return self

    def pending(self) -> "ReportAssertion":
        if self.report.status != SettlementStatus.PENDING:
            raise AssertionError(
                f"Bundle {self.report.group_code} expected pending, got {self.report.status.value}"
            )
        if self.report.allocations:
            raise AssertionError("A pending report must not carry allocations")
        return self

    def total_points(self, expected: float) -> "ReportAssertion":
        actual = self.report.total_points()
        if abs(actual - expected) > TOLERANCE:
            raise AssertionError(f"Expected {expected} points in total, got {actual}")
        return self

    def covers_every_answer(self) -> "ReportAssertion":
        """Every answer row of the bundle has exactly one allocation."""
        question_ids = set(self.event.bundle(self.report.group_code).question_ids)
        expected = sorted(
            a.answer_id for a in self.event.answers if a.question_id in question_ids
        )
        actual = [a.answer_id for a in self.report.allocations]
        if actual != expected:
            raise AssertionError(f"Expected allocations for {expected}, got {actual}")
        return self

    def player(self, name: str) -> "PlayerAssertion":
        return PlayerAssertion(
            report=self.report, event=self.event, user_id=self.event.player_id(name), name=name
        )


@dataclass
class PlayerAssertion(ReportAssertion):
    """Assertions on the allocations of one player."""

    user_id: int = 0
    name: str = ""

    def _allocations(self, question: Optional[str]) -> List[PointAllocation]:
        allocations = [a for a in self.report.allocations if a.user_id == self.user_id]
        if question is not None:
            question_id = self.event.question_id(question)
            allocations = [a for a in allocations if a.question_id == question_id]
        return allocations

    def points(self, expected: float, question: Optional[str] = None) -> "PlayerAssertion":
        """Assert the player's points, for one question or the whole bundle."""
        actual = sum(a.points for a in self._allocations(question))
        if abs(actual - expected) > TOLERANCE:
            where = f" on {question}" if question else ""
            raise AssertionError(
                f"{self.name} expected {expected} points{where}, got {actual}"
            )
        return self

    def correct(self, question: str) -> "PlayerAssertion":
        if not any(a.correct for a in self._allocations(question)):
            raise AssertionError(f"{self.name} expected to be correct on {question}")
        return self

    def incorrect(self, question: str) -> "PlayerAssertion":
        if any(a.correct for a in self._allocations(question)):
            raise AssertionError(f"{self.name} expected to be incorrect on {question}")
        return self

    def winning_label(self, question: str, label: str) -> "PlayerAssertion":
        """Assert which answer row carries the player's points."""
        winners = [a for a in self._allocations(question) if a.correct]
        if len(winners) != 1:
            raise AssertionError(
                f"{self.name} expected one winning row on {question}, got {len(winners)}"
            )
        answers = {a.answer_id: a for a in self.event.answers}
        actual = answers[winners[0].answer_id].label
        if actual != label:
            raise AssertionError(
                f"{self.name} expected winning row '{label}' on {question}, got '{actual}'"
            )
        return self


def assert_report(report: SettlementReport, event: Event) -> ReportAssertion:
    """Entry point for settlement assertions."""
    return ReportAssertion(report, event)
