"""
Configurable settlement rules.

This module defines the point ceiling a bundle shares between its main
question and its bonus questions, and how settled totals are rounded.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SettlementRules:
    """Defines how bundle budgets are split and how totals are rounded."""

    # Main points + remainder split across bonus questions
    bundle_ceiling: float = 20.0

    # Squad totals are rounded before seeding
    score_decimals: int = 2

    def bonus_remainder(self, main_points: float) -> float:
        """Points left for the bonus questions once the main has its share."""
        return max(0.0, self.bundle_ceiling - main_points)

    def round_score(self, value: float) -> float:
        return round(value, self.score_decimals)


STANDARD_RULES = SettlementRules()
