"""
Margin ladder generation.

A margin question gives credit for values near a user's guess. The guess is
expanded into a ladder of candidate values, ``step_count`` steps of
``step_size`` on each side of the center. All arithmetic is done on integers
scaled by ``10 ** decimals`` so that rounding never produces near-duplicates.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Union
from dataclasses import dataclass

Number = Union[int, float, Decimal, str]


@dataclass(frozen=True)
class Variant:
    """One rung of a margin ladder."""

    value: Decimal
    is_center: bool = False


def as_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without picking up binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def decimals_from_step(step: Number) -> int:
    """How many decimals a step implies (0.5 -> 1, 0.25 -> 2, 60 -> 0)."""
    exponent = as_decimal(step).normalize().as_tuple().exponent
    return max(0, -exponent)


def _scaled(value: Decimal, decimals: int) -> Decimal:
    return value.scaleb(decimals).to_integral_value(rounding=ROUND_HALF_UP)


def generate_variants(
    center: Number,
    step_count: int,
    step_size: Number,
    decimals: int = 0,
    allow_negative: bool = True,
) -> List[Variant]:
    """Build the sorted, de-duplicated ladder around ``center``.

    Args:
        center: The user's guess, in the canonical unit of the question
        step_count: Number of steps on each side of the center
        step_size: Distance between two rungs; clamped to one unit of the
                   last decimal place when not positive
        decimals: Number of decimals every rung is rounded to
        allow_negative: Whether rungs below zero are kept (the center itself
                        is always kept)

    Returns:
        Variants in ascending order. Exactly one of them has ``is_center``.
    """
    decimals = max(0, int(decimals))
    steps = max(0, int(round(step_count)))

    c = _scaled(as_decimal(center), decimals)
    s = _scaled(as_decimal(step_size), decimals)
    if s < 1:
        s = Decimal(1)

    values = {c}
    for k in range(1, steps + 1):
        values.add(c - k * s)
        values.add(c + k * s)

    if not allow_negative:
        values = {v for v in values if v >= 0 or v == c}

    return [
        Variant(value=v.scaleb(-decimals), is_center=(v == c))
        for v in sorted(values)
    ]
