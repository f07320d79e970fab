"""
Squad totals and standings.

A squad's total is built unit by unit (a unit is one question, or one
question/result pair in the margin-aware view):
- the captain's score counts double
- with two or more contributing members the lowest contribution is dropped
- the surviving sum is scaled by smallest squad size / this squad's size

Standings rank squads by total: equal totals share a seed and the next
distinct total continues at previous seed + size of the tie group.
"""

from typing import Dict, Iterable, List, Mapping, Optional
from dataclasses import replace

from tipgame.settlement_core.rules import SettlementRules, STANDARD_RULES
from tipgame.settlement_core.structure import (
    Squad,
    SquadStanding,
    SquadTotals,
    UnitKey,
)

# unit -> user id -> settled score
ScoresByUnit = Mapping[UnitKey, Mapping[int, float]]


def smallest_squad_size(squads: Iterable[Squad]) -> int:
    """Size of the smallest non-empty squad, 0 when every squad is empty."""
    sizes = [squad.size for squad in squads if squad.size > 0]
    return min(sizes) if sizes else 0


def normalize_squad(
    squad: Squad, scores_by_unit: ScoresByUnit, smallest_size: int
) -> SquadTotals:
    """
    Calculate the normalized total of one squad.

    Args:
        squad: The squad with its roster
        scores_by_unit: Settled scores per unit and user; members without an
                        entry for a unit do not contribute to it
        smallest_size: Smallest non-empty squad size in the season

    Returns:
        The squad total and each member's accumulated, captain-weighted
        contribution (dropped contributions included)
    """
    if squad.size == 0 or not scores_by_unit:
        return SquadTotals(squad_id=squad.squad_id, total_score=0.0)

    factor = smallest_size / squad.size if smallest_size > 0 else 1.0
    total = 0.0
    per_user: Dict[int, float] = {}

    for unit_scores in scores_by_unit.values():
        contributions = []
        for member in squad.members:
            if member.user_id not in unit_scores:
                continue
            value = float(unit_scores[member.user_id] or 0.0)
            if member.is_captain:
                value *= 2
            contributions.append((value, member.user_id))
            per_user[member.user_id] = per_user.get(member.user_id, 0.0) + value

        if not contributions:
            continue
        if len(contributions) >= 2:
            # Lowest value goes first, lowest user id among equal values
            contributions.sort()
            contributions = contributions[1:]
        total += sum(value for value, _ in contributions) * factor

    return SquadTotals(
        squad_id=squad.squad_id, total_score=total, per_user_contribution=per_user
    )


def assign_seeds(standings: List[SquadStanding]) -> List[SquadStanding]:
    """Order standings by score and assign competition-style seeds."""
    ordered = sorted(standings, key=lambda s: (-s.score, s.name.lower(), s.squad_id))
    seeded = []
    seed = 0
    last_score: Optional[float] = None
    for index, standing in enumerate(ordered):
        if last_score is None or standing.score < last_score:
            seed = index + 1
            last_score = standing.score
        seeded.append(replace(standing, seed=seed))
    return seeded


def apply_movement(
    current: List[SquadStanding], previous: Optional[List[SquadStanding]]
) -> List[SquadStanding]:
    """Attach previous seeds and scores; movement is previous seed - seed.

    Without a previous snapshot every squad keeps its current seed as its
    previous seed, so nobody moves.
    """
    previous_by_squad = {s.squad_id: s for s in previous or []}
    result = []
    for standing in current:
        before = previous_by_squad.get(standing.squad_id)
        previous_seed = before.seed if before is not None else standing.seed
        previous_score = before.score if before is not None else 0.0
        result.append(
            replace(
                standing,
                previous_seed=previous_seed,
                previous_score=previous_score,
                movement=previous_seed - standing.seed,
            )
        )
    return result


def _standings_for(
    squads: List[Squad],
    scores_by_unit: ScoresByUnit,
    smallest_size: int,
    rules: SettlementRules,
) -> List[SquadStanding]:
    standings = []
    for squad in squads:
        totals = normalize_squad(squad, scores_by_unit, smallest_size)
        standings.append(
            SquadStanding(
                squad_id=squad.squad_id,
                name=squad.name,
                score=rules.round_score(totals.total_score),
                per_user_contribution={
                    user_id: rules.round_score(value)
                    for user_id, value in totals.per_user_contribution.items()
                },
            )
        )
    return assign_seeds(standings)


def build_squad_standings(
    squads: Iterable[Squad],
    scores_by_unit: ScoresByUnit,
    previous_scores_by_unit: Optional[ScoresByUnit] = None,
    rules: SettlementRules = STANDARD_RULES,
) -> List[SquadStanding]:
    """
    Build the seeded standings of a season's squads.

    Args:
        squads: All squads of the season
        scores_by_unit: Settled scores up to the current sequence
        previous_scores_by_unit: Settled scores up to the previous sequence,
                                 None when there is no previous sequence
        rules: Rounding rules for the totals

    Returns:
        Standings in seed order
    """
    squads = list(squads)
    smallest = smallest_squad_size(squads)
    current = _standings_for(squads, scores_by_unit, smallest, rules)
    previous = None
    if previous_scores_by_unit is not None:
        previous = _standings_for(squads, previous_scores_by_unit, smallest, rules)
    return apply_movement(current, previous)
