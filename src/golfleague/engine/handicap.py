"""
Simplified handicap index.

A differential is raw score minus course par (no course rating or slope).
The number of best differentials used follows the USGA step table, and the
average of those is scaled by 0.96. This is an approximation, not an
official handicap.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tqdm import tqdm

from golfleague.core.errors import PlayerNotFoundError, StoreError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from golfleague.core.protocols import LeagueStore

logger = logging.getLogger(__name__)

MIN_RATED_ROUNDS = 5
EXCELLENCE_FACTOR = 0.96

# (max total rounds, best differentials used); 20+ rounds use 8
BEST_DIFFERENTIALS_TABLE: tuple[tuple[int, int], ...] = (
    (6, 1),
    (8, 2),
    (11, 3),
    (14, 4),
    (16, 5),
    (18, 6),
    (19, 7),
)
MAX_BEST_DIFFERENTIALS = 8


def best_differential_count(total_rounds: int) -> int:
    if total_rounds < MIN_RATED_ROUNDS:
        return 0
    for max_rounds, count in BEST_DIFFERENTIALS_TABLE:
        if total_rounds <= max_rounds:
            return count
    return MAX_BEST_DIFFERENTIALS


def _round_half_up(value: float, digits: int = 1) -> float:
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def calculate_handicap(rounds: Sequence[tuple[int, int]]) -> float | None:
    """
    Handicap index from a player's entire history.

    Args:
        rounds: (raw_score, course_par) for every round the player has played.

    Returns:
        The index rounded to one decimal, or None when the player has fewer
        than five rounds and is not ratable.
    """
    total_rounds = len(rounds)
    if total_rounds < MIN_RATED_ROUNDS:
        return None

    differentials = sorted(raw - par for raw, par in rounds)
    best = differentials[: best_differential_count(total_rounds)]
    average = sum(best) / len(best)
    return _round_half_up(average * EXCELLENCE_FACTOR)


def format_handicap(handicap: float | None) -> str:
    if handicap is None:
        return "N/A"
    sign = "+" if handicap > 0 else ""
    return f"{sign}{handicap:.1f}"


def handicap_category(handicap: float | None) -> str:
    if handicap is None:
        return "Unrated"
    if handicap <= 0:
        return "Scratch or Better"
    if handicap <= 5:
        return "Low Handicap"
    if handicap <= 10:
        return "Mid Handicap"
    if handicap <= 20:
        return "Average Handicap"
    return "High Handicap"


def update_player_handicap(store: LeagueStore, player_id: str) -> float | None:
    """Recompute from the full history and overwrite the stored value."""
    if store.get_player(player_id) is None:
        raise PlayerNotFoundError(player_id)

    history = store.get_player_history(player_id)
    handicap = calculate_handicap([(e.raw_score, e.course_par) for e in history])
    store.set_handicap(player_id, handicap)
    logger.info(
        f"Handicap for {player_id}: {format_handicap(handicap)} ({len(history)} rounds)",
    )
    return handicap


@dataclass(slots=True)
class HandicapRefresh:
    updated: dict[str, float | None] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)


def recalculate_all_handicaps(
    store: LeagueStore,
    player_ids: Iterable[str] | None = None,
) -> HandicapRefresh:
    """Refresh every player's handicap. One player's failure does not stop the rest."""
    if player_ids is None:
        player_ids = [p.id for p in store.list_players()]

    report = HandicapRefresh()
    for player_id in tqdm(list(player_ids), desc="Handicaps", unit="player"):
        try:
            report.updated[player_id] = update_player_handicap(store, player_id)
        except (StoreError, PlayerNotFoundError) as e:
            logger.warning(f"!!! Handicap refresh failed for {player_id}: {e}")
            report.failed[player_id] = str(e)
    return report
