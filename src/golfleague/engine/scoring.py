"""
Points table and bonus-point arbitration.
Both are pure: they only see the numbers handed to them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from golfleague.core.errors import InvalidScoreError

if TYPE_CHECKING:
    from collections.abc import Iterable

MIN_RAW_SCORE = 50
MAX_RAW_SCORE = 150

# (lowest raw score in band, points), checked top down
POINT_BANDS: tuple[tuple[int, int], ...] = (
    (100, 0),
    (96, 1),
    (90, 2),
    (85, 3),
    (80, 4),
    (75, 5),
)
BELOW_BANDS_POINTS = 6


def points(raw_score: int) -> int:
    """Base points for a raw stroke count. Independent of the course par."""
    for floor, band_points in POINT_BANDS:
        if raw_score >= floor:
            return band_points
    return BELOW_BANDS_POINTS


def validate_raw_score(raw_score: object) -> int:
    # bool is an int subclass but never a stroke count
    if (
        isinstance(raw_score, bool)
        or not isinstance(raw_score, int)
        or not MIN_RAW_SCORE <= raw_score <= MAX_RAW_SCORE
    ):
        raise InvalidScoreError(raw_score, MIN_RAW_SCORE, MAX_RAW_SCORE)
    return raw_score


def arbitrate_bonus(round_scores: Iterable[tuple[str, int]]) -> dict[str, bool]:
    """
    Decide who holds the bonus point for one round.

    Args:
        round_scores: (player_id, raw_score) for every score currently in the round.

    Returns:
        player_id -> should hold the bonus. Every player tied at the lowest raw
        score holds it. Empty input gives an empty mapping.
    """
    entries = list(round_scores)
    if not entries:
        return {}
    lowest = min(raw for _, raw in entries)
    return {player_id: raw == lowest for player_id, raw in entries}


def preview_bonus(raw_score: int, existing_raw_scores: Iterable[int]) -> int:
    """
    Bonus the score would get if committed right now.
    Advisory only: another submission can land before the commit.
    """
    current_lowest = min(existing_raw_scores, default=None)
    return int(current_lowest is None or raw_score <= current_lowest)


def format_relative_to_par(raw_score: int, par: int) -> str:
    over = raw_score - par
    if over == 0:
        return "E"
    if over > 0:
        return f"+{over}"
    return str(over)
