"""
Season awards and head-to-head comparison.
Read-only aggregation over every score of a season, grouped with Polars.

Award ties go to the first player reaching the winning value in traversal
order, which is the order players first appear in the season's scores
(submission time ascending). This mirrors how the scores are fetched, so it is
order dependent by construction.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import polars as pl

from golfleague.core.errors import PlayerNotFoundError, SeasonNotFoundError
from golfleague.engine.scoring import format_relative_to_par

if TYPE_CHECKING:
    import datetime

    from golfleague.core.protocols import LeagueStore
    from golfleague.core.types import RoundWinner
    from golfleague.store.models import LeaderboardRow, RoundEntry

logger = logging.getLogger(__name__)

MIN_ROUNDS_IMPROVED = 4
MIN_ROUNDS_CONSISTENT = 3

SCORE_SCHEMA = {
    "player_id": pl.String,
    "username": pl.String,
    "game_id": pl.String,
    "raw_score": pl.Int64,
    "course_par": pl.Int64,
    "total_points": pl.Int64,
}


@dataclass(slots=True)
class PlayerAward:
    player_id: str
    username: str
    value: float
    display: str


@dataclass(slots=True)
class SeasonSummary:
    mvp: PlayerAward | None = None
    most_improved: PlayerAward | None = None
    most_consistent: PlayerAward | None = None
    best_round: PlayerAward | None = None
    total_rounds: int = 0
    total_players: int = 0


@dataclass(slots=True)
class PlayerSeasonStats:
    player_id: str
    games_played: int = 0
    avg_score: float = 0.0
    total_points: int = 0
    best_score: int | None = None


@dataclass(slots=True)
class SharedGame:
    game_id: str
    game_name: str
    game_date: datetime.date
    p1_score: int
    p2_score: int
    winner: RoundWinner


@dataclass(slots=True)
class HeadToHeadRecord:
    p1_wins: int = 0
    p2_wins: int = 0
    ties: int = 0


@dataclass(slots=True)
class HeadToHead:
    player1_stats: PlayerSeasonStats
    player2_stats: PlayerSeasonStats
    shared_games: list[SharedGame] = field(default_factory=list)
    record: HeadToHeadRecord = field(default_factory=HeadToHeadRecord)


def scores_frame(entries: list[RoundEntry]) -> pl.DataFrame:
    return pl.DataFrame(
        [
            (
                e.player_id,
                e.username,
                e.game_id,
                e.raw_score,
                e.course_par,
                e.total_points,
            )
            for e in entries
        ],
        schema=SCORE_SCHEMA,
        orient="row",
    )


def per_player(df: pl.DataFrame) -> pl.DataFrame:
    """One row per player, in order of first appearance."""
    return df.group_by("player_id", maintain_order=True).agg(
        pl.col("username").first(),
        pl.len().alias("rounds"),
        pl.col("total_points").sum(),
        pl.col("raw_score").mean().alias("avg_score"),
        pl.col("raw_score").min().alias("best_score"),
        pl.col("raw_score").std(ddof=0).alias("std_dev"),
        pl.col("raw_score").alias("raw_scores"),
        pl.col("course_par").alias("pars"),
    )


def improvement(raw_scores: list[int]) -> float:
    """First-half average minus second-half average, chronological halves."""
    mid = len(raw_scores) // 2
    first, second = raw_scores[:mid], raw_scores[mid:]
    return sum(first) / len(first) - sum(second) / len(second)


def _mvp(players: list[dict]) -> PlayerAward | None:
    award: PlayerAward | None = None
    for p in players:
        if award is None or p["total_points"] > award.value:
            award = PlayerAward(
                p["player_id"],
                p["username"],
                p["total_points"],
                f"{p['total_points']} pts",
            )
    return award


def _most_improved(players: list[dict]) -> PlayerAward | None:
    award: PlayerAward | None = None
    for p in players:
        if p["rounds"] < MIN_ROUNDS_IMPROVED:
            continue
        drop = improvement(p["raw_scores"])
        if drop > 0 and (award is None or drop > award.value):
            award = PlayerAward(p["player_id"], p["username"], drop, f"{drop:.1f} strokes")
    return award


def _most_consistent(players: list[dict]) -> PlayerAward | None:
    award: PlayerAward | None = None
    for p in players:
        if p["rounds"] < MIN_ROUNDS_CONSISTENT:
            continue
        std_dev = p["std_dev"]
        if award is None or std_dev < award.value:
            award = PlayerAward(p["player_id"], p["username"], std_dev, f"{std_dev:.1f} std dev")
    return award


def _best_round(players: list[dict]) -> PlayerAward | None:
    award: PlayerAward | None = None
    best_relative = math.inf
    for p in players:
        for raw, par in zip(p["raw_scores"], p["pars"], strict=True):
            if raw - par < best_relative:
                best_relative = raw - par
                award = PlayerAward(
                    p["player_id"],
                    p["username"],
                    raw,
                    f"{raw} ({format_relative_to_par(raw, par)})",
                )
    return award


def summarize_season(entries: list[RoundEntry], total_rounds: int) -> SeasonSummary:
    """
    Compute the four season awards.

    Args:
        entries: Every score in the season, oldest submission first.
        total_rounds: Number of rounds scheduled in the season.
    """
    if total_rounds == 0 or not entries:
        return SeasonSummary()

    players = per_player(scores_frame(entries)).to_dicts()
    return SeasonSummary(
        mvp=_mvp(players),
        most_improved=_most_improved(players),
        most_consistent=_most_consistent(players),
        best_round=_best_round(players),
        total_rounds=total_rounds,
        total_players=len(players),
    )


def player_stats(player_id: str, entries: list[RoundEntry]) -> PlayerSeasonStats:
    if not entries:
        return PlayerSeasonStats(player_id)
    row = per_player(scores_frame(entries)).row(0, named=True)
    return PlayerSeasonStats(
        player_id=player_id,
        games_played=row["rounds"],
        avg_score=row["avg_score"],
        total_points=row["total_points"],
        best_score=row["best_score"],
    )


def compare_players(
    p1_entries: list[RoundEntry],
    p2_entries: list[RoundEntry],
    player1_id: str,
    player2_id: str,
) -> HeadToHead:
    """Per shared round the lower raw score wins; equal raw scores tie."""
    p2_by_game = {e.game_id: e for e in p2_entries}
    result = HeadToHead(
        player1_stats=player_stats(player1_id, p1_entries),
        player2_stats=player_stats(player2_id, p2_entries),
    )

    for mine in sorted(p1_entries, key=lambda e: (e.game_date, e.submitted_at)):
        theirs = p2_by_game.get(mine.game_id)
        if theirs is None:
            continue
        winner: RoundWinner
        if mine.raw_score < theirs.raw_score:
            winner = "p1"
            result.record.p1_wins += 1
        elif theirs.raw_score < mine.raw_score:
            winner = "p2"
            result.record.p2_wins += 1
        else:
            winner = "tie"
            result.record.ties += 1
        result.shared_games.append(
            SharedGame(
                game_id=mine.game_id,
                game_name=mine.game_name,
                game_date=mine.game_date,
                p1_score=mine.raw_score,
                p2_score=theirs.raw_score,
                winner=winner,
            ),
        )
    return result


class SeasonAnalytics:
    """Store-backed entry points for the season views."""

    def __init__(self, store: LeagueStore) -> None:
        self.store: LeagueStore = store

    def _require_season(self, season_id: str) -> None:
        if self.store.get_season(season_id) is None:
            raise SeasonNotFoundError(season_id)

    def get_season_summary(self, season_id: str) -> SeasonSummary:
        self._require_season(season_id)
        summary = summarize_season(
            self.store.get_season_scores(season_id),
            self.store.count_season_games(season_id),
        )
        logger.debug(
            f"Season {season_id}: {summary.total_rounds} rounds, {summary.total_players} players",
        )
        return summary

    def get_head_to_head(
        self,
        player1_id: str,
        player2_id: str,
        season_id: str,
    ) -> HeadToHead:
        self._require_season(season_id)
        for player_id in (player1_id, player2_id):
            if self.store.get_player(player_id) is None:
                raise PlayerNotFoundError(player_id)
        return compare_players(
            self.store.get_player_history(player1_id, season_id),
            self.store.get_player_history(player2_id, season_id),
            player1_id,
            player2_id,
        )

    def get_leaderboard(self, season_id: str) -> list[LeaderboardRow]:
        self._require_season(season_id)
        return self.store.get_season_leaderboard(season_id)
