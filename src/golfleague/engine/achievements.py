"""
Achievement detection.

Each catalog entry in `ACHIEVEMENT_RULES` names a metric and a rule type.
Metrics are computed from the player's history; evaluators compare the metric
with the rule's target. Adding an achievement means adding a catalog entry,
plus a metric or evaluator only when a new kind of check is needed.

Earning is permanent. Awarding an already earned (player, key, scope) is a
no-op reported as `already_earned`.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import msgspec

from golfleague.core.registry import ACHIEVEMENT_RULES, AchievementRule

if TYPE_CHECKING:
    from collections.abc import Callable

    from golfleague.core.protocols import LeagueStore
    from golfleague.core.types import AchievementKey, MetricName, RuleType
    from golfleague.store.models import LeaderboardRow, RoundEntry

logger = logging.getLogger(__name__)

RECENT_WINDOW = 5


@dataclass(slots=True)
class AchievementContext:
    """Everything the metrics read. History lists are oldest first."""

    player_id: str
    all_scores: list[RoundEntry]
    season_id: str | None = None
    season_scores: list[RoundEntry] | None = None
    leaderboard: list[LeaderboardRow] | None = None


@dataclass(slots=True)
class AwardResult:
    key: AchievementKey
    season_id: str | None
    already_earned: bool


@dataclass(slots=True)
class Progress:
    current: float
    target: float
    label: str


# ------------------------------------------------------------------
# Metrics
# ------------------------------------------------------------------


def best_bonus_streak(scores: list[RoundEntry]) -> int:
    """Longest run of consecutive bonus rounds, walking oldest to newest."""
    best = current = 0
    for entry in sorted(scores, key=lambda e: e.submitted_at):
        if entry.bonus_points > 0:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


def _latest(scores: list[RoundEntry]) -> RoundEntry | None:
    return max(scores, key=lambda e: e.submitted_at, default=None)


def _recent_spread(ctx: AchievementContext) -> int | None:
    if len(ctx.all_scores) < RECENT_WINDOW:
        return None
    recent = sorted(ctx.all_scores, key=lambda e: e.submitted_at)[-RECENT_WINDOW:]
    raws = [e.raw_score for e in recent]
    return max(raws) - min(raws)


def _submission_delay_hours(ctx: AchievementContext) -> float | None:
    latest = _latest(ctx.all_scores)
    if latest is None:
        return None
    played = datetime.datetime.combine(latest.game_date, datetime.time())
    return (latest.submitted_at - played).total_seconds() / 3600


def _season_points(ctx: AchievementContext) -> int | None:
    if not ctx.season_scores:
        return None
    return sum(e.total_points for e in ctx.season_scores)


def _season_bonus_rounds(ctx: AchievementContext) -> int | None:
    if not ctx.season_scores:
        return None
    return sum(1 for e in ctx.season_scores if e.bonus_points > 0)


def _season_rank(ctx: AchievementContext) -> int | None:
    # Enrolled players without a round are listed but not ranked
    for rank, row in enumerate(ctx.leaderboard or [], start=1):
        if row.player_id == ctx.player_id:
            return rank if row.games_played > 0 else None
    return None


def _attendance_gap(ctx: AchievementContext) -> int | None:
    if not ctx.leaderboard:
        return None
    most_played = max(row.games_played for row in ctx.leaderboard)
    mine = next(
        (row.games_played for row in ctx.leaderboard if row.player_id == ctx.player_id),
        None,
    )
    if mine is None or most_played == 0:
        return None
    return most_played - mine


METRICS: dict[MetricName, Callable[[AchievementContext], float | None]] = {
    "games_played": lambda ctx: len(ctx.all_scores),
    "bonus_rounds": lambda ctx: sum(1 for e in ctx.all_scores if e.bonus_points > 0),
    "season_points": _season_points,
    "season_bonus_rounds": _season_bonus_rounds,
    "best_bonus_streak": lambda ctx: best_bonus_streak(ctx.all_scores),
    "under_par_rounds": lambda ctx: sum(
        1 for e in ctx.all_scores if e.raw_score < e.course_par
    ),
    "recent_spread": _recent_spread,
    "submission_delay_hours": _submission_delay_hours,
    "season_rank": _season_rank,
    "attendance_gap": _attendance_gap,
}

# ------------------------------------------------------------------
# Evaluators
# ------------------------------------------------------------------

EVALUATORS: dict[RuleType, Callable[[float, float], bool]] = {
    "exact_count": lambda value, target: value == target,
    "threshold": lambda value, target: value >= target,
    "streak": lambda value, target: value >= target,
    "rank": lambda value, target: value == target,
    "ceiling": lambda value, target: value < target,
    "window": lambda value, target: 0 <= value <= target,
}


def rule_applies(rule: AchievementRule, season_id: str | None) -> bool:
    return rule.scope != "season" or season_id is not None


def rule_scope(rule: AchievementRule, season_id: str | None) -> str | None:
    """Season the earning record belongs to, None for a global record."""
    if rule.scope == "global":
        return None
    return season_id


def earned_value(rule: AchievementRule, ctx: AchievementContext) -> float | None:
    """The metric value when the rule is met, None otherwise."""
    if not rule_applies(rule, ctx.season_id):
        return None
    value = METRICS[rule.metric](ctx)
    if value is None or not EVALUATORS[rule.rule_type](value, rule.target):
        return None
    return value


def evaluate_rule(rule: AchievementRule, ctx: AchievementContext) -> bool:
    return earned_value(rule, ctx) is not None


class AchievementEngine:
    def __init__(
        self,
        store: LeagueStore,
        rules: dict[AchievementKey, AchievementRule] | None = None,
    ) -> None:
        self.store: LeagueStore = store
        self.rules: dict[AchievementKey, AchievementRule] = rules or ACHIEVEMENT_RULES

    def build_context(
        self,
        player_id: str,
        season_id: str | None = None,
    ) -> AchievementContext:
        ctx = AchievementContext(
            player_id=player_id,
            all_scores=self.store.get_player_history(player_id),
            season_id=season_id,
        )
        if season_id is not None:
            ctx.season_scores = self.store.get_player_history(player_id, season_id)
            ctx.leaderboard = self.store.get_season_leaderboard(season_id)
        return ctx

    def award(
        self,
        player_id: str,
        key: AchievementKey,
        season_id: str | None = None,
        metadata: dict[str, object] | None = None,
    ) -> AwardResult:
        encoded = msgspec.json.encode(metadata).decode() if metadata else None
        inserted = self.store.award_achievement(player_id, key, season_id, encoded)
        if inserted:
            logger.info(f"{player_id} earned {key} ({season_id or 'global'})")
        return AwardResult(key=key, season_id=season_id, already_earned=not inserted)

    def check_and_award(
        self,
        player_id: str,
        season_id: str | None = None,
    ) -> list[AwardResult]:
        """
        Evaluate the whole catalog and record what was newly earned.
        Standings and attendance rules run whenever a season is given.
        """
        ctx = self.build_context(player_id, season_id)
        earned: list[AwardResult] = []
        for rule in self.rules.values():
            value = earned_value(rule, ctx)
            if value is None:
                continue
            result = self.award(
                player_id,
                rule.key,
                rule_scope(rule, season_id),
                metadata={rule.metric: value},
            )
            if not result.already_earned:
                earned.append(result)
        return earned

    def finalize_season(self, season_id: str) -> dict[str, list[AwardResult]]:
        """
        Re-check every enrolled player against the closing standings.

        Submissions only re-check the submitter, so standings moved by later
        rounds, edits or deletes are picked up here.
        """
        awarded: dict[str, list[AwardResult]] = {}
        for row in self.store.get_season_leaderboard(season_id):
            awarded[row.player_id] = self.check_and_award(row.player_id, season_id)
        return awarded

    def progress(
        self,
        player_id: str,
        season_id: str | None = None,
    ) -> dict[AchievementKey, Progress]:
        """Current metric value against each applicable rule's target."""
        ctx = self.build_context(player_id, season_id)
        return {
            rule.key: Progress(
                current=METRICS[rule.metric](ctx) or 0,
                target=rule.target,
                label=rule.progress_label,
            )
            for rule in self.rules.values()
            if rule_applies(rule, season_id)
        }
