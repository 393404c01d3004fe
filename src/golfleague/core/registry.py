from __future__ import annotations

import msgspec

from golfleague.core.types import (  # noqa: TC001
    AchievementCategory,
    AchievementKey,
    AchievementTier,
    MetricName,
    RuleScope,
    RuleType,
)


class AchievementRule(msgspec.Struct, frozen=True):
    """
    Data description of one catalog entry.
    The engine computes `metric` for the player and hands it to the evaluator
    registered for `rule_type` together with `target`.
    """

    key: AchievementKey
    name: str
    description: str
    category: AchievementCategory
    tier: AchievementTier
    rule_type: RuleType
    metric: MetricName
    target: float
    scope: RuleScope = "contextual"
    progress_label: str = ""


ACHIEVEMENT_RULES: dict[AchievementKey, AchievementRule] = {
    rule.key: rule
    for rule in (
        # --- Milestones ---
        AchievementRule("first_score", "First Steps", "Submit your first score", "milestone", "bronze", "exact_count", "games_played", 1, progress_label="Scores submitted"),
        AchievementRule("first_win", "First Victory", "Earn your first bonus point", "milestone", "bronze", "exact_count", "bonus_rounds", 1, progress_label="Wins"),
        AchievementRule("games_5", "Getting Started", "Play 5 games", "milestone", "bronze", "exact_count", "games_played", 5, scope="global", progress_label="Games played"),
        AchievementRule("games_10", "Regular Player", "Play 10 games", "milestone", "silver", "exact_count", "games_played", 10, scope="global", progress_label="Games played"),
        AchievementRule("games_25", "Dedicated Golfer", "Play 25 games", "milestone", "gold", "exact_count", "games_played", 25, scope="global", progress_label="Games played"),
        AchievementRule("games_50", "Golf Veteran", "Play 50 games", "milestone", "platinum", "exact_count", "games_played", 50, scope="global", progress_label="Games played"),
        AchievementRule("points_50", "Half Century", "Earn 50 total points in a season", "milestone", "bronze", "threshold", "season_points", 50, scope="season", progress_label="Season points"),
        AchievementRule("points_100", "Century Club", "Earn 100 total points in a season", "milestone", "silver", "threshold", "season_points", 100, scope="season", progress_label="Season points"),
        AchievementRule("points_200", "Double Century", "Earn 200 total points in a season", "milestone", "gold", "threshold", "season_points", 200, scope="season", progress_label="Season points"),
        # --- Performance ---
        AchievementRule("hot_streak_3", "Hot Streak", "Win bonus points in 3 consecutive games", "performance", "silver", "streak", "best_bonus_streak", 3, progress_label="Best streak"),
        AchievementRule("hot_streak_5", "On Fire", "Win bonus points in 5 consecutive games", "performance", "gold", "streak", "best_bonus_streak", 5, progress_label="Best streak"),
        AchievementRule("perfect_score", "Eagle Eye", "Score under par", "performance", "gold", "threshold", "under_par_rounds", 1, progress_label="Rounds under par"),
        AchievementRule("domination", "Dominator", "Win 5+ bonus points in a season", "performance", "gold", "threshold", "season_bonus_rounds", 5, scope="season", progress_label="Season wins"),
        AchievementRule("early_bird", "Early Bird", "Submit score within 24 hours of game date", "special", "bronze", "window", "submission_delay_hours", 24, progress_label="Hours after round"),
        # --- Consistency ---
        AchievementRule("consistent_scorer", "Mr. Reliable", "Play 5+ games with less than 5 strokes variance", "consistency", "silver", "ceiling", "recent_spread", 5, progress_label="Spread of last 5 rounds"),
        AchievementRule("perfect_attendance", "Perfect Attendance", "Play all rounds in a season", "consistency", "silver", "exact_count", "attendance_gap", 0, scope="season", progress_label="Rounds missed"),
        # --- Season rank ---
        AchievementRule("season_champion", "Season Champion", "Finish 1st in a season", "special", "platinum", "rank", "season_rank", 1, scope="season", progress_label="Season rank"),
        AchievementRule("runner_up", "Runner Up", "Finish 2nd in a season", "special", "gold", "rank", "season_rank", 2, scope="season", progress_label="Season rank"),
        AchievementRule("top_three", "Podium Finish", "Finish in top 3 of a season", "special", "silver", "rank", "season_rank", 3, scope="season", progress_label="Season rank"),
    )
}
