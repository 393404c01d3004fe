from __future__ import annotations

from typing import Literal

GameStatus = Literal["active", "completed"]

AchievementKey = Literal[
    "first_score",
    "first_win",
    "games_5",
    "games_10",
    "games_25",
    "games_50",
    "points_50",
    "points_100",
    "points_200",
    "hot_streak_3",
    "hot_streak_5",
    "perfect_score",
    "domination",
    "early_bird",
    "consistent_scorer",
    "season_champion",
    "runner_up",
    "top_three",
    "perfect_attendance",
]

AchievementCategory = Literal["milestone", "performance", "consistency", "special"]
AchievementTier = Literal["bronze", "silver", "gold", "platinum"]

# How a rule compares its metric against the target
RuleType = Literal["exact_count", "threshold", "streak", "rank", "ceiling", "window"]

MetricName = Literal[
    "games_played",
    "bonus_rounds",
    "season_points",
    "season_bonus_rounds",
    "best_bonus_streak",
    "under_par_rounds",
    "recent_spread",
    "submission_delay_hours",
    "season_rank",
    "attendance_gap",
]

# "global": never season scoped. "season": only evaluated with a season.
# "contextual": scoped to the season when one is given, global otherwise.
RuleScope = Literal["global", "season", "contextual"]

GLOBAL_SCOPE = "global"

RoundWinner = Literal["p1", "p2", "tie"]
