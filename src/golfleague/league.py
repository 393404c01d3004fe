"""The operations the league core exposes to its callers, wired over one store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from golfleague.analysis.season import HeadToHead, SeasonAnalytics, SeasonSummary
from golfleague.core.errors import SeasonNotFoundError
from golfleague.engine.achievements import AchievementEngine, AwardResult, Progress
from golfleague.engine.coordinator import (
    BonusRecalculation,
    EditResult,
    ScoreCoordinator,
    SubmissionResult,
)
from golfleague.engine.handicap import (
    HandicapRefresh,
    recalculate_all_handicaps,
    update_player_handicap,
)

if TYPE_CHECKING:
    from golfleague.core.protocols import LeagueStore
    from golfleague.core.types import AchievementKey


class League:
    def __init__(self, store: LeagueStore) -> None:
        self.store: LeagueStore = store
        self.achievements = AchievementEngine(store)
        self.coordinator = ScoreCoordinator(store, achievements=self.achievements)
        self.analytics = SeasonAnalytics(store)

    # --- Scores ---
    def submit_score(
        self,
        game_id: str,
        player_id: str,
        raw_score: int,
        notes: str | None = None,
    ) -> SubmissionResult:
        return self.coordinator.submit_score(game_id, player_id, raw_score, notes)

    def edit_score(
        self,
        score_id: str,
        new_raw_score: int,
        new_notes: str | None,
        edited_by: str,
    ) -> EditResult:
        return self.coordinator.edit_score(score_id, new_raw_score, new_notes, edited_by)

    def delete_score(self, score_id: str) -> BonusRecalculation:
        return self.coordinator.delete_score(score_id)

    def recalculate_bonus_points(self, game_id: str) -> BonusRecalculation:
        return self.coordinator.recalculate_bonus_points(game_id)

    # --- Players ---
    def compute_handicap(self, player_id: str) -> float | None:
        """None means unrated."""
        return update_player_handicap(self.store, player_id)

    def recalculate_all_handicaps(self) -> HandicapRefresh:
        return recalculate_all_handicaps(self.store)

    def check_and_award_achievements(
        self,
        player_id: str,
        season_id: str | None = None,
    ) -> list[AwardResult]:
        return self.achievements.check_and_award(player_id, season_id)

    def finalize_season(self, season_id: str) -> dict[str, list[AwardResult]]:
        """Re-check every participant against the season's standings."""
        if self.store.get_season(season_id) is None:
            raise SeasonNotFoundError(season_id)
        return self.achievements.finalize_season(season_id)

    def achievement_progress(
        self,
        player_id: str,
        season_id: str | None = None,
    ) -> dict[AchievementKey, Progress]:
        return self.achievements.progress(player_id, season_id)

    # --- Seasons ---
    def get_season_summary(self, season_id: str) -> SeasonSummary:
        return self.analytics.get_season_summary(season_id)

    def get_head_to_head(
        self,
        player1_id: str,
        player2_id: str,
        season_id: str,
    ) -> HeadToHead:
        return self.analytics.get_head_to_head(player1_id, player2_id, season_id)
