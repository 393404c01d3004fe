from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from golfleague.store.models import (
        Achievement,
        Game,
        LeaderboardRow,
        Player,
        RoundEntry,
        Score,
        Season,
        UserAchievement,
    )


class LeagueStore(Protocol):
    """
    Defines the persistence calls the scoring core depends on.
    Implementations raise StoreError when a call fails.
    """

    # --- Rounds & seasons ---
    def get_game(self, game_id: str) -> Game | None: ...

    def find_game_by_code(self, round_code: str) -> Game | None: ...

    def get_season(self, season_id: str) -> Season | None: ...

    def is_participant(self, season_id: str, player_id: str) -> bool: ...

    def count_season_games(self, season_id: str) -> int: ...

    def get_season_leaderboard(self, season_id: str) -> list[LeaderboardRow]: ...

    # --- Scores ---
    def get_score(self, score_id: str) -> Score | None: ...

    def get_game_scores(self, game_id: str) -> list[Score]: ...

    def insert_score(self, score: Score) -> None: ...

    def update_score(self, score: Score) -> None: ...

    def set_bonus_points(self, score_id: str, bonus_points: int) -> None: ...

    def delete_score(self, score_id: str) -> None: ...

    def get_player_history(
        self,
        player_id: str,
        season_id: str | None = None,
    ) -> list[RoundEntry]: ...

    def get_season_scores(self, season_id: str) -> list[RoundEntry]: ...

    # --- Players ---
    def get_player(self, player_id: str) -> Player | None: ...

    def list_players(self) -> list[Player]: ...

    def set_handicap(self, player_id: str, handicap: float | None) -> None: ...

    # --- Achievements ---
    def get_achievements(self) -> list[Achievement]: ...

    def award_achievement(
        self,
        player_id: str,
        achievement_key: str,
        season_id: str | None = None,
        metadata: str | None = None,
    ) -> bool: ...

    def get_player_achievements(self, player_id: str) -> list[UserAchievement]: ...
