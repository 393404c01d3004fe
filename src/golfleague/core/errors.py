"""Exception taxonomy surfaced to callers of the league core."""

from __future__ import annotations


class LeagueError(Exception):
    """Base class for every error raised by the league core."""


# --- Validation (rejected before any read or write) ---


class ValidationError(LeagueError):
    pass


class InvalidScoreError(ValidationError):
    def __init__(self, raw_score: object, minimum: int, maximum: int) -> None:
        self.raw_score = raw_score
        super().__init__(
            f"Score {raw_score!r} is invalid: must be a whole number between {minimum} and {maximum}.",
        )


# --- Eligibility (rejected after a read, before any write) ---


class EligibilityError(LeagueError):
    pass


class RoundClosedError(EligibilityError):
    def __init__(self, game_id: str, message: str | None = None) -> None:
        self.game_id = game_id
        super().__init__(
            message
            or f"Round {game_id} is completed. No new scores can be submitted.",
        )


class RoundNotFoundError(RoundClosedError):
    def __init__(self, game_id: str) -> None:
        super().__init__(game_id, f"Round {game_id} not found.")


class NotEnrolledError(EligibilityError):
    def __init__(self, player_id: str, season_id: str) -> None:
        self.player_id = player_id
        self.season_id = season_id
        super().__init__(
            f"Player {player_id} must join season {season_id} before submitting scores.",
        )


class DuplicateSubmissionError(EligibilityError):
    def __init__(self, player_id: str, game_id: str) -> None:
        self.player_id = player_id
        self.game_id = game_id
        super().__init__(
            f"Player {player_id} has already submitted a score for round {game_id}.",
        )


# --- Lookups ---


class ScoreNotFoundError(LeagueError):
    def __init__(self, score_id: str) -> None:
        self.score_id = score_id
        super().__init__(f"Score {score_id} not found.")


class SeasonNotFoundError(LeagueError):
    def __init__(self, season: str) -> None:
        self.season = season
        super().__init__(f"Season {season} not found.")


class PlayerNotFoundError(LeagueError):
    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found.")


# --- Persistence ---


class StoreError(LeagueError):
    """A persistence call failed."""
