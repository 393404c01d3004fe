from __future__ import annotations

import datetime
import uuid
from typing import ClassVar

import msgspec

from golfleague.core.types import (  # noqa: TC001 # msgspec resolves these at runtime
    AchievementCategory,
    AchievementTier,
    GameStatus,
)


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, the form DuckDB's TIMESTAMP column round-trips."""
    return datetime.datetime.now(datetime.UTC).replace(tzinfo=None)


def new_id() -> str:
    return uuid.uuid4().hex


class Course(msgspec.Struct, frozen=True):
    table_name: ClassVar[str] = "courses"

    id: str
    name: str
    par: int

    @classmethod
    def get_create_sql(cls) -> str:
        return """
        CREATE TABLE IF NOT EXISTS courses (
            id VARCHAR PRIMARY KEY,
            name VARCHAR,
            par BIGINT
        )
        """


class Season(msgspec.Struct, frozen=True):
    table_name: ClassVar[str] = "seasons"

    id: str
    name: str
    code: str

    @classmethod
    def get_create_sql(cls) -> str:
        return """
        CREATE TABLE IF NOT EXISTS seasons (
            id VARCHAR PRIMARY KEY,
            name VARCHAR,
            code VARCHAR UNIQUE
        )
        """


class SeasonParticipant(msgspec.Struct, frozen=True):
    table_name: ClassVar[str] = "season_participants"

    season_id: str
    player_id: str

    @classmethod
    def get_create_sql(cls) -> str:
        return """
        CREATE TABLE IF NOT EXISTS season_participants (
            season_id VARCHAR,
            player_id VARCHAR,
            PRIMARY KEY (season_id, player_id)
        )
        """


class Player(msgspec.Struct, frozen=True):
    table_name: ClassVar[str] = "players"

    id: str
    username: str
    # None until the player has enough rounds to be rated
    handicap: float | None = None

    @classmethod
    def get_create_sql(cls) -> str:
        return """
        CREATE TABLE IF NOT EXISTS players (
            id VARCHAR PRIMARY KEY,
            username VARCHAR,
            handicap DOUBLE
        )
        """


class Game(msgspec.Struct, frozen=True):
    """One scored round, tied to a course and a season."""

    table_name: ClassVar[str] = "games"

    id: str
    name: str
    course_id: str
    season_id: str
    round_code: str
    game_date: datetime.date
    status: GameStatus = "active"

    @classmethod
    def get_create_sql(cls) -> str:
        return """
        CREATE TABLE IF NOT EXISTS games (
            id VARCHAR PRIMARY KEY,
            name VARCHAR,
            course_id VARCHAR,
            season_id VARCHAR,
            round_code VARCHAR UNIQUE,
            game_date DATE,
            status VARCHAR
        )
        """


class Score(msgspec.Struct, frozen=True):
    """
    One player's result for one round.
    Field order matches the scores table so rows map straight onto the struct.
    """

    table_name: ClassVar[str] = "scores"

    id: str
    game_id: str
    player_id: str
    raw_score: int
    points: int
    bonus_points: int = 0
    notes: str | None = None
    submitted_at: datetime.datetime = msgspec.field(default_factory=utcnow)
    edited_by: str | None = None
    edited_at: datetime.datetime | None = None

    @property
    def total_points(self) -> int:
        return self.points + self.bonus_points

    @classmethod
    def get_create_sql(cls) -> str:
        return """
        CREATE TABLE IF NOT EXISTS scores (
            id VARCHAR PRIMARY KEY,
            game_id VARCHAR,
            player_id VARCHAR,
            raw_score BIGINT,
            points BIGINT,
            bonus_points BIGINT,
            notes VARCHAR,
            submitted_at TIMESTAMP,
            edited_by VARCHAR,
            edited_at TIMESTAMP
        )
        """


class Achievement(msgspec.Struct, frozen=True):
    table_name: ClassVar[str] = "achievements"

    key: str
    name: str
    description: str
    category: AchievementCategory
    tier: AchievementTier = "bronze"

    @classmethod
    def get_create_sql(cls) -> str:
        return """
        CREATE TABLE IF NOT EXISTS achievements (
            key VARCHAR PRIMARY KEY,
            name VARCHAR,
            description VARCHAR,
            category VARCHAR,
            tier VARCHAR
        )
        """


class UserAchievement(msgspec.Struct, frozen=True):
    """
    An earned achievement. `scope` is the season id, or "global" when the
    achievement was earned outside any season, so the primary key also covers
    the global case.
    """

    table_name: ClassVar[str] = "user_achievements"

    id: str
    player_id: str
    achievement_key: str
    scope: str
    season_id: str | None = None
    earned_at: datetime.datetime = msgspec.field(default_factory=utcnow)
    metadata: str | None = None  # JSON encoded context (streak length, score...)

    @classmethod
    def get_create_sql(cls) -> str:
        return """
        CREATE TABLE IF NOT EXISTS user_achievements (
            id VARCHAR,
            player_id VARCHAR,
            achievement_key VARCHAR,
            scope VARCHAR,
            season_id VARCHAR,
            earned_at TIMESTAMP,
            metadata VARCHAR,
            PRIMARY KEY (player_id, achievement_key, scope)
        )
        """


# --- Read models (query results, not tables) ---


class RoundEntry(msgspec.Struct, frozen=True):
    """A score annotated with its round, course par, season and player name."""

    score_id: str
    game_id: str
    player_id: str
    username: str
    raw_score: int
    points: int
    bonus_points: int
    submitted_at: datetime.datetime
    game_name: str
    game_date: datetime.date
    course_par: int
    season_id: str

    @property
    def total_points(self) -> int:
        return self.points + self.bonus_points

    @property
    def differential(self) -> int:
        return self.raw_score - self.course_par


class LeaderboardRow(msgspec.Struct, frozen=True):
    player_id: str
    username: str
    games_played: int
    total_points: int
    avg_score: float
