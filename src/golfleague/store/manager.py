from __future__ import annotations

import logging
import secrets
import threading
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

import duckdb
import msgspec

from golfleague.core.errors import SeasonNotFoundError, StoreError
from golfleague.core.registry import ACHIEVEMENT_RULES
from golfleague.core.types import GLOBAL_SCOPE
from golfleague.store.models import (
    Achievement,
    Course,
    Game,
    LeaderboardRow,
    Player,
    RoundEntry,
    Score,
    Season,
    SeasonParticipant,
    UserAchievement,
    new_id,
)

if TYPE_CHECKING:
    import datetime
    from collections.abc import Callable
    from pathlib import Path

    from golfleague.core.types import GameStatus

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Round / season codes skip characters that are easy to misread (0/O, 1/I)
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6

TABLES = (
    Course,
    Season,
    SeasonParticipant,
    Player,
    Game,
    Score,
    Achievement,
    UserAchievement,
)


def generate_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def _columns(struct_type: type[msgspec.Struct]) -> str:
    return ", ".join(struct_type.__struct_fields__)


def _locked(method: Callable[P, R]) -> Callable[P, R]:
    """Serialize access to the shared connection and wrap driver errors."""

    @wraps(method)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        self: LeagueDatabase = args[0]  # pyright: ignore[reportAssignmentType]
        with self.lock:
            try:
                return method(*args, **kwargs)
            except duckdb.Error as e:
                logger.exception(f"Database call {method.__name__} failed")
                raise StoreError(f"{method.__name__} failed: {e}") from e

    return wrapper


ROUND_ENTRY_SELECT = """
    SELECT
        sc.id, sc.game_id, sc.player_id, p.username,
        sc.raw_score, sc.points, sc.bonus_points, sc.submitted_at,
        g.name, g.game_date, c.par, g.season_id
    FROM scores sc
    JOIN games g ON g.id = sc.game_id
    JOIN courses c ON c.id = g.course_id
    JOIN players p ON p.id = sc.player_id
"""


class LeagueDatabase:
    """
    DuckDB-backed league store.
    One connection per instance, guarded by a re-entrant lock.
    """

    def __init__(self, path: Path | str = ":memory:"):
        self.path = str(path)
        self.conn = duckdb.connect(self.path)
        self.lock = threading.RLock()
        self.init_db()

    def init_db(self):
        """Create tables from the model DDL and seed the achievement catalog."""
        with self.lock:
            for table in TABLES:
                self.conn.execute(table.get_create_sql())
            self._seed_achievements()

    def _seed_achievements(self):
        known = {
            row[0] for row in self.conn.execute("SELECT key FROM achievements").fetchall()
        }
        missing = [
            Achievement(
                key=rule.key,
                name=rule.name,
                description=rule.description,
                category=rule.category,
                tier=rule.tier,
            )
            for rule in ACHIEVEMENT_RULES.values()
            if rule.key not in known
        ]
        if missing:
            self.conn.executemany(
                f"INSERT INTO achievements VALUES ({', '.join(['?'] * 5)})",
                [msgspec.structs.astuple(a) for a in missing],
            )
            logger.debug(f"Seeded {len(missing)} achievements")

    def close(self):
        with self.lock:
            self.conn.close()

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------

    def _insert(self, row: msgspec.Struct):
        values = msgspec.structs.astuple(row)
        placeholders = ", ".join(["?"] * len(values))
        self.conn.execute(
            f"INSERT INTO {row.table_name} ({_columns(type(row))}) VALUES ({placeholders})",  # pyright: ignore[reportAttributeAccessIssue]
            list(values),
        )

    def _fetch(self, struct_type: type[Any], where: str, params: list[Any]) -> list[Any]:
        rows = self.conn.execute(
            f"SELECT {_columns(struct_type)} FROM {struct_type.table_name} {where}",
            params,
        ).fetchall()
        return [struct_type(*row) for row in rows]

    def _fetch_one(self, struct_type: type[Any], where: str, params: list[Any]) -> Any:
        rows = self._fetch(struct_type, where, params)
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Admin CRUD
    # ------------------------------------------------------------------

    @_locked
    def add_course(self, name: str, par: int) -> Course:
        course = Course(id=new_id(), name=name, par=par)
        self._insert(course)
        return course

    @_locked
    def add_player(self, username: str, player_id: str | None = None) -> Player:
        player = Player(id=player_id or new_id(), username=username)
        self._insert(player)
        return player

    @_locked
    def create_season(self, name: str, code: str | None = None) -> Season:
        season = Season(id=new_id(), name=name, code=(code or generate_code()).upper())
        self._insert(season)
        return season

    @_locked
    def join_season(self, season_code: str, player_id: str) -> SeasonParticipant:
        season = self._fetch_one(Season, "WHERE code = ?", [season_code.upper()])
        if season is None:
            raise SeasonNotFoundError(season_code)
        participant = SeasonParticipant(season_id=season.id, player_id=player_id)
        if not self.is_participant(season.id, player_id):
            self._insert(participant)
        return participant

    @_locked
    def create_game(
        self,
        name: str,
        course_id: str,
        season_id: str,
        game_date: datetime.date,
        round_code: str | None = None,
    ) -> Game:
        game = Game(
            id=new_id(),
            name=name,
            course_id=course_id,
            season_id=season_id,
            round_code=(round_code or generate_code()).upper(),
            game_date=game_date,
            status="active",
        )
        self._insert(game)
        return game

    @_locked
    def set_game_status(self, game_id: str, status: GameStatus):
        self.conn.execute("UPDATE games SET status = ? WHERE id = ?", [status, game_id])

    # ------------------------------------------------------------------
    # Rounds & seasons
    # ------------------------------------------------------------------

    @_locked
    def get_course(self, course_id: str) -> Course | None:
        return self._fetch_one(Course, "WHERE id = ?", [course_id])

    @_locked
    def list_courses(self) -> list[Course]:
        return self._fetch(Course, "ORDER BY name", [])

    @_locked
    def list_seasons(self) -> list[Season]:
        return self._fetch(Season, "ORDER BY name", [])

    @_locked
    def list_season_games(self, season_id: str) -> list[Game]:
        return self._fetch(Game, "WHERE season_id = ? ORDER BY game_date, name", [season_id])

    @_locked
    def get_game(self, game_id: str) -> Game | None:
        return self._fetch_one(Game, "WHERE id = ?", [game_id])

    @_locked
    def find_game_by_code(self, round_code: str) -> Game | None:
        return self._fetch_one(Game, "WHERE round_code = ?", [round_code.upper()])

    @_locked
    def get_season(self, season_id: str) -> Season | None:
        return self._fetch_one(Season, "WHERE id = ?", [season_id])

    @_locked
    def find_season_by_code(self, code: str) -> Season | None:
        return self._fetch_one(Season, "WHERE code = ?", [code.upper()])

    @_locked
    def is_participant(self, season_id: str, player_id: str) -> bool:
        row = self.conn.execute(
            "SELECT count(*) FROM season_participants WHERE season_id = ? AND player_id = ?",
            [season_id, player_id],
        ).fetchone()
        return bool(row and row[0] > 0)

    @_locked
    def count_season_games(self, season_id: str) -> int:
        row = self.conn.execute(
            "SELECT count(*) FROM games WHERE season_id = ?",
            [season_id],
        ).fetchone()
        return int(row[0]) if row else 0

    @_locked
    def get_season_leaderboard(self, season_id: str) -> list[LeaderboardRow]:
        """
        Every enrolled player, total points descending.
        Equal totals fall back to username so the ordering is stable.
        """
        rows = self.conn.execute(
            """
            SELECT
                sp.player_id,
                p.username,
                count(sc.id) AS games_played,
                coalesce(sum(sc.points + sc.bonus_points), 0) AS total_points,
                coalesce(avg(sc.raw_score), 0) AS avg_score
            FROM season_participants sp
            JOIN players p ON p.id = sp.player_id
            LEFT JOIN games g ON g.season_id = sp.season_id
            LEFT JOIN scores sc ON sc.game_id = g.id AND sc.player_id = sp.player_id
            WHERE sp.season_id = ?
            GROUP BY sp.player_id, p.username
            ORDER BY total_points DESC, p.username ASC
            """,
            [season_id],
        ).fetchall()
        return [
            LeaderboardRow(
                player_id=player_id,
                username=username,
                games_played=int(games_played),
                total_points=int(total_points),
                avg_score=float(avg_score),
            )
            for player_id, username, games_played, total_points, avg_score in rows
        ]

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    @_locked
    def get_score(self, score_id: str) -> Score | None:
        return self._fetch_one(Score, "WHERE id = ?", [score_id])

    @_locked
    def get_game_scores(self, game_id: str) -> list[Score]:
        return self._fetch(
            Score,
            "WHERE game_id = ? ORDER BY raw_score, submitted_at",
            [game_id],
        )

    @_locked
    def insert_score(self, score: Score):
        self._insert(score)

    @_locked
    def update_score(self, score: Score):
        self.conn.execute(
            """
            UPDATE scores
            SET raw_score = ?, points = ?, bonus_points = ?, notes = ?,
                edited_by = ?, edited_at = ?
            WHERE id = ?
            """,
            [
                score.raw_score,
                score.points,
                score.bonus_points,
                score.notes,
                score.edited_by,
                score.edited_at,
                score.id,
            ],
        )

    @_locked
    def set_bonus_points(self, score_id: str, bonus_points: int):
        self.conn.execute(
            "UPDATE scores SET bonus_points = ? WHERE id = ?",
            [bonus_points, score_id],
        )

    @_locked
    def delete_score(self, score_id: str):
        self.conn.execute("DELETE FROM scores WHERE id = ?", [score_id])

    @_locked
    def get_player_history(
        self,
        player_id: str,
        season_id: str | None = None,
    ) -> list[RoundEntry]:
        """The player's scores in submission order, oldest first."""
        where = "WHERE sc.player_id = ?"
        params: list[Any] = [player_id]
        if season_id is not None:
            where += " AND g.season_id = ?"
            params.append(season_id)
        rows = self.conn.execute(
            f"{ROUND_ENTRY_SELECT} {where} ORDER BY sc.submitted_at, sc.id",
            params,
        ).fetchall()
        return [RoundEntry(*row) for row in rows]

    @_locked
    def get_season_scores(self, season_id: str) -> list[RoundEntry]:
        rows = self.conn.execute(
            f"{ROUND_ENTRY_SELECT} WHERE g.season_id = ? ORDER BY sc.submitted_at, sc.id",
            [season_id],
        ).fetchall()
        return [RoundEntry(*row) for row in rows]

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    @_locked
    def get_player(self, player_id: str) -> Player | None:
        return self._fetch_one(Player, "WHERE id = ?", [player_id])

    @_locked
    def find_player(self, player: str) -> Player | None:
        """Look a player up by id, falling back to username."""
        return self._fetch_one(Player, "WHERE id = ?", [player]) or self._fetch_one(
            Player,
            "WHERE username = ?",
            [player],
        )

    @_locked
    def list_players(self) -> list[Player]:
        return self._fetch(Player, "ORDER BY username", [])

    @_locked
    def set_handicap(self, player_id: str, handicap: float | None):
        self.conn.execute(
            "UPDATE players SET handicap = ? WHERE id = ?",
            [handicap, player_id],
        )

    # ------------------------------------------------------------------
    # Achievements
    # ------------------------------------------------------------------

    @_locked
    def get_achievements(self) -> list[Achievement]:
        return self._fetch(Achievement, "ORDER BY key", [])

    @_locked
    def award_achievement(
        self,
        player_id: str,
        achievement_key: str,
        season_id: str | None = None,
        metadata: str | None = None,
    ) -> bool:
        """Insert the earning record. Returns False if it was already earned."""
        scope = season_id or GLOBAL_SCOPE
        existing = self.conn.execute(
            """
            SELECT count(*) FROM user_achievements
            WHERE player_id = ? AND achievement_key = ? AND scope = ?
            """,
            [player_id, achievement_key, scope],
        ).fetchone()
        if existing and existing[0] > 0:
            return False

        self._insert(
            UserAchievement(
                id=new_id(),
                player_id=player_id,
                achievement_key=achievement_key,
                scope=scope,
                season_id=season_id,
                metadata=metadata,
            ),
        )
        return True

    @_locked
    def get_player_achievements(self, player_id: str) -> list[UserAchievement]:
        return self._fetch(
            UserAchievement,
            "WHERE player_id = ? ORDER BY earned_at DESC",
            [player_id],
        )
