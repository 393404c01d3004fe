from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import cappa

from golfleague.cli.converters import (
    parse_date,
    resolve_game,
    resolve_player,
    resolve_season,
    validate_status,
)
from golfleague.cli.session import open_league
from golfleague.core.types import GameStatus  # noqa: TC001

logger = logging.getLogger(__name__)


@cappa.command(name="course", help="Register a course.")
@dataclass
class AddCourseCommand:
    name: Annotated[str, cappa.Arg(help="Course name.")]
    par: Annotated[int, cappa.Arg(short="-p", long="--par", help="Course par.")] = 72
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            course = session.db.add_course(self.name, self.par)
            logger.info(f"Course {course.name} (par {course.par}): {course.id}")


@cappa.command(name="player", help="Register a player.")
@dataclass
class AddPlayerCommand:
    username: Annotated[str, cappa.Arg(help="Unique username.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            if session.db.find_player(self.username) is not None:
                msg = f"Player '{self.username}' already exists."
                raise cappa.Exit(msg, code=1)
            player = session.db.add_player(self.username)
            logger.info(f"Player {player.username}: {player.id}")


@cappa.command(name="season", help="Create a season with a join code.")
@dataclass
class CreateSeasonCommand:
    name: Annotated[str, cappa.Arg(help="Season name.")]
    code: Annotated[
        str | None,
        cappa.Arg(long="--code", help="Join code. Generated when omitted."),
    ] = None
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            season = session.db.create_season(self.name, self.code)
            logger.info(f"Season {season.name}: code {season.code}")


@cappa.command(name="join", help="Enroll a player in a season by its code.")
@dataclass
class JoinSeasonCommand:
    code: Annotated[str, cappa.Arg(help="Season join code.")]
    player: Annotated[str, cappa.Arg(help="Player id or username.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            player = resolve_player(session.db, self.player)
            session.db.join_season(self.code, player.id)
            logger.info(f"{player.username} joined {self.code.upper()}")


@cappa.command(name="game", help="Open a round on a course within a season.")
@dataclass
class CreateGameCommand:
    name: Annotated[str, cappa.Arg(help="Round name.")]
    season: Annotated[str, cappa.Arg(help="Season code or id.")]
    course: Annotated[str, cappa.Arg(help="Course id or name.")]
    date: Annotated[
        str,
        cappa.Arg(short="-d", long="--date", help="Round date (YYYY-MM-DD or today)."),
    ] = "today"
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            db = session.db
            season = resolve_season(db, self.season)
            course = db.get_course(self.course) or next(
                (c for c in db.list_courses() if c.name.lower() == self.course.lower()),
                None,
            )
            if course is None:
                msg = f"Course '{self.course}' not found."
                raise cappa.Exit(msg, code=1)
            game = db.create_game(self.name, course.id, season.id, parse_date(self.date))
            logger.info(
                f"{game.name} at {course.name} on {game.game_date}: round code {game.round_code}",
            )


@cappa.command(name="status", help="Open or close a round for submissions.")
@dataclass
class SetStatusCommand:
    round: Annotated[str, cappa.Arg(help="Round code or round id.")]
    status: Annotated[
        GameStatus,
        cappa.Arg(parse=validate_status, help="active or completed."),
    ]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            game = resolve_game(session.db, self.round)
            session.db.set_game_status(game.id, self.status)
            logger.info(f"{game.name} ({game.round_code}) is now {self.status}")


@cappa.command(name="admin", help="Manage courses, players, seasons and rounds.")
@dataclass
class AdminCommand:
    subcommand: cappa.Subcommands[
        AddCourseCommand
        | AddPlayerCommand
        | CreateSeasonCommand
        | JoinSeasonCommand
        | CreateGameCommand
        | SetStatusCommand
    ]
