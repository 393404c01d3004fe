from __future__ import annotations

import datetime
import difflib
from typing import TYPE_CHECKING, get_args

import cappa

from golfleague.core.types import GameStatus

if TYPE_CHECKING:
    from golfleague.store.manager import LeagueDatabase
    from golfleague.store.models import Game, Player, Season


def _normalize(s: str) -> str:
    """Normalize string: strip whitespace and lowercase."""
    return s.strip().lower()


def parse_date(value: str) -> datetime.date:
    """Accept ISO dates (2024-05-01) and the literal 'today'."""
    if _normalize(value) == "today":
        return datetime.date.today()
    try:
        return datetime.date.fromisoformat(value.strip())
    except ValueError as e:
        msg = f"Invalid date '{value}'. Use YYYY-MM-DD."
        raise cappa.Exit(msg, code=1) from e


def validate_status(value: str) -> GameStatus:
    lookup: dict[str, GameStatus] = {_normalize(s): s for s in get_args(GameStatus)}
    normalized = _normalize(value)
    if normalized in lookup:
        return lookup[normalized]
    msg = f"Status '{value}' not found. Use one of: {', '.join(lookup)}."
    raise cappa.Exit(msg, code=1)


def resolve_game(db: LeagueDatabase, ref: str) -> Game:
    """A round is addressed by its round code or its id."""
    game = db.find_game_by_code(ref) or db.get_game(ref)
    if game is None:
        msg = f"Round '{ref}' not found."
        raise cappa.Exit(msg, code=1)
    return game


def resolve_season(db: LeagueDatabase, ref: str) -> Season:
    season = db.find_season_by_code(ref) or db.get_season(ref)
    if season is None:
        msg = f"Season '{ref}' not found."
        raise cappa.Exit(msg, code=1)
    return season


def resolve_player(db: LeagueDatabase, ref: str) -> Player:
    """Resolve a player by id or username, suggesting close usernames."""
    player = db.find_player(ref)
    if player is not None:
        return player

    usernames = [p.username for p in db.list_players()]
    matches = difflib.get_close_matches(ref, usernames, n=3, cutoff=0.5)

    msg = f"Player '{ref}' not found."
    if matches:
        msg += f" Did you mean: {', '.join(matches)}?"
    raise cappa.Exit(msg, code=1)
