from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import cappa

from golfleague.config import LeagueConfig
from golfleague.core.errors import LeagueError
from golfleague.engine.logging import configure_logging
from golfleague.league import League
from golfleague.store.manager import LeagueDatabase

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@dataclass(slots=True)
class Session:
    db: LeagueDatabase
    league: League


@contextmanager
def open_league(config_path: Path | None) -> Iterator[Session]:
    """
    Open the configured database for one command.
    League errors become a clean CLI exit instead of a traceback.
    """
    if config_path is not None and not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise cappa.Exit(msg, code=1)

    config = LeagueConfig.load(config_path)
    configure_logging(config.log_level)

    db = LeagueDatabase(config.database)
    try:
        yield Session(db=db, league=League(db))
    except LeagueError as e:
        raise cappa.Exit(str(e), code=1) from e
    finally:
        db.close()
