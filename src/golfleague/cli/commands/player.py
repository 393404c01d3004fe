from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import cappa

from golfleague.cli.converters import resolve_player, resolve_season
from golfleague.cli.session import open_league
from golfleague.core.registry import ACHIEVEMENT_RULES
from golfleague.core.types import GLOBAL_SCOPE
from golfleague.engine.handicap import format_handicap, handicap_category

logger = logging.getLogger(__name__)


@cappa.command(name="handicap", help="Recompute one player's handicap.")
@dataclass
class HandicapCommand:
    player: Annotated[str, cappa.Arg(help="Player id or username.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            player = resolve_player(session.db, self.player)
            handicap = session.league.compute_handicap(player.id)
            logger.info(
                f"{player.username}: {format_handicap(handicap)} ({handicap_category(handicap)})",
            )


@cappa.command(name="handicaps", help="Recompute every player's handicap.")
@dataclass
class HandicapsCommand:
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            refresh = session.league.recalculate_all_handicaps()
            players = {p.id: p.username for p in session.db.list_players()}

            header = f"{'Player':<16} | {'Handicap':<8} | {'Category':<12}"
            logger.info(header)
            logger.info("-" * len(header))
            for player_id, handicap in refresh.updated.items():
                logger.info(
                    f"{players.get(player_id, player_id):<16} | "
                    f"{format_handicap(handicap):<8} | {handicap_category(handicap):<12}",
                )
            for player_id, reason in refresh.failed.items():
                logger.warning(f"!!! {players.get(player_id, player_id)}: {reason}")


@cappa.command(name="achievements", help="Evaluate and list a player's achievements.")
@dataclass
class AchievementsCommand:
    player: Annotated[str, cappa.Arg(help="Player id or username.")]
    season: Annotated[
        str | None,
        cappa.Arg(short="-s", long="--season", help="Season code or id for seasonal rules."),
    ] = None
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            db = session.db
            player = resolve_player(db, self.player)
            season_id = resolve_season(db, self.season).id if self.season else None

            for award in session.league.check_and_award_achievements(player.id, season_id):
                logger.info(f"{player.username} unlocked {award.key}")

            earned = db.get_player_achievements(player.id)
            logger.info(f"--- {player.username}: {len(earned)} earned ---")
            for ua in earned:
                rule = ACHIEVEMENT_RULES.get(ua.achievement_key)  # pyright: ignore[reportArgumentType]
                name = rule.name if rule else ua.achievement_key
                logger.info(f"{name:<22} {ua.scope:<32} {ua.earned_at:%Y-%m-%d}")

            earned_keys = {
                ua.achievement_key for ua in earned if ua.scope in (season_id, GLOBAL_SCOPE)
            }
            progress = session.league.achievement_progress(player.id, season_id)
            pending = {k: p for k, p in progress.items() if k not in earned_keys}
            if pending:
                logger.info("--- In progress ---")
            for key, p in pending.items():
                logger.info(f"{key:<22} {p.current:g}/{p.target:g} {p.label}")


@cappa.command(name="player", help="Handicaps and achievements.")
@dataclass
class PlayerCommand:
    subcommand: cappa.Subcommands[
        HandicapCommand | HandicapsCommand | AchievementsCommand
    ]
