from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import cappa

from golfleague.cli.converters import resolve_player, resolve_season
from golfleague.cli.session import open_league

logger = logging.getLogger(__name__)


@cappa.command(name="summary", help="Season awards: MVP, most improved, most consistent, best round.")
@dataclass
class SummaryCommand:
    season: Annotated[str, cappa.Arg(help="Season code or id.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            season = resolve_season(session.db, self.season)
            summary = session.league.get_season_summary(season.id)

            logger.info(
                f"--- {season.name}: {summary.total_rounds} rounds, "
                f"{summary.total_players} players ---",
            )
            awards = {
                "MVP": summary.mvp,
                "Most Improved": summary.most_improved,
                "Most Consistent": summary.most_consistent,
                "Best Round": summary.best_round,
            }
            for title, award in awards.items():
                if award is None:
                    logger.info(f"{title:<16} -")
                else:
                    logger.info(f"{title:<16} {award.username:<16} {award.display}")


@cappa.command(name="h2h", help="Compare two players over the rounds they both played.")
@dataclass
class HeadToHeadCommand:
    season: Annotated[str, cappa.Arg(help="Season code or id.")]
    player1: Annotated[str, cappa.Arg(help="First player id or username.")]
    player2: Annotated[str, cappa.Arg(help="Second player id or username.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            db = session.db
            season = resolve_season(db, self.season)
            p1 = resolve_player(db, self.player1)
            p2 = resolve_player(db, self.player2)
            h2h = session.league.get_head_to_head(p1.id, p2.id, season.id)

            header = f"{'':<12} | {p1.username:<14} | {p2.username:<14}"
            logger.info(header)
            logger.info("-" * len(header))
            s1, s2 = h2h.player1_stats, h2h.player2_stats
            logger.info(f"{'Games':<12} | {s1.games_played:<14} | {s2.games_played:<14}")
            logger.info(f"{'Avg score':<12} | {s1.avg_score:<14.1f} | {s2.avg_score:<14.1f}")
            logger.info(f"{'Points':<12} | {s1.total_points:<14} | {s2.total_points:<14}")
            logger.info(
                f"{'Best':<12} | {s1.best_score or '-':<14} | {s2.best_score or '-':<14}",
            )

            logger.info(f"--- {len(h2h.shared_games)} shared rounds ---")
            names = {"p1": p1.username, "p2": p2.username, "tie": "tie"}
            for game in h2h.shared_games:
                logger.info(
                    f"{game.game_date} {game.game_name:<20} "
                    f"{game.p1_score:>3} - {game.p2_score:<3} {names[game.winner]}",
                )
            record = h2h.record
            logger.info(f"Record: {record.p1_wins}-{record.p2_wins}-{record.ties}")


@cappa.command(name="leaderboard", help="Season standings by total points.")
@dataclass
class LeaderboardCommand:
    season: Annotated[str, cappa.Arg(help="Season code or id.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            season = resolve_season(session.db, self.season)
            rows = session.league.analytics.get_leaderboard(season.id)

            header = f"{'#':<3} | {'Player':<16} | {'Games':<5} | {'Points':<6} | {'Avg':<5}"
            logger.info(f"--- {season.name} ({season.code}) ---")
            logger.info(header)
            logger.info("-" * len(header))
            for rank, row in enumerate(rows, start=1):
                logger.info(
                    f"{rank:<3} | {row.username:<16} | {row.games_played:<5} | "
                    f"{row.total_points:<6} | {row.avg_score:<5.1f}",
                )


@cappa.command(name="finalize", help="Re-check every participant against the final standings.")
@dataclass
class FinalizeCommand:
    season: Annotated[str, cappa.Arg(help="Season code or id.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            db = session.db
            season = resolve_season(db, self.season)
            awarded = session.league.finalize_season(season.id)
            names = {p.id: p.username for p in db.list_players()}
            for player_id, results in awarded.items():
                for result in results:
                    logger.info(f"{names.get(player_id, player_id)} unlocked {result.key}")
            total = sum(len(r) for r in awarded.values())
            logger.info(f"{season.name}: {total} achievements awarded at season end")


@cappa.command(name="season", help="Season standings and analytics.")
@dataclass
class SeasonCommand:
    subcommand: cappa.Subcommands[
        SummaryCommand | HeadToHeadCommand | LeaderboardCommand | FinalizeCommand
    ]
