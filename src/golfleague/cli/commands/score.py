from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import cappa

from golfleague.cli.converters import resolve_game, resolve_player
from golfleague.cli.session import open_league
from golfleague.engine.scoring import format_relative_to_par

if TYPE_CHECKING:
    from golfleague.engine.coordinator import BonusRecalculation

logger = logging.getLogger(__name__)


def _report_bonus(bonus: BonusRecalculation) -> None:
    for update in bonus.updated_scores:
        sign = "+1" if update.bonus_points else "-1"
        logger.info(f"{update.player_id}: {sign} bonus")
    for failed in bonus.failed_updates:
        logger.warning(
            f"!!! Bonus for {failed.player_id} not written ({failed.reason})",
        )


@cappa.command(name="submit", help="Submit a player's raw score for a round.")
@dataclass
class SubmitCommand:
    round: Annotated[str, cappa.Arg(help="Round code or round id.")]
    player: Annotated[str, cappa.Arg(help="Player id or username.")]
    raw_score: Annotated[int, cappa.Arg(help="Strokes taken (50-150).")]
    notes: Annotated[str | None, cappa.Arg(short="-n", long="--notes")] = None
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            game = resolve_game(session.db, self.round)
            player = resolve_player(session.db, self.player)
            result = session.league.submit_score(
                game.id,
                player.id,
                self.raw_score,
                self.notes,
            )
            logger.info(
                f"Score {self.raw_score} for {player.username} in {game.name}: "
                f"{result.base_points} points + {result.bonus_points} bonus "
                f"= {result.total_points}",
            )
            _report_bonus(result.bonus)
            logger.info(f"Score id: {result.score_id}")


@cappa.command(name="edit", help="Correct a submitted score.")
@dataclass
class EditCommand:
    score_id: Annotated[str, cappa.Arg(help="Id of the score to edit.")]
    raw_score: Annotated[int, cappa.Arg(help="Corrected raw score.")]
    edited_by: Annotated[
        str,
        cappa.Arg(long="--by", help="Who is making the correction."),
    ]
    notes: Annotated[str | None, cappa.Arg(short="-n", long="--notes")] = None
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            result = session.league.edit_score(
                self.score_id,
                self.raw_score,
                self.notes,
                self.edited_by,
            )
            score = result.score
            logger.info(
                f"Score {score.raw_score} saved: {score.points} points "
                f"+ {score.bonus_points} bonus (edited by {score.edited_by})",
            )
            _report_bonus(result.bonus)


@cappa.command(name="delete", help="Delete a score and re-award the round bonus.")
@dataclass
class DeleteCommand:
    score_id: Annotated[str, cappa.Arg(help="Id of the score to delete.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            bonus = session.league.delete_score(self.score_id)
            logger.info(f"Deleted score {self.score_id}")
            _report_bonus(bonus)


@cappa.command(name="recalc", help="Re-derive bonus points for a round.")
@dataclass
class RecalcCommand:
    round: Annotated[str, cappa.Arg(help="Round code or round id.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            game = resolve_game(session.db, self.round)
            bonus = session.league.recalculate_bonus_points(game.id)
            if not bonus.updated_scores and bonus.ok:
                logger.info(f"{game.name}: bonus points already consistent")
            _report_bonus(bonus)


@cappa.command(name="list", help="Show the scores of a round.")
@dataclass
class ListCommand:
    round: Annotated[str, cappa.Arg(help="Round code or round id.")]
    config: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to golfleague.toml."),
    ] = None

    def __call__(self) -> None:
        with open_league(self.config) as session:
            db = session.db
            game = resolve_game(db, self.round)
            course = db.get_course(game.course_id)
            par = course.par if course else None

            header = f"{'Player':<16} | {'Raw':<4} | {'To Par':<6} | {'Pts':<4} | {'Bonus':<5} | {'Score id':<32}"
            logger.info(f"--- {game.name} ({game.round_code}, {game.status}) ---")
            logger.info(header)
            logger.info("-" * len(header))
            for score in db.get_game_scores(game.id):
                player = db.get_player(score.player_id)
                name = player.username if player else score.player_id
                to_par = format_relative_to_par(score.raw_score, par) if par else "-"
                logger.info(
                    f"{name:<16} | {score.raw_score:<4} | {to_par:<6} | "
                    f"{score.points:<4} | {score.bonus_points:<5} | {score.id:<32}",
                )


@cappa.command(name="score", help="Submit, correct and re-arbitrate scores.")
@dataclass
class ScoreCommand:
    subcommand: cappa.Subcommands[
        SubmitCommand | EditCommand | DeleteCommand | RecalcCommand | ListCommand
    ]
