"""
Score submission, edits, deletes and bonus re-arbitration.

Every mutation of a round's score set re-derives the bonus holders from the
full set of persisted scores. The read-arbitrate-write sequence runs under a
per-round lock so two submissions to the same round cannot interleave.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import msgspec

from golfleague.core.errors import (
    DuplicateSubmissionError,
    NotEnrolledError,
    RoundClosedError,
    RoundNotFoundError,
    ScoreNotFoundError,
    StoreError,
)
from golfleague.engine.scoring import (
    arbitrate_bonus,
    points,
    preview_bonus,
    validate_raw_score,
)
from golfleague.store.models import Score, new_id, utcnow

if TYPE_CHECKING:
    from golfleague.core.protocols import LeagueStore
    from golfleague.engine.achievements import AchievementEngine

logger = logging.getLogger(__name__)


class RoundLocks:
    """One lock per existing game id, created on first use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def for_round(self, game_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(game_id, threading.Lock())


@dataclass(slots=True)
class BonusUpdate:
    score_id: str
    player_id: str
    bonus_points: int


@dataclass(slots=True)
class FailedBonusUpdate:
    score_id: str
    player_id: str
    bonus_points: int
    reason: str


@dataclass(slots=True)
class BonusRecalculation:
    """Outcome of one re-arbitration pass over a round."""

    game_id: str
    updated_scores: list[BonusUpdate] = field(default_factory=list)
    failed_updates: list[FailedBonusUpdate] = field(default_factory=list)
    # player_id -> bonus the player should hold after this pass
    holders: dict[str, bool] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed_updates


@dataclass(slots=True)
class SubmissionResult:
    score_id: str
    base_points: int
    bonus_points: int
    preview_bonus_points: int
    bonus: BonusRecalculation

    @property
    def total_points(self) -> int:
        return self.base_points + self.bonus_points


@dataclass(slots=True)
class EditResult:
    score: Score
    bonus: BonusRecalculation


class ScoreCoordinator:
    def __init__(
        self,
        store: LeagueStore,
        achievements: AchievementEngine | None = None,
        locks: RoundLocks | None = None,
    ) -> None:
        self.store: LeagueStore = store
        self.achievements: AchievementEngine | None = achievements
        self.locks: RoundLocks = locks or RoundLocks()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def submit_score(
        self,
        game_id: str,
        player_id: str,
        raw_score: int,
        notes: str | None = None,
    ) -> SubmissionResult:
        """
        Validate, persist and re-arbitrate the round.

        Preconditions are checked in order and the first failure is raised:
        round open, player enrolled, no earlier score, raw score in range.
        A failed bonus update for another player does not undo the submission;
        it is reported in the returned `bonus` report.
        """
        if self.store.get_game(game_id) is None:
            raise RoundNotFoundError(game_id)

        with self.locks.for_round(game_id):
            # Re-read under the lock; the round may have closed meanwhile
            game = self.store.get_game(game_id)
            if game is None:
                raise RoundNotFoundError(game_id)
            if game.status != "active":
                raise RoundClosedError(game_id)
            if not self.store.is_participant(game.season_id, player_id):
                raise NotEnrolledError(player_id, game.season_id)

            existing = self.store.get_game_scores(game_id)
            if any(s.player_id == player_id for s in existing):
                raise DuplicateSubmissionError(player_id, game_id)
            validate_raw_score(raw_score)

            base_points = points(raw_score)
            preview = preview_bonus(raw_score, (s.raw_score for s in existing))

            score = Score(
                id=new_id(),
                game_id=game_id,
                player_id=player_id,
                raw_score=raw_score,
                points=base_points,
                bonus_points=preview,
                notes=notes,
            )
            self.store.insert_score(score)
            logger.info(
                f"Score {raw_score} from {player_id} in {game_id}: {base_points} pts, preview bonus {preview}",
            )

            bonus = self._rearbitrate(game_id)

        final_bonus = self._final_bonus(score, bonus)
        self._check_achievements(player_id, game.season_id)

        return SubmissionResult(
            score_id=score.id,
            base_points=base_points,
            bonus_points=final_bonus,
            preview_bonus_points=preview,
            bonus=bonus,
        )

    def edit_score(
        self,
        score_id: str,
        new_raw_score: int,
        new_notes: str | None,
        edited_by: str,
    ) -> EditResult:
        validate_raw_score(new_raw_score)
        current = self.store.get_score(score_id)
        if current is None:
            raise ScoreNotFoundError(score_id)

        with self.locks.for_round(current.game_id):
            # Re-read under the lock; a delete may have won the race
            current = self.store.get_score(score_id)
            if current is None:
                raise ScoreNotFoundError(score_id)

            edited = msgspec.structs.replace(
                current,
                raw_score=new_raw_score,
                points=points(new_raw_score),
                notes=new_notes,
                edited_by=edited_by,
                edited_at=utcnow(),
            )
            self.store.update_score(edited)
            logger.info(
                f"Score {score_id} edited by {edited_by}: {current.raw_score} -> {new_raw_score}",
            )
            bonus = self._rearbitrate(current.game_id)
            refreshed = self.store.get_score(score_id) or edited

        return EditResult(score=refreshed, bonus=bonus)

    def delete_score(self, score_id: str) -> BonusRecalculation:
        current = self.store.get_score(score_id)
        if current is None:
            raise ScoreNotFoundError(score_id)

        with self.locks.for_round(current.game_id):
            self.store.delete_score(score_id)
            logger.info(
                f"Score {score_id} ({current.raw_score}) removed from {current.game_id}",
            )
            return self._rearbitrate(current.game_id)

    def recalculate_bonus_points(self, game_id: str) -> BonusRecalculation:
        """Admin re-synchronization of a round's bonus points."""
        if self.store.get_game(game_id) is None:
            raise RoundNotFoundError(game_id)
        with self.locks.for_round(game_id):
            return self._rearbitrate(game_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _rearbitrate(self, game_id: str) -> BonusRecalculation:
        """Must be called with the round lock held."""
        scores = self.store.get_game_scores(game_id)
        holders = arbitrate_bonus((s.player_id, s.raw_score) for s in scores)
        report = BonusRecalculation(game_id=game_id, holders=holders)

        for score in scores:
            wanted = int(holders[score.player_id])
            if score.bonus_points == wanted:
                continue
            try:
                self.store.set_bonus_points(score.id, wanted)
            except StoreError as e:
                logger.warning(
                    f"!!! Bonus update failed for {score.player_id} in {game_id}: {e}",
                )
                report.failed_updates.append(
                    FailedBonusUpdate(score.id, score.player_id, wanted, str(e)),
                )
                continue
            report.updated_scores.append(BonusUpdate(score.id, score.player_id, wanted))
            logger.info(
                f"{score.player_id} {'+1 bonus' if wanted else '-1 bonus'} in {game_id}",
            )

        return report

    @staticmethod
    def _final_bonus(score: Score, bonus: BonusRecalculation) -> int:
        if any(f.score_id == score.id for f in bonus.failed_updates):
            # The stored row still carries the preview value
            return score.bonus_points
        return int(bonus.holders.get(score.player_id, False))

    def _check_achievements(self, player_id: str, season_id: str) -> None:
        if self.achievements is None:
            return
        try:
            self.achievements.check_and_award(player_id, season_id)
        except StoreError:
            # The score is committed; a missed achievement is picked up next time
            logger.exception(f"Achievement check failed for {player_id}")
