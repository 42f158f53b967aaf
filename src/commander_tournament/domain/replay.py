"""Rebuild derived player stats from the game log."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from commander_tournament.domain.calculator import MatchEloCalculator
from commander_tournament.domain.common import GameRecord, PlayerId
from commander_tournament.domain.config import ScoreConfig
from commander_tournament.errors import TournamentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplaySummary:
    """Outcome of one replay run."""

    processed_games: int
    tracked_players: int
    config_version: int


def replay_games(
    *,
    config: ScoreConfig,
    player_ids: Iterable[PlayerId],
    games: Sequence[GameRecord],
    config_version: int = 0,
) -> tuple[MatchEloCalculator, ReplaySummary]:
    """Feed every game through a fresh calculator, in log order.

    The returned calculator is never shared with live state, so a failure
    part-way leaves the caller's current stats untouched.
    """
    calculator = MatchEloCalculator(
        config,
        config_version=config_version,
        player_ids=player_ids,
    )

    for index, record in enumerate(games):
        try:
            calculator.process_record(record)
        except TournamentError:
            logger.error("Replay failed at game index %d: %s", index, record)
            raise

    summary = ReplaySummary(
        processed_games=len(games),
        tracked_players=calculator.tracked_player_count(),
        config_version=config_version,
    )
    logger.info(
        "Replayed %d games for %d players (config_version=%d)",
        summary.processed_games,
        summary.tracked_players,
        summary.config_version,
    )
    return calculator, summary


__all__ = ["ReplaySummary", "replay_games"]
