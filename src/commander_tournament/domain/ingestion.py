"""
Bulk ingestion of tab-separated game results.

Each line holds at least five tab-separated fields: the four participant
names followed by the winner's name. Extra fields are ignored. Unknown
names are registered on the fly, even on lines that are later skipped.

Lines that are too short, repeat a participant, or name a winner who did
not play are skipped and counted. Any other error stops the batch, and
games before the failing line stay committed. Callers that need
all-or-nothing imports should serialize the tournament first and restore
it on error.

Usage:
    from commander_tournament.domain.ingestion import ingest_tsv_games

    stats = ingest_tsv_games(tournament, path.read_text())
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from commander_tournament.domain.common import PLAYERS_PER_GAME, GameRecord
from commander_tournament.domain.tournament import Tournament
from commander_tournament.errors import InvalidMatchPlayers, WinnerNotInMatch

logger = logging.getLogger(__name__)

FIELDS_PER_RECORD = PLAYERS_PER_GAME + 1


@dataclass
class IngestionStats:
    """Statistics from one ingestion run."""

    total_lines: int = 0
    games_registered: int = 0
    skipped_lines: int = 0
    players_created: int = 0

    def summary(self) -> str:
        lines = [
            "TSV ingestion complete:",
            f"  Lines read:         {self.total_lines}",
            f"  Games registered:   {self.games_registered}",
            f"  Lines skipped:      {self.skipped_lines}",
            f"  Players created:    {self.players_created}",
        ]
        return "\n".join(lines)


def split_tsv_records(text: str) -> Iterator[list[str] | None]:
    """Yield the name fields of each line, or None for lines that are too short."""
    for line in text.splitlines():
        parts = line.split("\t")
        if len(parts) < FIELDS_PER_RECORD:
            yield None
            continue
        yield [part.strip() for part in parts[:FIELDS_PER_RECORD]]


def ingest_tsv_games(tournament: Tournament, text: str) -> IngestionStats:
    stats = IngestionStats()
    for line_number, fields in enumerate(split_tsv_records(text), start=1):
        stats.total_lines += 1
        if fields is None:
            stats.skipped_lines += 1
            logger.debug("Skipping line %d: fewer than %d fields", line_number, FIELDS_PER_RECORD)
            continue

        known_before = len(tournament.players())
        player_ids = [tournament.get_or_register_player(name) for name in fields]
        stats.players_created += len(tournament.players()) - known_before

        try:
            record = GameRecord(players=tuple(player_ids[:PLAYERS_PER_GAME]), winner=player_ids[-1])
        except (InvalidMatchPlayers, WinnerNotInMatch) as exc:
            stats.skipped_lines += 1
            logger.debug("Skipping line %d: %s", line_number, exc)
            continue

        tournament.register_record(record)
        stats.games_registered += 1

    logger.info(stats.summary())
    return stats


__all__ = ["FIELDS_PER_RECORD", "IngestionStats", "ingest_tsv_games", "split_tsv_records"]
