"""Snapshot persistence."""

from commander_tournament.repositories.snapshot import (
    SNAPSHOT_REPOSITORY,
    SnapshotRepository,
    load_or_create,
    load_snapshot_json,
    save_snapshot_json,
    save_tournament,
)

__all__ = [
    "SNAPSHOT_REPOSITORY",
    "SnapshotRepository",
    "load_or_create",
    "load_snapshot_json",
    "save_snapshot_json",
    "save_tournament",
]
