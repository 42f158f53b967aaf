"""Persistence for tournament snapshots (SQL tables and JSON files)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from commander_tournament.domain.tournament import Tournament
from commander_tournament.models.base import Base
from commander_tournament.models.snapshot import Game, Player, TournamentSettings

logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = 1


class SnapshotRepository:
    """Stores exactly one tournament snapshot; saving replaces the previous one."""

    def ensure_schema(self, engine: Engine) -> None:
        """Create required tables when missing."""
        Base.metadata.create_all(
            bind=engine,
            tables=[TournamentSettings.__table__, Player.__table__, Game.__table__],
        )

    def save(self, session: Session, tournament: Tournament) -> None:
        snapshot = tournament.serialize()

        session.execute(delete(Game))
        session.execute(delete(Player))
        session.execute(delete(TournamentSettings))

        session.execute(
            insert(TournamentSettings),
            [
                {
                    "id": SETTINGS_ROW_ID,
                    "score_config_json": snapshot["config"],
                    "match_config_json": snapshot["match_config"],
                }
            ],
        )

        player_rows = [
            {
                "id": int(player_id),
                "name": info["name"],
                "description": info["description"],
                "colors": info["colors"],
                "external_reference": info["external_reference"],
            }
            for player_id, info in snapshot["players"].items()
        ]
        if player_rows:
            session.execute(insert(Player), player_rows)

        game_rows = [
            {
                "position": position,
                "player1_id": game["p"][0],
                "player2_id": game["p"][1],
                "player3_id": game["p"][2],
                "player4_id": game["p"][3],
                "winner_id": game["w"],
            }
            for position, game in enumerate(snapshot["games"])
        ]
        if game_rows:
            session.execute(insert(Game), game_rows)

        session.flush()
        logger.info(
            "Saved snapshot with %d players and %d games",
            len(player_rows),
            len(game_rows),
        )

    def load(self, session: Session) -> Tournament | None:
        """Load the stored snapshot, or None if nothing has been saved yet."""
        settings = session.get(TournamentSettings, SETTINGS_ROW_ID)
        if settings is None:
            return None

        players = session.execute(select(Player).order_by(Player.id)).scalars().all()
        games = session.execute(select(Game).order_by(Game.position)).scalars().all()

        raw: dict[str, Any] = {
            "config": settings.score_config_json,
            "match_config": settings.match_config_json,
            "players": {
                str(player.id): {
                    "name": player.name,
                    "description": player.description,
                    "colors": list(player.colors),
                    "external_reference": player.external_reference,
                }
                for player in players
            },
            "games": [{"p": list(game.player_ids), "w": game.winner_id} for game in games],
        }
        return Tournament.deserialize(raw)


SNAPSHOT_REPOSITORY = SnapshotRepository()


def load_or_create(session_factory: sessionmaker[Session]) -> Tournament:
    with session_factory() as session:
        tournament = SNAPSHOT_REPOSITORY.load(session)
    return tournament if tournament is not None else Tournament()


def save_tournament(session_factory: sessionmaker[Session], tournament: Tournament) -> None:
    with session_factory() as session:
        SNAPSHOT_REPOSITORY.save(session, tournament)
        session.commit()


def save_snapshot_json(path: Path, tournament: Tournament) -> None:
    path.write_text(json.dumps(tournament.serialize(), indent=2), encoding="utf-8")


def load_snapshot_json(path: Path) -> Tournament:
    with path.open("r", encoding="utf-8") as file:
        raw = json.load(file)
    return Tournament.deserialize(raw)


__all__ = [
    "SNAPSHOT_REPOSITORY",
    "SnapshotRepository",
    "load_or_create",
    "load_snapshot_json",
    "save_snapshot_json",
    "save_tournament",
]
