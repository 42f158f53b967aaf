"""Tables holding one persisted tournament snapshot."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from commander_tournament.models.base import Base


class TournamentSettings(Base):
    """Score and matchmaking configuration (a single row)."""

    __tablename__ = "tournament_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    score_config_json: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    match_config_json: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )


class Player(Base):
    """Registered player info; ids are allocated by the domain, not the database."""

    __tablename__ = "players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    colors: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    external_reference: Mapped[str | None] = mapped_column(String(128), nullable=True)


class Game(Base):
    """One game record; ``position`` is its index in the game log."""

    __tablename__ = "games"
    __table_args__ = (
        CheckConstraint(
            "winner_id IN (player1_id, player2_id, player3_id, player4_id)",
            name="ck_games_winner_in_game",
        ),
    )

    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    player1_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    player2_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    player3_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    player4_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    winner_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)

    @property
    def player_ids(self) -> tuple[int, int, int, int]:
        return (self.player1_id, self.player2_id, self.player3_id, self.player4_id)
