"""ORM models."""

from commander_tournament.models.base import Base
from commander_tournament.models.snapshot import Game, Player, TournamentSettings

__all__ = ["Base", "Game", "Player", "TournamentSettings"]
