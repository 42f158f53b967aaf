"""Exceptions raised by tournament operations."""

from __future__ import annotations

from collections.abc import Iterable


class TournamentError(Exception):
    """Base class for every error a tournament operation can raise."""


class InvalidPlayerId(TournamentError):
    def __init__(self, player_id: int) -> None:
        self.player_id = player_id
        super().__init__(f"Player ID is not valid: {player_id}")


class PlayerNameNotRegistered(TournamentError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Player name is not registered: {name}")


PlayerNotRegistered = PlayerNameNotRegistered


class PlayerAlreadyRegistered(TournamentError):
    """Raised when a name is already bound to a different player id."""

    def __init__(self, name: str, existing_id: int) -> None:
        self.name = name
        self.existing_id = existing_id
        super().__init__(f"Player name is already registered: {name} (id={existing_id})")


class InvalidPlayerName(TournamentError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Player name is not valid: {name!r}")


class WinnerNotInMatch(TournamentError):
    def __init__(self, winner: int) -> None:
        self.winner = winner
        super().__init__(f"Player is not in the match: {winner}")


class GameNotFound(TournamentError):
    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Invalid game: {index}")


class NotEnoughPlayers(TournamentError):
    def __init__(self, available: int) -> None:
        self.available = available
        super().__init__(f"Not enough players: {available} opponents available, 3 required")


class InvalidMatchPlayers(TournamentError):
    """Raised when a match is not made of exactly four distinct players."""

    def __init__(self, player_ids: Iterable[int]) -> None:
        self.player_ids = tuple(player_ids)
        super().__init__(
            f"A match needs exactly 4 distinct players, got {list(self.player_ids)}"
        )


__all__ = [
    "GameNotFound",
    "InvalidMatchPlayers",
    "InvalidPlayerId",
    "InvalidPlayerName",
    "NotEnoughPlayers",
    "PlayerAlreadyRegistered",
    "PlayerNameNotRegistered",
    "PlayerNotRegistered",
    "TournamentError",
    "WinnerNotInMatch",
]
