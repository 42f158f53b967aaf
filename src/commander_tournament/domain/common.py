"""Shared value types for tournament ratings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from commander_tournament.errors import InvalidMatchPlayers, WinnerNotInMatch

PlayerId = int

PLAYERS_PER_GAME = 4
BASE_WINRATE = 1.0 / PLAYERS_PER_GAME


class Color(str, Enum):
    """Deck color identity tags."""

    WHITE = "White"
    BLUE = "Blue"
    GREEN = "Green"
    RED = "Red"
    BLACK = "Black"
    COLORLESS = "Colorless"

    @classmethod
    def parse(cls, value: str) -> Color:
        """Parse a full color name or its one-letter alias (w, u, g, r, b, c)."""
        key = value.strip().lower()
        alias = _COLOR_ALIASES.get(key)
        if alias is not None:
            return alias
        for color in cls:
            if color.value.lower() == key:
                return color
        raise ValueError(f"Unknown color: {value!r}")


_COLOR_ALIASES = {
    "w": Color.WHITE,
    "u": Color.BLUE,
    "g": Color.GREEN,
    "r": Color.RED,
    "b": Color.BLACK,
    "c": Color.COLORLESS,
}

COLOR_ORDER = tuple(Color)


@dataclass(frozen=True)
class PlayerInfo:
    """Descriptive data for one registered deck/player."""

    name: str
    description: str = ""
    colors: frozenset[Color] = field(default_factory=frozenset)
    external_reference: str | None = None

    def __post_init__(self) -> None:
        # Accept any iterable of colors, store as a frozenset.
        object.__setattr__(self, "colors", frozenset(self.colors))

    @property
    def sorted_colors(self) -> tuple[Color, ...]:
        return tuple(color for color in COLOR_ORDER if color in self.colors)

    @property
    def moxfield_link(self) -> str | None:
        if self.external_reference is None:
            return None
        return f"https://moxfield.com/decks/{self.external_reference}"

    @property
    def moxfield_goldfish_link(self) -> str | None:
        if self.external_reference is None:
            return None
        return f"https://moxfield.com/decks/{self.external_reference}/goldfish"

    def renamed(self, name: str) -> PlayerInfo:
        return replace(self, name=name)


@dataclass(frozen=True)
class PlayerStats:
    """Rating state for one player.

    Only built as starting stats (``ScoreConfig.new_player_stats``) or by
    accumulating a committed game with ``after_game``.
    """

    elo: float
    games: int = 0
    wins: int = 0

    @property
    def winrate(self) -> float | None:
        if self.games == 0:
            return None
        return self.wins / self.games

    def after_game(self, *, won: bool, elo_delta: float) -> PlayerStats:
        return PlayerStats(
            elo=self.elo + elo_delta,
            games=self.games + 1,
            wins=self.wins + (1 if won else 0),
        )


@dataclass(frozen=True)
class GameRecord:
    """One committed game: four distinct participants and the winner."""

    players: tuple[PlayerId, PlayerId, PlayerId, PlayerId]
    winner: PlayerId

    def __post_init__(self) -> None:
        players = tuple(int(player_id) for player_id in self.players)
        if len(players) != PLAYERS_PER_GAME or len(set(players)) != PLAYERS_PER_GAME:
            raise InvalidMatchPlayers(players)
        if self.winner not in players:
            raise WinnerNotInMatch(self.winner)
        object.__setattr__(self, "players", players)

    def contains(self, player_id: PlayerId) -> bool:
        return player_id in self.players

    def with_winner(self, winner: PlayerId) -> GameRecord:
        return GameRecord(players=self.players, winner=winner)


__all__ = [
    "BASE_WINRATE",
    "COLOR_ORDER",
    "Color",
    "GameRecord",
    "PLAYERS_PER_GAME",
    "PlayerId",
    "PlayerInfo",
    "PlayerStats",
]
