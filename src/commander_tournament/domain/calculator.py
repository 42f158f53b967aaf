"""Four-player Elo logic."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from commander_tournament.domain.common import (
    BASE_WINRATE,
    PLAYERS_PER_GAME,
    GameRecord,
    PlayerId,
    PlayerStats,
)
from commander_tournament.domain.config import ScoreConfig
from commander_tournament.errors import InvalidMatchPlayers, InvalidPlayerId, WinnerNotInMatch

# Rescales a four-way delta to the magnitude of a two-player Elo step.
FOUR_PLAYER_DELTA_SCALE = 0.75


@dataclass(frozen=True)
class MatchupEntry:
    player_id: PlayerId
    stats: PlayerStats
    expected: float
    elo_win: float
    elo_loss: float


@dataclass(frozen=True)
class Matchup:
    """A proposed, not yet committed, four-player game."""

    entries: tuple[MatchupEntry, ...]
    config_version: int

    @property
    def player_ids(self) -> tuple[PlayerId, ...]:
        return tuple(entry.player_id for entry in self.entries)

    def entry_for(self, player_id: PlayerId) -> MatchupEntry:
        for entry in self.entries:
            if entry.player_id == player_id:
                return entry
        raise WinnerNotInMatch(player_id)


@dataclass(frozen=True)
class PlayerGameEvent:
    player_id: PlayerId
    won: bool
    expected_score: float
    pre_elo: float
    elo_delta: float
    post_elo: float


def _normalize(values: Sequence[float]) -> list[float]:
    total = sum(values)
    if total <= 0.0:
        return [1.0 / len(values)] * len(values)
    return [value / total for value in values]


def calculate_expected_scores(
    stats: Sequence[PlayerStats],
    config: ScoreConfig,
) -> list[float]:
    """Blend rating share and winrate share into per-player win expectations.

    Each component is normalized over the participants, so the result sums to 1.
    A component whose scaled values are all zero falls back to an even split.
    """
    # Ratios to the top rating keep large powers finite; shares are unchanged.
    floored_elo = [max(stat.elo, 0.0) for stat in stats]
    top_elo = max(floored_elo)
    scaled_elo = [
        (elo / top_elo) ** config.elo_pow if top_elo > 0.0 else 0.0 for elo in floored_elo
    ]
    scaled_wr = [
        (stat.winrate if stat.winrate is not None else BASE_WINRATE) ** config.wr_pow
        for stat in stats
    ]

    elo_share = _normalize(scaled_elo)
    wr_share = _normalize(scaled_wr)
    elo_weight, wr_weight = config.blend_weights()

    return [elo_weight * elo + wr_weight * wr for elo, wr in zip(elo_share, wr_share)]


def calculate_elo_deltas(expected: float, game_points: float) -> tuple[float, float]:
    """Return (gain on win, loss on defeat) for one participant."""
    win = game_points * (1.0 - expected) / FOUR_PLAYER_DELTA_SCALE
    loss = game_points * expected / FOUR_PLAYER_DELTA_SCALE
    return win, loss


class MatchEloCalculator:
    """Stateful game-by-game four-player Elo calculator."""

    def __init__(
        self,
        config: ScoreConfig,
        *,
        config_version: int = 0,
        player_ids: Iterable[PlayerId] = (),
    ) -> None:
        self.config = config
        self.config_version = config_version
        self._stats: dict[PlayerId, PlayerStats] = {
            player_id: config.new_player_stats() for player_id in player_ids
        }

    def track_player(self, player_id: PlayerId) -> None:
        self._stats.setdefault(player_id, self.config.new_player_stats())

    def get_stats(self, player_id: PlayerId) -> PlayerStats | None:
        return self._stats.get(player_id)

    def tracked_player_count(self) -> int:
        return len(self._stats)

    def stats(self) -> Mapping[PlayerId, PlayerStats]:
        """Return a snapshot of current player stats."""
        return dict(self._stats)

    def create_match(self, player_ids: Sequence[PlayerId]) -> Matchup:
        ids = tuple(player_ids)
        if len(ids) != PLAYERS_PER_GAME or len(set(ids)) != PLAYERS_PER_GAME:
            raise InvalidMatchPlayers(ids)

        stats = [self._stats.get(player_id) or self.config.new_player_stats() for player_id in ids]
        expected = calculate_expected_scores(stats, self.config)

        entries = []
        for player_id, stat, player_expected in zip(ids, stats, expected):
            elo_win, elo_loss = calculate_elo_deltas(player_expected, self.config.game_points)
            entries.append(
                MatchupEntry(
                    player_id=player_id,
                    stats=stat,
                    expected=player_expected,
                    elo_win=elo_win,
                    elo_loss=elo_loss,
                )
            )
        return Matchup(entries=tuple(entries), config_version=self.config_version)

    def update_match(self, matchup: Matchup) -> Matchup:
        if matchup.config_version == self.config_version:
            return matchup
        return self.create_match(matchup.player_ids)

    def process_match(self, matchup: Matchup, winner: PlayerId) -> list[PlayerGameEvent]:
        """Commit a game result; every participant must already be tracked.

        Expectations and deltas are recomputed from current stats, so a
        matchup previewed before other games were committed still applies
        exactly what a replay of the log would.
        """
        if winner not in matchup.player_ids:
            raise WinnerNotInMatch(winner)
        for player_id in matchup.player_ids:
            if player_id not in self._stats:
                raise InvalidPlayerId(player_id)
        matchup = self.create_match(matchup.player_ids)

        events: list[PlayerGameEvent] = []
        updated: dict[PlayerId, PlayerStats] = {}
        for entry in matchup.entries:
            won = entry.player_id == winner
            delta = entry.elo_win if won else -entry.elo_loss
            pre = self._stats[entry.player_id]
            post = pre.after_game(won=won, elo_delta=delta)
            updated[entry.player_id] = post
            events.append(
                PlayerGameEvent(
                    player_id=entry.player_id,
                    won=won,
                    expected_score=entry.expected,
                    pre_elo=pre.elo,
                    elo_delta=delta,
                    post_elo=post.elo,
                )
            )

        self._stats.update(updated)
        return events

    def process_record(self, record: GameRecord) -> list[PlayerGameEvent]:
        return self.process_match(self.create_match(record.players), record.winner)


__all__ = [
    "FOUR_PLAYER_DELTA_SCALE",
    "MatchEloCalculator",
    "Matchup",
    "MatchupEntry",
    "PlayerGameEvent",
    "calculate_elo_deltas",
    "calculate_expected_scores",
]
