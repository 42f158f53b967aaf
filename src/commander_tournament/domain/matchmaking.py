"""Opponent ranking strategies and their registry."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from commander_tournament.domain.common import BASE_WINRATE, GameRecord, PlayerId, PlayerStats
from commander_tournament.domain.config import MatchmakerConfig
from commander_tournament.domain.protocol import BASE_STRATEGIES, Strategy
from commander_tournament.errors import InvalidPlayerId


@dataclass(frozen=True)
class RankingContext:
    """Read-only view of the tournament that rankers work from."""

    player_ids: tuple[PlayerId, ...]
    games: tuple[GameRecord, ...]
    stats: Mapping[PlayerId, PlayerStats]
    starting_elo: float
    match_config: MatchmakerConfig

    def elo(self, player_id: PlayerId) -> float:
        stats = self.stats.get(player_id)
        return stats.elo if stats is not None else self.starting_elo

    def winrate(self, player_id: PlayerId) -> float:
        stats = self.stats.get(player_id)
        if stats is None or stats.winrate is None:
            return BASE_WINRATE
        return stats.winrate

    def opponents(self, focus: PlayerId) -> list[PlayerId]:
        return [player_id for player_id in self.player_ids if player_id != focus]

    def games_with(self, focus: PlayerId) -> list[GameRecord]:
        return [game for game in self.games if game.contains(focus)]


Ranker = Callable[[RankingContext, PlayerId], list[PlayerId]]


def rank_least_played(context: RankingContext, focus: PlayerId) -> list[PlayerId]:
    """Opponents the focus player has shared the fewest games with."""
    shared = Counter(
        player_id
        for game in context.games_with(focus)
        for player_id in game.players
        if player_id != focus
    )
    focus_elo = context.elo(focus)
    return sorted(
        context.opponents(focus),
        key=lambda player_id: (
            shared[player_id],
            abs(focus_elo - context.elo(player_id)),
            player_id,
        ),
    )


def rank_nemesis(context: RankingContext, focus: PlayerId) -> list[PlayerId]:
    """Opponents who beat the focus player most, net of the focus player's wins over them."""
    net_score: Counter[PlayerId] = Counter()
    for game in context.games_with(focus):
        if game.winner == focus:
            for player_id in game.players:
                if player_id != focus:
                    net_score[player_id] -= 1
        else:
            net_score[game.winner] += 1

    return sorted(
        context.opponents(focus),
        key=lambda player_id: (-net_score[player_id], context.elo(player_id), player_id),
    )


def rank_neighbors(context: RankingContext, focus: PlayerId) -> list[PlayerId]:
    focus_elo = context.elo(focus)
    return sorted(
        context.opponents(focus),
        key=lambda player_id: (abs(focus_elo - context.elo(player_id)), player_id),
    )


def rank_wr_neighbors(context: RankingContext, focus: PlayerId) -> list[PlayerId]:
    focus_wr = context.winrate(focus)
    return sorted(
        context.opponents(focus),
        key=lambda player_id: (abs(focus_wr - context.winrate(player_id)), player_id),
    )


def rank_loss_with(context: RankingContext, focus: PlayerId) -> list[PlayerId]:
    """Opponents the focus player keeps losing alongside come first."""
    together: Counter[PlayerId] = Counter()
    lost_together: Counter[PlayerId] = Counter()
    for game in context.games_with(focus):
        focus_lost = game.winner != focus
        for player_id in game.players:
            if player_id == focus:
                continue
            together[player_id] += 1
            if focus_lost:
                lost_together[player_id] += 1

    focus_elo = context.elo(focus)
    return sorted(
        context.opponents(focus),
        key=lambda player_id: (
            together[player_id] - 2 * lost_together[player_id],
            -together[player_id],
            abs(focus_elo - context.elo(player_id)),
            player_id,
        ),
    )


def rank_combined(context: RankingContext, focus: PlayerId) -> list[PlayerId]:
    """Weighted sum of each opponent's position across the base strategies."""
    totals = {player_id: 0.0 for player_id in context.opponents(focus)}
    for strategy in BASE_STRATEGIES:
        weight = context.match_config.weight_for(strategy)
        for position, player_id in enumerate(get(strategy)(context, focus)):
            totals[player_id] += position * weight

    return sorted(totals, key=lambda player_id: (totals[player_id], player_id))


_REGISTRY: dict[Strategy, Ranker] = {}


def register(strategy: Strategy, ranker: Ranker) -> None:
    """Register one ranking strategy."""
    if strategy in _REGISTRY:
        raise ValueError(f"Duplicate ranker registration for strategy={strategy.value}")
    _REGISTRY[strategy] = ranker


def get(strategy: Strategy) -> Ranker:
    try:
        return _REGISTRY[strategy]
    except KeyError as exc:
        available = ", ".join(item.value for item in _REGISTRY)
        raise KeyError(
            f"No ranker registered for {strategy.value}. Available: {available}"
        ) from exc


def rank(context: RankingContext, strategy: Strategy, focus: PlayerId) -> list[PlayerId]:
    """Order opponents of ``focus`` by ``strategy``, most recommended first."""
    if focus not in context.player_ids:
        raise InvalidPlayerId(focus)
    return get(strategy)(context, focus)


def _register_defaults() -> None:
    if _REGISTRY:
        return
    register(Strategy.LEAST_PLAYED, rank_least_played)
    register(Strategy.NEMESIS, rank_nemesis)
    register(Strategy.NEIGHBORS, rank_neighbors)
    register(Strategy.WR_NEIGHBORS, rank_wr_neighbors)
    register(Strategy.LOSS_WITH, rank_loss_with)
    register(Strategy.COMBINED, rank_combined)


_register_defaults()

__all__ = [
    "Ranker",
    "RankingContext",
    "get",
    "rank",
    "rank_combined",
    "rank_least_played",
    "rank_loss_with",
    "rank_neighbors",
    "rank_nemesis",
    "rank_wr_neighbors",
    "register",
]
