"""Tournament aggregate: player registry, game log, derived stats."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from commander_tournament.domain import matchmaking
from commander_tournament.domain.calculator import MatchEloCalculator, Matchup, PlayerGameEvent
from commander_tournament.domain.common import (
    PLAYERS_PER_GAME,
    Color,
    GameRecord,
    PlayerId,
    PlayerInfo,
    PlayerStats,
)
from commander_tournament.domain.config import (
    MatchmakerConfig,
    ScoreConfig,
    validate_match_config,
    validate_score_config,
)
from commander_tournament.domain.protocol import Strategy
from commander_tournament.domain.replay import ReplaySummary, replay_games
from commander_tournament.errors import (
    GameNotFound,
    InvalidPlayerId,
    InvalidPlayerName,
    NotEnoughPlayers,
    PlayerAlreadyRegistered,
    PlayerNameNotRegistered,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerDetails:
    player_id: PlayerId
    info: PlayerInfo
    stats: PlayerStats


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    player_id: PlayerId
    name: str
    stats: PlayerStats


def _normalize_name(name: str) -> str:
    normalized = name.strip()
    if not normalized:
        raise InvalidPlayerName(name)
    return normalized


def _build_name_index(players: Mapping[PlayerId, PlayerInfo]) -> dict[str, PlayerId]:
    name_index: dict[str, PlayerId] = {}
    for player_id in sorted(players):
        name = _normalize_name(players[player_id].name)
        existing_id = name_index.get(name)
        if existing_id is not None:
            raise PlayerAlreadyRegistered(name, existing_id)
        name_index[name] = player_id
    return name_index


class Tournament:
    """Owns the player registry and the game log; stats are always replayable from them.

    Every operation that changes the log, the score config or the set of
    players rebuilds stats before returning. Rebuilds are staged on fresh
    containers, so a failed operation leaves the tournament as it was.
    """

    def __init__(
        self,
        score_config: ScoreConfig | None = None,
        match_config: MatchmakerConfig | None = None,
    ) -> None:
        self._score_config = score_config or ScoreConfig()
        self._match_config = match_config or MatchmakerConfig()
        validate_score_config(self._score_config)
        validate_match_config(self._match_config)
        self._config_version = 0
        self._players: dict[PlayerId, PlayerInfo] = {}
        self._name_index: dict[str, PlayerId] = {}
        self._games: list[GameRecord] = []
        self._calculator = MatchEloCalculator(self._score_config, config_version=0)

    # Registry

    def register_player(self, name: str) -> PlayerId:
        name = _normalize_name(name)
        existing_id = self._name_index.get(name)
        if existing_id is not None:
            raise PlayerAlreadyRegistered(name, existing_id)

        player_id = max(self._players, default=-1) + 1
        self._players[player_id] = PlayerInfo(name=name)
        self._name_index[name] = player_id
        self._calculator.track_player(player_id)
        logger.debug("Registered player %s as id=%d", name, player_id)
        return player_id

    def get_or_register_player(self, name: str) -> PlayerId:
        try:
            return self.register_player(name)
        except PlayerAlreadyRegistered as exc:
            return exc.existing_id

    def set_player_info(self, player_id: PlayerId, info: PlayerInfo) -> None:
        current = self._players.get(player_id)
        if current is None:
            raise InvalidPlayerId(player_id)

        name = _normalize_name(info.name)
        existing_id = self._name_index.get(name)
        if existing_id is not None and existing_id != player_id:
            raise PlayerAlreadyRegistered(name, existing_id)

        del self._name_index[current.name]
        self._players[player_id] = info.renamed(name)
        self._name_index[name] = player_id

    def get_player_info(self, player_id: PlayerId) -> PlayerInfo:
        info = self._players.get(player_id)
        if info is None:
            raise InvalidPlayerId(player_id)
        return info

    def rename_player(self, from_name: str, to_name: str) -> None:
        player_id = self.player_id(from_name)
        info = self._players[player_id]
        self.set_player_info(player_id, info.renamed(to_name))
        logger.info("Renamed player id=%d from %s to %s", player_id, from_name, to_name)

    def remove_player(self, player_id: PlayerId) -> ReplaySummary:
        if player_id not in self._players:
            raise InvalidPlayerId(player_id)

        players = {key: info for key, info in self._players.items() if key != player_id}
        games = [game for game in self._games if not game.contains(player_id)]
        purged = len(self._games) - len(games)
        summary = self._rebuild(players=players, games=games)
        logger.info("Removed player id=%d and %d of their games", player_id, purged)
        return summary

    def player_id(self, name: str) -> PlayerId:
        try:
            return self._name_index[name.strip()]
        except KeyError as exc:
            raise PlayerNameNotRegistered(name) from exc

    def has_registered_player(self, name: str) -> bool:
        return name.strip() in self._name_index

    def is_id_registered(self, player_id: PlayerId) -> bool:
        return player_id in self._players

    def players(self) -> dict[PlayerId, PlayerInfo]:
        return dict(self._players)

    def get_player_stats(self, player_id: PlayerId) -> PlayerStats | None:
        return self._calculator.get_stats(player_id)

    def create_default_stats(self) -> PlayerStats:
        return self._score_config.new_player_stats()

    def player_details(self, player_id: PlayerId) -> PlayerDetails:
        info = self.get_player_info(player_id)
        stats = self.get_player_stats(player_id) or self.create_default_stats()
        return PlayerDetails(player_id=player_id, info=info, stats=stats)

    def leaderboard(self) -> list[LeaderboardRow]:
        """Players by Elo, highest first; ties go to the higher id."""
        details = [self.player_details(player_id) for player_id in self._players]
        details.sort(key=lambda item: (item.stats.elo, item.player_id), reverse=True)
        return [
            LeaderboardRow(
                rank=index,
                player_id=item.player_id,
                name=item.info.name,
                stats=item.stats,
            )
            for index, item in enumerate(details, start=1)
        ]

    # Games

    def games(self) -> tuple[GameRecord, ...]:
        return tuple(self._games)

    def create_match(self, player_ids: Sequence[PlayerId]) -> Matchup:
        return self._calculator.create_match(player_ids)

    def update_match(self, matchup: Matchup) -> Matchup:
        return self._calculator.update_match(matchup)

    def register_match(self, matchup: Matchup, winner: PlayerId) -> list[PlayerGameEvent]:
        record = GameRecord(players=matchup.player_ids, winner=winner)
        events = self._calculator.process_match(matchup, winner)
        self._games.append(record)
        logger.debug("Registered game #%d %s", len(self._games) - 1, record)
        return events

    def register_record(self, record: GameRecord) -> list[PlayerGameEvent]:
        return self.register_match(self.create_match(record.players), record.winner)

    def set_game_winner(self, index: int, winner: PlayerId) -> ReplaySummary:
        record = self._game_at(index).with_winner(winner)
        games = list(self._games)
        games[index] = record
        return self._rebuild(games=games)

    def delete_game(self, index: int) -> ReplaySummary:
        self._game_at(index)
        games = list(self._games)
        del games[index]
        return self._rebuild(games=games)

    def _game_at(self, index: int) -> GameRecord:
        if index < 0 or index >= len(self._games):
            raise GameNotFound(index)
        return self._games[index]

    # Config

    @property
    def config_version(self) -> int:
        return self._config_version

    def get_score_config(self) -> ScoreConfig:
        return self._score_config

    def set_score_config(self, config: ScoreConfig) -> ReplaySummary:
        validate_score_config(config)
        summary = self._rebuild(score_config=config, config_version=self._config_version + 1)
        logger.info("Score config updated to %s", config.as_config_json())
        return summary

    def get_match_config(self) -> MatchmakerConfig:
        return self._match_config

    def set_match_config(self, config: MatchmakerConfig) -> None:
        validate_match_config(config)
        self._match_config = config

    # Replay

    def reload(self) -> ReplaySummary:
        return self._rebuild()

    def _rebuild(
        self,
        *,
        players: dict[PlayerId, PlayerInfo] | None = None,
        games: list[GameRecord] | None = None,
        score_config: ScoreConfig | None = None,
        config_version: int | None = None,
    ) -> ReplaySummary:
        players = self._players if players is None else players
        games = self._games if games is None else games
        score_config = self._score_config if score_config is None else score_config
        config_version = self._config_version if config_version is None else config_version

        name_index = _build_name_index(players)
        calculator, summary = replay_games(
            config=score_config,
            player_ids=players,
            games=games,
            config_version=config_version,
        )

        self._players = dict(players)
        self._name_index = name_index
        self._games = list(games)
        self._score_config = score_config
        self._config_version = config_version
        self._calculator = calculator
        return summary

    # Matchmaking

    def ranking_context(self) -> matchmaking.RankingContext:
        return matchmaking.RankingContext(
            player_ids=tuple(sorted(self._players)),
            games=tuple(self._games),
            stats=self._calculator.stats(),
            starting_elo=self._score_config.starting_elo,
            match_config=self._match_config,
        )

    def rank(self, strategy: Strategy, focus: PlayerId) -> list[PlayerId]:
        return matchmaking.rank(self.ranking_context(), strategy, focus)

    def rank_names(self, strategy: Strategy, name: str) -> list[str]:
        ranked = self.rank(strategy, self.player_id(name))
        return [self._players[player_id].name for player_id in ranked]

    def rank_least_played(self, focus: PlayerId) -> list[PlayerId]:
        return self.rank(Strategy.LEAST_PLAYED, focus)

    def rank_nemesis(self, focus: PlayerId) -> list[PlayerId]:
        return self.rank(Strategy.NEMESIS, focus)

    def rank_neighbors(self, focus: PlayerId) -> list[PlayerId]:
        return self.rank(Strategy.NEIGHBORS, focus)

    def rank_wr_neighbors(self, focus: PlayerId) -> list[PlayerId]:
        return self.rank(Strategy.WR_NEIGHBORS, focus)

    def rank_loss_with(self, focus: PlayerId) -> list[PlayerId]:
        return self.rank(Strategy.LOSS_WITH, focus)

    def rank_combined(self, focus: PlayerId) -> list[PlayerId]:
        return self.rank(Strategy.COMBINED, focus)

    def propose_match(self, strategy: Strategy, focus: PlayerId) -> Matchup:
        """Build a match of ``focus`` and its three best-ranked opponents."""
        ranked = self.rank(strategy, focus)
        needed = PLAYERS_PER_GAME - 1
        if len(ranked) < needed:
            raise NotEnoughPlayers(len(ranked))
        return self.create_match([focus, *ranked[:needed]])

    # Snapshot

    def serialize(self) -> dict[str, Any]:
        """Return the persisted form; derived stats and the name index are left out."""
        return {
            "config": self._score_config.as_config_json(),
            "match_config": self._match_config.as_config_json(),
            "players": {
                str(player_id): _info_to_json(info)
                for player_id, info in sorted(self._players.items())
            },
            "games": [{"p": list(game.players), "w": game.winner} for game in self._games],
        }

    @classmethod
    def deserialize(cls, raw: Mapping[str, Any]) -> Tournament:
        """Build a tournament from its persisted form and replay its games."""
        match_raw = raw.get("match_config")
        tournament = cls(
            score_config=ScoreConfig.from_config_json(raw.get("config", {})),
            match_config=(
                MatchmakerConfig.from_config_json(match_raw) if match_raw is not None else None
            ),
        )
        players = {
            int(player_id): _info_from_json(info)
            for player_id, info in raw.get("players", {}).items()
        }
        games = [
            GameRecord(players=tuple(game["p"]), winner=int(game["w"]))
            for game in raw.get("games", [])
        ]
        tournament._rebuild(players=players, games=games)
        return tournament


def _info_to_json(info: PlayerInfo) -> dict[str, Any]:
    return {
        "name": info.name,
        "description": info.description,
        "colors": [color.value for color in info.sorted_colors],
        "external_reference": info.external_reference,
    }


def _info_from_json(raw: Mapping[str, Any]) -> PlayerInfo:
    return PlayerInfo(
        name=str(raw["name"]),
        description=str(raw.get("description", "")),
        colors=frozenset(Color.parse(str(color)) for color in raw.get("colors", [])),
        external_reference=raw.get("external_reference"),
    )


__all__ = ["LeaderboardRow", "PlayerDetails", "Tournament"]
