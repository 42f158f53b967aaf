"""Scoring and matchmaking configuration, plus TOML preset loading."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from commander_tournament.domain.common import PlayerStats
from commander_tournament.domain.config_base import (
    BasePresetConfig,
    load_preset_configs,
    load_preset_file,
)
from commander_tournament.domain.protocol import Strategy


@dataclass(frozen=True)
class ScoreConfig:
    """Parameters that define how ratings evolve."""

    starting_elo: float = 1500.0
    game_points: float = 25.0
    elo_pow: float = 6.0
    wr_pow: float = 1.0
    elo_weight: float = 65.0
    wr_weight: float = 100.0

    def new_player_stats(self) -> PlayerStats:
        return PlayerStats(elo=self.starting_elo, games=0, wins=0)

    def blend_weights(self) -> tuple[float, float]:
        """Return the normalized (elo, winrate) blend weights."""
        total = self.elo_weight + self.wr_weight
        return self.elo_weight / total, self.wr_weight / total

    def as_config_json(self) -> dict[str, float]:
        return asdict(self)

    @classmethod
    def from_config_json(cls, raw: dict[str, Any]) -> ScoreConfig:
        defaults = cls()
        return cls(
            **{
                item.name: float(raw.get(item.name, getattr(defaults, item.name)))
                for item in fields(cls)
            }
        )


@dataclass(frozen=True)
class MatchmakerConfig:
    """Per-strategy weights used by the combined opponent ranking."""

    least_played: float = 6.0
    nemesis: float = 4.0
    neighbor: float = 5.0
    wr_neighbor: float = 3.0
    lost_with: float = 3.0

    def weight_for(self, strategy: Strategy) -> float:
        if strategy is Strategy.LEAST_PLAYED:
            return self.least_played
        if strategy is Strategy.NEMESIS:
            return self.nemesis
        if strategy is Strategy.NEIGHBORS:
            return self.neighbor
        if strategy is Strategy.WR_NEIGHBORS:
            return self.wr_neighbor
        if strategy is Strategy.LOSS_WITH:
            return self.lost_with
        raise ValueError(f"Strategy {strategy.value} has no combined weight")

    def as_config_json(self) -> dict[str, float]:
        return asdict(self)

    @classmethod
    def from_config_json(cls, raw: dict[str, Any]) -> MatchmakerConfig:
        defaults = cls()
        return cls(
            **{
                item.name: float(raw.get(item.name, getattr(defaults, item.name)))
                for item in fields(cls)
            }
        )


@dataclass(frozen=True)
class TournamentPresetConfig(BasePresetConfig):
    """One named scoring + matchmaking preset."""

    score: ScoreConfig = field(default_factory=ScoreConfig)
    matchmaking: MatchmakerConfig = field(default_factory=MatchmakerConfig)

    def as_config_json(self) -> dict[str, Any]:
        return {
            "score": self.score.as_config_json(),
            "matchmaking": self.matchmaking.as_config_json(),
        }


def validate_score_config(config: ScoreConfig, *, source: str = "score") -> None:
    if config.starting_elo <= 0.0:
        raise ValueError(f"{source}: starting_elo must be > 0")
    if config.game_points < 0.0:
        raise ValueError(f"{source}: game_points must be >= 0")
    if config.elo_pow < 0.0:
        raise ValueError(f"{source}: elo_pow must be >= 0")
    if config.wr_pow < 0.0:
        raise ValueError(f"{source}: wr_pow must be >= 0")
    if config.elo_weight < 0.0:
        raise ValueError(f"{source}: elo_weight must be >= 0")
    if config.wr_weight < 0.0:
        raise ValueError(f"{source}: wr_weight must be >= 0")
    if config.elo_weight + config.wr_weight <= 0.0:
        raise ValueError(f"{source}: elo_weight + wr_weight must be > 0")


def validate_match_config(config: MatchmakerConfig, *, source: str = "matchmaking") -> None:
    for item in fields(config):
        if getattr(config, item.name) < 0.0:
            raise ValueError(f"{source}: {item.name} must be >= 0")


def load_tournament_config(file_path: Path) -> TournamentPresetConfig:
    """Load and validate a single TOML preset file."""
    return load_preset_file(file_path, _parse_tournament_config)


def load_tournament_configs(config_dir: Path) -> list[TournamentPresetConfig]:
    """Load and validate all TOML preset files in a directory."""
    return load_preset_configs(
        config_dir,
        _parse_tournament_config,
        duplicate_name_label="tournament",
    )


def _parse_tournament_config(raw: dict[str, Any], file_path: Path) -> TournamentPresetConfig:
    system_raw = raw.get("system", {})
    score_raw = raw.get("score", {})
    matchmaking_raw = raw.get("matchmaking", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    score = ScoreConfig.from_config_json(score_raw)
    validate_score_config(score, source=f"{file_path}: [score]")

    matchmaking = MatchmakerConfig.from_config_json(matchmaking_raw)
    validate_match_config(matchmaking, source=f"{file_path}: [matchmaking]")

    return TournamentPresetConfig(
        name=name,
        description=description,
        file_path=file_path,
        score=score,
        matchmaking=matchmaking,
    )


__all__ = [
    "MatchmakerConfig",
    "ScoreConfig",
    "TournamentPresetConfig",
    "load_tournament_config",
    "load_tournament_configs",
    "validate_match_config",
    "validate_score_config",
]
