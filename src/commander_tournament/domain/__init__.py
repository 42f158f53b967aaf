"""Tournament rating and matchmaking domain modules."""

from commander_tournament.domain.calculator import (
    MatchEloCalculator,
    Matchup,
    MatchupEntry,
    PlayerGameEvent,
    calculate_expected_scores,
)
from commander_tournament.domain.common import Color, GameRecord, PlayerId, PlayerInfo, PlayerStats
from commander_tournament.domain.config import (
    MatchmakerConfig,
    ScoreConfig,
    TournamentPresetConfig,
    load_tournament_config,
    load_tournament_configs,
)
from commander_tournament.domain.ingestion import IngestionStats, ingest_tsv_games
from commander_tournament.domain.protocol import Strategy
from commander_tournament.domain.replay import ReplaySummary, replay_games
from commander_tournament.domain.tournament import LeaderboardRow, PlayerDetails, Tournament

__all__ = [
    "Color",
    "GameRecord",
    "IngestionStats",
    "LeaderboardRow",
    "MatchEloCalculator",
    "MatchmakerConfig",
    "Matchup",
    "MatchupEntry",
    "PlayerDetails",
    "PlayerGameEvent",
    "PlayerId",
    "PlayerInfo",
    "PlayerStats",
    "ReplaySummary",
    "ScoreConfig",
    "Strategy",
    "Tournament",
    "TournamentPresetConfig",
    "calculate_expected_scores",
    "ingest_tsv_games",
    "load_tournament_config",
    "load_tournament_configs",
    "replay_games",
]
