"""Elo ratings and opponent recommendations for four-player commander pods."""

from commander_tournament.domain import (
    Color,
    GameRecord,
    MatchmakerConfig,
    Matchup,
    PlayerInfo,
    PlayerStats,
    ScoreConfig,
    Strategy,
    Tournament,
    ingest_tsv_games,
)
from commander_tournament.errors import TournamentError

__all__ = [
    "Color",
    "GameRecord",
    "MatchmakerConfig",
    "Matchup",
    "PlayerInfo",
    "PlayerStats",
    "ScoreConfig",
    "Strategy",
    "Tournament",
    "TournamentError",
    "ingest_tsv_games",
]
