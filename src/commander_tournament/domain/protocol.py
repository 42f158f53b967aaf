"""Shared enums for opponent ranking."""

from __future__ import annotations

from enum import Enum


class Strategy(str, Enum):
    """How opponents are ordered for a focus player."""

    LEAST_PLAYED = "least_played"
    NEMESIS = "nemesis"
    NEIGHBORS = "neighbors"
    WR_NEIGHBORS = "wr_neighbors"
    LOSS_WITH = "loss_with"
    COMBINED = "combined"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Strategy.LEAST_PLAYED: "Least Played",
    Strategy.NEMESIS: "Rematch",
    Strategy.NEIGHBORS: "Neighbors",
    Strategy.WR_NEIGHBORS: "WR Neighbors",
    Strategy.LOSS_WITH: "Lost With",
    Strategy.COMBINED: "Combined",
}

BASE_STRATEGIES = (
    Strategy.LEAST_PLAYED,
    Strategy.NEMESIS,
    Strategy.NEIGHBORS,
    Strategy.WR_NEIGHBORS,
    Strategy.LOSS_WITH,
)


__all__ = ["BASE_STRATEGIES", "Strategy"]
