"""Tests for TSV game ingestion."""

from __future__ import annotations

import pytest

from commander_tournament.domain.ingestion import ingest_tsv_games, split_tsv_records
from commander_tournament.domain.tournament import Tournament
from commander_tournament.errors import InvalidPlayerName


def test_split_tsv_records_strips_and_truncates() -> None:
    records = list(split_tsv_records("A \tB\tC\tD\t A\textra\nshort\tline"))
    assert records == [["A", "B", "C", "D", "A"], None]


def test_ingest_registers_players_and_games() -> None:
    tournament = Tournament()
    tournament.register_player("Atraxa")
    text = "\n".join(
        [
            "Atraxa\tKrenko\tMuldrotha\tEdgar\tKrenko",
            "not enough\tfields",
            "Atraxa\tKrenko\tMuldrotha\tYuriko\tYuriko\tnote",
        ]
    )

    stats = ingest_tsv_games(tournament, text)

    assert stats.total_lines == 3
    assert stats.games_registered == 2
    assert stats.skipped_lines == 1
    assert stats.players_created == 4
    assert len(tournament.games()) == 2
    assert tournament.games()[1].winner == tournament.player_id("Yuriko")
    assert tournament.get_player_stats(tournament.player_id("Krenko")).wins == 1
    assert "Games registered:   2" in stats.summary()


def test_ingest_skips_lines_that_cannot_form_a_game() -> None:
    tournament = Tournament()
    text = "\n".join(
        [
            "A\tB\tC\tD\tA",
            "A\tB\tC\tD\tZ",
            "A\tA\tC\tD\tA",
            "A\tB\tC\tD\tB",
        ]
    )

    stats = ingest_tsv_games(tournament, text)

    assert stats.games_registered == 2
    assert stats.skipped_lines == 2
    assert [game.winner for game in tournament.games()] == [
        tournament.player_id("A"),
        tournament.player_id("B"),
    ]
    assert tournament.has_registered_player("Z")


def test_ingest_stops_at_invalid_name_keeping_earlier_games() -> None:
    tournament = Tournament()
    text = "\n".join(
        [
            "A\tB\tC\tD\tA",
            "A\tB\t \tD\tB",
            "A\tB\tC\tD\tB",
        ]
    )

    with pytest.raises(InvalidPlayerName):
        ingest_tsv_games(tournament, text)

    assert len(tournament.games()) == 1
