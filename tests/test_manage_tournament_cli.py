"""End-to-end tests for the tournament management CLI."""

from __future__ import annotations

import json
from pathlib import Path

from sqlalchemy import insert
from typer.testing import CliRunner

from commander_tournament.db import create_db_engine, create_session_factory
from commander_tournament.models import Game, Player, TournamentSettings
from commander_tournament.repositories import SNAPSHOT_REPOSITORY
from manage_tournament import app

runner = CliRunner()


def _invoke(db_url: str, *args: str):
    return runner.invoke(app, [*args, "--db-url", db_url])


def _db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'tournament.db'}"


def test_register_submit_and_leaderboard(tmp_path: Path) -> None:
    db_url = _db_url(tmp_path)

    result = _invoke(db_url, "register", "A", "B", "C", "D", "E")
    assert result.exit_code == 0, result.output
    assert "registered E id=4" in result.output

    result = _invoke(db_url, "submit", "A", "B", "C", "D", "--winner", "A")
    assert result.exit_code == 0, result.output
    assert "1500.00 ->  1525.00 (+25.00)" in result.output

    result = _invoke(db_url, "leaderboard")
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith(" 1. A ")
    assert lines[1].startswith(" 2. E ")

    result = _invoke(db_url, "games")
    assert "winner=A" in result.output


def test_rank_and_propose(tmp_path: Path) -> None:
    db_url = _db_url(tmp_path)
    _invoke(db_url, "register", "A", "B", "C", "D", "E")
    _invoke(db_url, "submit", "A", "B", "C", "D", "--winner", "B")

    result = _invoke(db_url, "rank", "A", "--strategy", "least_played")
    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[0] == " 1. E"

    result = _invoke(db_url, "propose", "A", "--strategy", "nemesis")
    assert result.exit_code == 0, result.output
    assert "strategy=Rematch" in result.output
    assert result.output.splitlines()[1].startswith("A ")
    assert result.output.splitlines()[2].startswith("B ")


def test_errors_exit_with_code_one_and_keep_state(tmp_path: Path) -> None:
    db_url = _db_url(tmp_path)
    _invoke(db_url, "register", "A", "B", "C", "D", "E")

    result = _invoke(db_url, "submit", "A", "B", "C", "D", "--winner", "E")
    assert result.exit_code == 1
    assert "error: Player is not in the match" in result.output

    result = _invoke(db_url, "show", "Nobody")
    assert result.exit_code == 1
    assert "error: Player name is not registered: Nobody" in result.output

    result = _invoke(db_url, "games")
    assert result.output.strip() == ""


def test_set_info_show_rename_and_remove(tmp_path: Path) -> None:
    db_url = _db_url(tmp_path)
    _invoke(db_url, "register", "A", "B", "C", "D")

    result = _invoke(
        db_url,
        "set-info",
        "A",
        "--description",
        "Angels",
        "--color",
        "w",
        "--color",
        "Black",
        "--moxfield-id",
        "abc",
    )
    assert result.exit_code == 0, result.output

    result = _invoke(db_url, "show", "A")
    assert "colors=White,Black" in result.output
    assert "deck=https://moxfield.com/decks/abc" in result.output
    assert "wr=-" in result.output

    result = _invoke(db_url, "set-info", "A", "--color", "purple")
    assert result.exit_code != 0

    assert _invoke(db_url, "rename", "A", "Alpha").exit_code == 0
    _invoke(db_url, "submit", "Alpha", "B", "C", "D", "--winner", "C")

    result = _invoke(db_url, "remove", "Alpha")
    assert result.exit_code == 0, result.output
    assert "games_removed=1" in result.output
    assert "Alpha" not in _invoke(db_url, "leaderboard").output


def test_set_winner_delete_game_and_reload(tmp_path: Path) -> None:
    db_url = _db_url(tmp_path)
    _invoke(db_url, "register", "A", "B", "C", "D")
    _invoke(db_url, "submit", "A", "B", "C", "D", "--winner", "A")

    assert _invoke(db_url, "set-winner", "0", "D").exit_code == 0
    assert "winner=D" in _invoke(db_url, "games").output

    result = _invoke(db_url, "reload")
    assert "replayed_games=1 tracked_players=4" in result.output

    assert _invoke(db_url, "delete-game", "0").exit_code == 0
    result = _invoke(db_url, "delete-game", "0")
    assert result.exit_code == 1
    assert "error: Invalid game: 0" in result.output


def test_apply_and_show_config(tmp_path: Path) -> None:
    db_url = _db_url(tmp_path)
    _invoke(db_url, "register", "A", "B", "C", "D")
    _invoke(db_url, "submit", "A", "B", "C", "D", "--winner", "A")

    result = _invoke(db_url, "apply-config", "--config-name", "high_stakes")
    assert result.exit_code == 0, result.output
    assert "replayed_games=1" in result.output

    result = _invoke(db_url, "show-config")
    assert "score.game_points=40.0" in result.output
    assert "matchmaking.nemesis=6.0" in result.output

    result = _invoke(db_url, "apply-config", "--config-name", "missing")
    assert result.exit_code != 0


def test_ingest_export_and_import(tmp_path: Path) -> None:
    db_url = _db_url(tmp_path)
    tsv_path = tmp_path / "games.tsv"
    tsv_path.write_text("A\tB\tC\tD\tA\nA\tB\tC\tE\tE\n", encoding="utf-8")

    result = _invoke(db_url, "ingest-tsv", str(tsv_path))
    assert result.exit_code == 0, result.output
    assert "Games registered:   2" in result.output

    json_path = tmp_path / "snapshot.json"
    result = _invoke(db_url, "export-json", str(json_path))
    assert "exported players=5 games=2" in result.output
    assert len(json.loads(json_path.read_text(encoding="utf-8"))["games"]) == 2

    other_db_url = f"sqlite:///{tmp_path / 'other.db'}"
    result = _invoke(other_db_url, "import-json", str(json_path))
    assert result.exit_code == 0, result.output
    assert _invoke(other_db_url, "leaderboard").output == _invoke(db_url, "leaderboard").output


def test_unreadable_snapshot_reports_error(tmp_path: Path) -> None:
    db_url = _db_url(tmp_path)
    engine = create_db_engine(db_url)
    SNAPSHOT_REPOSITORY.ensure_schema(engine)
    with create_session_factory(engine)() as session:
        session.execute(
            insert(TournamentSettings),
            [{"id": 1, "score_config_json": {}, "match_config_json": {}}],
        )
        session.execute(
            insert(Player),
            [
                {"id": player_id, "name": name, "description": "", "colors": []}
                for player_id, name in enumerate("ABC")
            ],
        )
        session.execute(
            insert(Game),
            [
                {
                    "position": 0,
                    "player1_id": 0,
                    "player2_id": 1,
                    "player3_id": 2,
                    "player4_id": 3,
                    "winner_id": 0,
                }
            ],
        )
        session.commit()
    engine.dispose()

    result = _invoke(db_url, "leaderboard")
    assert result.exit_code == 1
    assert "error: Player ID is not valid: 3" in result.output
