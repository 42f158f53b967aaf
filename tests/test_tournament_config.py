"""Tests for TOML-based tournament preset loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from commander_tournament.domain.config import (
    MatchmakerConfig,
    ScoreConfig,
    load_tournament_config,
    load_tournament_configs,
)

ROOT_DIR = Path(__file__).resolve().parents[1]


def test_load_tournament_configs_from_directory(tmp_path: Path) -> None:
    config_path = tmp_path / "default.toml"
    config_path.write_text(
        """
[system]
name = "league"
description = "Weekly league"

[score]
starting_elo = 1000.0
game_points = 30.0
elo_pow = 4.0
wr_pow = 2.0
elo_weight = 1.0
wr_weight = 1.0

[matchmaking]
least_played = 1.0
nemesis = 2.0
neighbor = 3.0
wr_neighbor = 4.0
lost_with = 5.0
""".strip()
    )

    configs = load_tournament_configs(tmp_path)
    assert len(configs) == 1

    preset = configs[0]
    assert preset.name == "league"
    assert preset.description == "Weekly league"
    assert preset.file_path == config_path
    assert preset.score.starting_elo == pytest.approx(1000.0)
    assert preset.score.game_points == pytest.approx(30.0)
    assert preset.score.blend_weights() == (pytest.approx(0.5), pytest.approx(0.5))
    assert preset.matchmaking.lost_with == pytest.approx(5.0)


def test_defaults_apply_when_sections_omitted(tmp_path: Path) -> None:
    config_path = tmp_path / "bare.toml"
    config_path.write_text(
        """
[system]
name = "bare"
""".strip()
    )

    preset = load_tournament_config(config_path)
    assert preset.description is None
    assert preset.score == ScoreConfig()
    assert preset.matchmaking == MatchmakerConfig()
    assert preset.as_config_json()["score"]["elo_pow"] == pytest.approx(6.0)


def test_missing_system_name_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "unnamed.toml"
    config_path.write_text("[score]\ngame_points = 10.0\n")

    with pytest.raises(ValueError, match=r"\[system\]\.name is required"):
        load_tournament_config(config_path)


def test_invalid_score_values_are_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "broken.toml"
    config_path.write_text(
        """
[system]
name = "broken"

[score]
elo_weight = 0.0
wr_weight = 0.0
""".strip()
    )

    with pytest.raises(ValueError, match="elo_weight \\+ wr_weight must be > 0"):
        load_tournament_config(config_path)


def test_negative_matchmaking_weight_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "broken.toml"
    config_path.write_text(
        """
[system]
name = "broken"

[matchmaking]
nemesis = -1.0
""".strip()
    )

    with pytest.raises(ValueError, match="nemesis must be >= 0"):
        load_tournament_config(config_path)


def test_duplicate_preset_names_are_rejected(tmp_path: Path) -> None:
    for file_name in ("a.toml", "b.toml"):
        (tmp_path / file_name).write_text('[system]\nname = "same"\n')

    with pytest.raises(ValueError, match="Duplicate tournament preset names.*a.toml and b.toml"):
        load_tournament_configs(tmp_path)


def test_empty_or_missing_directory_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="No .toml config files"):
        load_tournament_configs(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_tournament_configs(tmp_path / "missing")
    with pytest.raises(FileNotFoundError):
        load_tournament_config(tmp_path / "missing.toml")


def test_bundled_presets_load() -> None:
    presets = load_tournament_configs(ROOT_DIR / "configs" / "tournament")
    names = [preset.name for preset in presets]
    assert names == ["default", "high_stakes"]
    assert presets[0].score == ScoreConfig()
    assert presets[0].matchmaking == MatchmakerConfig()
