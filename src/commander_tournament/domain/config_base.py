"""Reading tournament preset files.

A preset is one TOML file whose ``[system]`` table names it. The parser
passed in turns the decoded table into a concrete preset type.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BasePresetConfig:
    """Name, optional description and source file of a preset."""

    name: str
    description: str | None
    file_path: Path

    def as_config_json(self) -> dict[str, Any]:
        raise NotImplementedError


PresetT = TypeVar("PresetT", bound=BasePresetConfig)
PresetParser = Callable[[dict[str, Any], Path], PresetT]


def load_preset_file(file_path: Path, parser: PresetParser[PresetT]) -> PresetT:
    if not file_path.is_file():
        raise FileNotFoundError(f"Preset file not found: {file_path}")
    with file_path.open("rb") as file:
        raw = tomllib.load(file)
    return parser(raw, file_path)


def load_preset_configs(
    config_dir: Path,
    parser: PresetParser[PresetT],
    *,
    duplicate_name_label: str = "tournament",
) -> list[PresetT]:
    """Parse every ``*.toml`` preset in ``config_dir``, in file-name order.

    Raises FileNotFoundError or NotADirectoryError for a bad directory, and
    ValueError when it holds no presets or two presets share a name.
    """
    if not config_dir.exists():
        raise FileNotFoundError(f"Preset directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Preset path is not a directory: {config_dir}")

    preset_files = sorted(config_dir.glob("*.toml"))
    if not preset_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    presets = [load_preset_file(file_path, parser) for file_path in preset_files]

    seen: dict[str, Path] = {}
    for preset in presets:
        first_path = seen.setdefault(preset.name, preset.file_path)
        if first_path != preset.file_path:
            raise ValueError(
                f"Duplicate {duplicate_name_label} preset names found in {config_dir}: "
                f"'{preset.name}' in {first_path.name} and {preset.file_path.name}"
            )

    logger.debug("Loaded %d presets from %s", len(presets), config_dir)
    return presets


__all__ = ["BasePresetConfig", "PresetParser", "load_preset_configs", "load_preset_file"]
