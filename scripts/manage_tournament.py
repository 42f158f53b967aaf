#!/usr/bin/env python3
"""Manage a commander tournament stored as a single snapshot."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from commander_tournament.db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from commander_tournament.domain import (
    Color,
    Matchup,
    Strategy,
    Tournament,
    ingest_tsv_games,
    load_tournament_configs,
)
from commander_tournament.errors import TournamentError
from commander_tournament.repositories import (
    SNAPSHOT_REPOSITORY,
    load_or_create,
    load_snapshot_json,
    save_snapshot_json,
    save_tournament,
)

DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "tournament"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Commander tournament ratings and matchmaking.",
)

DbUrlOption = Annotated[
    str,
    typer.Option(
        "--db-url",
        help="Snapshot database URL. Defaults to tournament.db in the working directory.",
    ),
]
StrategyOption = Annotated[
    Strategy,
    typer.Option("--strategy", help="Opponent ranking strategy."),
]


@contextmanager
def open_tournament(db_url: str, *, save: bool = True) -> Iterator[Tournament]:
    """Load the stored snapshot, yield it, and save it back if the command succeeds."""
    engine = create_db_engine(db_url)
    try:
        SNAPSHOT_REPOSITORY.ensure_schema(engine)
        session_factory = create_session_factory(engine)
        try:
            tournament = load_or_create(session_factory)
            yield tournament
        except TournamentError as exc:
            typer.echo(f"error: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        if save:
            save_tournament(session_factory, tournament)
    finally:
        engine.dispose()


def _echo_matchup(tournament: Tournament, matchup: Matchup) -> None:
    for entry in matchup.entries:
        name = tournament.get_player_info(entry.player_id).name
        typer.echo(
            f"{name:<24} elo={entry.stats.elo:8.2f} "
            f"expected={entry.expected * 100:5.1f}% "
            f"win=+{entry.elo_win:.2f} loss=-{entry.elo_loss:.2f}"
        )


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log replays and registrations."),
    ] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def register(
    names: Annotated[list[str], typer.Argument(help="Player names to register.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Register one or more players."""
    with open_tournament(db_url) as tournament:
        for name in names:
            player_id = tournament.register_player(name)
            typer.echo(f"registered {name} id={player_id}")


@app.command()
def rename(
    from_name: Annotated[str, typer.Argument(help="Current player name.")],
    to_name: Annotated[str, typer.Argument(help="New player name.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Rename a player."""
    with open_tournament(db_url) as tournament:
        tournament.rename_player(from_name, to_name)
        typer.echo(f"renamed {from_name} -> {to_name}")


@app.command()
def remove(
    name: Annotated[str, typer.Argument(help="Player to remove, with all their games.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Remove a player and every game they played."""
    with open_tournament(db_url) as tournament:
        before = len(tournament.games())
        tournament.remove_player(tournament.player_id(name))
        typer.echo(f"removed {name} games_removed={before - len(tournament.games())}")


@app.command("set-info")
def set_info(
    name: Annotated[str, typer.Argument(help="Player to update.")],
    new_name: Annotated[str | None, typer.Option("--new-name", help="Rename the player.")] = None,
    description: Annotated[str | None, typer.Option("--description")] = None,
    colors: Annotated[
        list[str] | None,
        typer.Option("--color", help="Deck color (name or w/u/g/r/b/c). Repeatable."),
    ] = None,
    moxfield_id: Annotated[str | None, typer.Option("--moxfield-id")] = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Update a player's name, description, colors or deck reference."""
    try:
        parsed_colors = None if colors is None else frozenset(Color.parse(c) for c in colors)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--color") from exc

    with open_tournament(db_url) as tournament:
        player_id = tournament.player_id(name)
        info = tournament.get_player_info(player_id)
        info = replace(
            info,
            name=info.name if new_name is None else new_name,
            description=info.description if description is None else description,
            colors=info.colors if parsed_colors is None else parsed_colors,
            external_reference=info.external_reference if moxfield_id is None else moxfield_id,
        )
        tournament.set_player_info(player_id, info)
        typer.echo(f"updated id={player_id}")


@app.command()
def show(
    name: Annotated[str, typer.Argument(help="Player to show.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Print one player's info and stats."""
    with open_tournament(db_url, save=False) as tournament:
        details = tournament.player_details(tournament.player_id(name))
        winrate = details.stats.winrate
        typer.echo(f"id={details.player_id} name={details.info.name}")
        typer.echo(f"colors={','.join(c.value for c in details.info.sorted_colors) or '-'}")
        if details.info.description:
            typer.echo(f"description={details.info.description}")
        if details.info.moxfield_link is not None:
            typer.echo(f"deck={details.info.moxfield_link}")
        typer.echo(
            f"elo={details.stats.elo:.2f} games={details.stats.games} wins={details.stats.wins} "
            f"wr={'-' if winrate is None else f'{winrate * 100:.1f}%'}"
        )


@app.command()
def leaderboard(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """Print all players ordered by Elo."""
    with open_tournament(db_url, save=False) as tournament:
        rows = tournament.leaderboard()
        if not rows:
            typer.echo("no registered players")
            return
        for row in rows:
            winrate = row.stats.winrate
            typer.echo(
                f"{row.rank:2d}. {row.name:<24} elo={row.stats.elo:8.2f} "
                f"games={row.stats.games:3d} wins={row.stats.wins:3d} "
                f"wr={'-' if winrate is None else f'{winrate * 100:.1f}%'}"
            )


@app.command()
def games(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """Print the game log."""
    with open_tournament(db_url, save=False) as tournament:
        players = tournament.players()
        for index, game in enumerate(tournament.games()):
            names = ", ".join(players[player_id].name for player_id in game.players)
            typer.echo(f"{index:3d}. [{names}] winner={players[game.winner].name}")


@app.command()
def preview(
    names: Annotated[list[str], typer.Argument(help="The four participants.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Show expected outcomes and rating deltas for a prospective game."""
    with open_tournament(db_url, save=False) as tournament:
        matchup = tournament.create_match([tournament.player_id(name) for name in names])
        _echo_matchup(tournament, matchup)


@app.command()
def submit(
    names: Annotated[list[str], typer.Argument(help="The four participants.")],
    winner: Annotated[str, typer.Option("--winner", help="Name of the winning player.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Record a finished game."""
    with open_tournament(db_url) as tournament:
        matchup = tournament.create_match([tournament.player_id(name) for name in names])
        events = tournament.register_match(matchup, tournament.player_id(winner))
        for event in events:
            name = tournament.get_player_info(event.player_id).name
            typer.echo(f"{name:<24} {event.pre_elo:8.2f} -> {event.post_elo:8.2f} ({event.elo_delta:+.2f})")


@app.command("set-winner")
def set_winner(
    index: Annotated[int, typer.Argument(help="Game index from the games listing.")],
    winner: Annotated[str, typer.Argument(help="Name of the new winner.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Change the winner of a recorded game and replay."""
    with open_tournament(db_url) as tournament:
        tournament.set_game_winner(index, tournament.player_id(winner))
        typer.echo(f"game {index} winner={winner}")


@app.command("delete-game")
def delete_game(
    index: Annotated[int, typer.Argument(help="Game index from the games listing.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Delete a recorded game and replay."""
    with open_tournament(db_url) as tournament:
        tournament.delete_game(index)
        typer.echo(f"deleted game {index}")


@app.command()
def rank(
    name: Annotated[str, typer.Argument(help="Focus player.")],
    strategy: StrategyOption = Strategy.COMBINED,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """List recommended opponents for a player."""
    with open_tournament(db_url, save=False) as tournament:
        for position, opponent in enumerate(tournament.rank_names(strategy, name), start=1):
            typer.echo(f"{position:2d}. {opponent}")


@app.command()
def propose(
    name: Annotated[str, typer.Argument(help="Focus player.")],
    strategy: StrategyOption = Strategy.COMBINED,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Propose a full pod for a player using one strategy."""
    with open_tournament(db_url, save=False) as tournament:
        matchup = tournament.propose_match(strategy, tournament.player_id(name))
        typer.echo(f"strategy={strategy.label}")
        _echo_matchup(tournament, matchup)


@app.command("ingest-tsv")
def ingest_tsv(
    path: Annotated[Path, typer.Argument(help="Tab-separated file: 4 players then winner.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Bulk import games from a TSV file."""
    text = path.read_text(encoding="utf-8")
    with open_tournament(db_url) as tournament:
        stats = ingest_tsv_games(tournament, text)
        typer.echo(stats.summary())


@app.command("apply-config")
def apply_config(
    config_name: Annotated[
        str,
        typer.Option("--config-name", help="Preset name from [system].name."),
    ] = "default",
    config_dir: Annotated[
        Path,
        typer.Option("--config-dir", help="Directory of TOML presets."),
    ] = DEFAULT_CONFIG_DIR,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Apply a scoring/matchmaking preset and replay every game."""
    try:
        presets = load_tournament_configs(config_dir)
    except (FileNotFoundError, NotADirectoryError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config-dir") from exc

    matching = [preset for preset in presets if preset.name == config_name]
    if not matching:
        raise typer.BadParameter(
            f"No preset named '{config_name}' found in {config_dir}",
            param_hint="--config-name",
        )

    preset = matching[0]
    with open_tournament(db_url) as tournament:
        summary = tournament.set_score_config(preset.score)
        tournament.set_match_config(preset.matchmaking)
        typer.echo(
            f"applied preset={preset.name} file={preset.file_path.name} "
            f"replayed_games={summary.processed_games}"
        )


@app.command("show-config")
def show_config(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """Print the active score and matchmaking configuration."""
    with open_tournament(db_url, save=False) as tournament:
        for key, value in tournament.get_score_config().as_config_json().items():
            typer.echo(f"score.{key}={value}")
        for key, value in tournament.get_match_config().as_config_json().items():
            typer.echo(f"matchmaking.{key}={value}")


@app.command("export-json")
def export_json(
    path: Annotated[Path, typer.Argument(help="Destination JSON file.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Write the stored snapshot to a JSON file."""
    with open_tournament(db_url, save=False) as tournament:
        save_snapshot_json(path, tournament)
        typer.echo(f"exported players={len(tournament.players())} games={len(tournament.games())}")


@app.command("import-json")
def import_json(
    path: Annotated[Path, typer.Argument(help="Source JSON snapshot.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Replace the stored snapshot with a JSON file's contents."""
    engine = create_db_engine(db_url)
    try:
        SNAPSHOT_REPOSITORY.ensure_schema(engine)
        try:
            tournament = load_snapshot_json(path)
        except TournamentError as exc:
            typer.echo(f"error: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        save_tournament(create_session_factory(engine), tournament)
    finally:
        engine.dispose()
    typer.echo(f"imported players={len(tournament.players())} games={len(tournament.games())}")


@app.command()
def reload(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """Recompute every player's stats from the game log."""
    with open_tournament(db_url) as tournament:
        summary = tournament.reload()
        typer.echo(
            f"replayed_games={summary.processed_games} tracked_players={summary.tracked_players}"
        )


if __name__ == "__main__":
    app()
