"""Typer CLI entrypoint for mapforge."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from mapforge.archive.writer import write_mapping_archive
from mapforge.config.models import Settings
from mapforge.config.settings_loader import load_settings
from mapforge.mappings.loader import load_mapping_table
from mapforge.mappings.models import MappingSet, Side
from mapforge.merge.engine import MergeRules, merge_official
from mapforge.providers.registry import build_default_registry, parse_mapping_string
from mapforge.utils.errors import (
    MalformedInputError,
    MappingError,
    MissingUpstreamArtifactError,
    UnresolvedMappingError,
)

app = typer.Typer(help="Mapping merge and cache CLI", rich_markup_mode=None)

SettingsOption = Annotated[
    Path | None,
    typer.Option("--settings", exists=True, dir_okay=False, file_okay=True, help="Settings YAML."),
]


@app.callback()
def cli_callback(
    verbose: Annotated[bool, typer.Option("--verbose", help="Emit structured log events.")] = False,
) -> None:
    """Resolve, merge and archive name mappings."""

    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s | %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )


@app.command("channels")
def channels_command(settings: SettingsOption = None) -> None:
    """List channels served by the registered mapping sources."""

    registry = build_default_registry(_load_settings_or_exit(settings))
    for channel in registry.channels():
        typer.echo(channel)


@app.command("resolve")
def resolve_command(
    mappings: Annotated[
        str | None, typer.Option("--mappings", help="Combined {channel}_{version} string.")
    ] = None,
    channel: Annotated[str | None, typer.Option("--channel")] = None,
    version: Annotated[str | None, typer.Option("--version")] = None,
    settings: SettingsOption = None,
    out: Annotated[
        Path | None, typer.Option("--out", dir_okay=False, help="Also write the archive here.")
    ] = None,
) -> None:
    """Resolve one channel/version through the registry, reusing cached output."""

    if mappings is not None and (channel is not None or version is not None):
        typer.echo("ERROR: --mappings cannot be combined with --channel/--version.")
        raise typer.Exit(code=1)

    if mappings is not None:
        try:
            channel, version = parse_mapping_string(mappings)
        except ValueError as exc:
            typer.echo(f"ERROR: {exc}")
            raise typer.Exit(code=1) from exc

    if channel is None or version is None:
        typer.echo("ERROR: provide --mappings or both --channel and --version.")
        raise typer.Exit(code=1)

    registry = build_default_registry(_load_settings_or_exit(settings))
    try:
        mapping_set = registry.resolve(channel, version)
        if out is not None:
            write_mapping_archive(out, mapping_set)
    except MappingError as exc:
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}")
        raise typer.Exit(code=_exit_code_for(exc)) from exc

    typer.echo(_summary(mapping_set))
    if out is not None:
        typer.echo(f"INFO: wrote {out}")
    typer.echo("INFO: success")


@app.command("merge")
def merge_command(
    client: Annotated[Path, typer.Option(..., exists=True, dir_okay=False, file_okay=True)],
    server: Annotated[Path, typer.Option(..., exists=True, dir_okay=False, file_okay=True)],
    intermediate: Annotated[Path, typer.Option(..., exists=True, dir_okay=False, file_okay=True)],
    out: Annotated[Path, typer.Option(..., dir_okay=False)],
    version: Annotated[str, typer.Option("--version")] = "local",
    settings: SettingsOption = None,
) -> None:
    """Merge local ProGuard and TSRG files into an archive without the cache."""

    settings_model = _load_settings_or_exit(settings)
    rules = MergeRules(
        field_prefix=settings_model.field_prefix,
        method_prefix=settings_model.method_prefix,
    )
    try:
        merged = merge_official(
            load_mapping_table(client),
            load_mapping_table(server),
            load_mapping_table(intermediate),
            rules,
        )
        mapping_set = MappingSet(
            channel="official",
            version=version,
            fields=tuple(merged.fields),
            methods=tuple(merged.methods),
        )
        write_mapping_archive(out, mapping_set)
    except MappingError as exc:
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}")
        raise typer.Exit(code=_exit_code_for(exc)) from exc

    typer.echo(_summary(mapping_set))
    typer.echo(f"INFO: wrote {out}")


def _load_settings_or_exit(path: Path | None) -> Settings:
    try:
        return load_settings(path)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc


def _exit_code_for(exc: MappingError) -> int:
    if isinstance(exc, UnresolvedMappingError):
        return 2
    if isinstance(exc, MissingUpstreamArtifactError):
        return 3
    if isinstance(exc, MalformedInputError):
        return 4
    return 1


def _summary(mapping_set: MappingSet) -> str:
    parts = [f"channel={mapping_set.channel}", f"version={mapping_set.version}"]
    for category in ("classes", "fields", "methods", "parameters"):
        entries = getattr(mapping_set, category)
        parts.append(f"{category}={len(entries)}")
    entries = mapping_set.fields + mapping_set.methods
    for side in Side:
        parts.append(f"{side.name.lower()}={sum(1 for entry in entries if entry.side == side)}")
    return "INFO: " + " ".join(parts)


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
