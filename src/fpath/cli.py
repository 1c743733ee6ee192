"""CLI entrypoint for fpath."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

import click
from pydantic import ValidationError

from fpath.config.models import AppSettings
from fpath.config.store import SettingsStore
from fpath.fs.entries import entries
from fpath.fs.filtering import SHORTHANDS, Predicate, filter_entries, shorthand_predicate
from fpath.fs.ignore import IgnoreRules
from fpath.paths import settings_path
from fpath.protocol.pull import iterate, pipe
from fpath.runtime_logging import configure_runtime_logging
from fpath.version import __version__


def _accept_all(path: str, stats: os.stat_result) -> bool:  # noqa: ARG001
    return True


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.pass_context
def main(ctx: click.Context) -> None:
    """fpath: stream directory entries filtered by file metadata."""
    loaded = SettingsStore().load()
    # Environment overrides stored settings.
    configure_runtime_logging(
        level=os.getenv("FPATH_LOG_LEVEL") or loaded.logging.level,
        log_file=os.getenv("FPATH_LOG_FILE") or loaded.logging.file,
    )
    ctx.obj = loaded


@main.command("ls")
@click.argument("directory", required=False, default=".")
@click.option(
    "--type",
    "shorthand",
    type=click.Choice(sorted(SHORTHANDS)),
    help="Only list entries of this type",
)
@click.option("--follow-symlinks/--no-follow-symlinks", default=None, help="Stat link targets rather than links")
@click.option("--respect-gitignore/--no-respect-gitignore", default=None, help="Skip entries ignored by .gitignore")
@click.pass_obj
def ls_command(
    current: AppSettings,
    directory: str,
    shorthand: str | None,
    follow_symlinks: bool | None,
    respect_gitignore: bool | None,
) -> None:
    """List entries directly inside DIRECTORY."""
    if shorthand == "is-symbolic-link":
        if follow_symlinks:
            raise click.UsageError("--type is-symbolic-link needs --no-follow-symlinks")
        follow_symlinks = False
    if follow_symlinks is None:
        follow_symlinks = current.filtering.follow_symlinks
    if respect_gitignore is None:
        respect_gitignore = current.filtering.respect_gitignore

    target = Path(directory).expanduser()
    tests: list[Predicate] = []
    if shorthand is not None:
        type_test = shorthand_predicate(shorthand)
        assert type_test is not None
        tests.append(type_test)
    if respect_gitignore:
        tests.append(IgnoreRules(target))

    def test(path: str, stats: os.stat_result) -> bool:
        return all(check(path, stats) for check in tests)

    async def run() -> None:
        source = pipe(
            entries(target),
            filter_entries(test if tests else _accept_all, follow_symlinks=follow_symlinks),
        )
        async for path in iterate(source):
            click.echo(path)

    try:
        asyncio.run(run())
    except OSError as exc:
        raise click.ClickException(str(exc)) from exc


@main.command()
def shorthands() -> None:
    """List the type shorthands accepted by --type."""
    for name in sorted(SHORTHANDS):
        click.echo(name)


@main.group()
def settings() -> None:
    """Inspect or change stored settings."""


@settings.command("show")
@click.pass_obj
def settings_show(current: AppSettings) -> None:
    """Print every setting as KEY = VALUE."""
    for key, value in current.setting_items():
        click.echo(f"{key} = {value}")


@settings.command("set")
@click.argument("key")
@click.argument("value")
def settings_set(key: str, value: str) -> None:
    """Store VALUE (JSON, or a plain string) under dotted KEY."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    try:
        updated = SettingsStore().update(key, parsed)
    except KeyError as exc:
        raise click.BadParameter(f"unknown setting {key}", param_hint="KEY") from exc
    except ValidationError as exc:
        raise click.BadParameter(str(exc), param_hint="VALUE") from exc

    for item_key, item_value in updated.setting_items():
        if item_key == key:
            click.echo(f"{item_key} = {item_value}")


@main.command("settings-path")
def settings_path_command() -> None:
    """Print settings file path."""
    click.echo(str(settings_path()))


@main.command()
def about() -> None:
    """Show version and project summary."""
    payload = {
        "name": "fpath",
        "version": __version__,
        "description": "Pull-stream directory entries filtered by file metadata",
    }
    click.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
