"""maildirbox command-line interface."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from . import __version__
from .config import Config, ConfigError, load_config
from .logging import configure_logging
from .mailbox import Mailbox
from .maildir import parse_maildir_info

app = typer.Typer(help="Inspect and prune a maildir.")
LOGGER = logging.getLogger(__name__)

MaildirArgument = Annotated[
    Path | None,
    typer.Argument(help="Maildir to open (defaults to 'maildir' from the config)."),
]


@dataclass
class CLIState:
    """Stores shared CLI options."""

    config: Config
    debug: bool = False


@app.callback()
def _maildirbox(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help="Path to config (env MAILDIRBOX_CONFIG or ~/.config/maildirbox/config.yaml).",
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log every mailbox operation."),
    ] = False,
) -> None:
    """Capture global CLI options."""

    loaded = _load_config(config.expanduser() if config else None)
    configure_logging(loaded.logging, loaded.root_dir, debug=debug)
    ctx.obj = CLIState(config=loaded, debug=debug)


@app.command()
def status(ctx: typer.Context, maildir: MaildirArgument = None) -> None:
    """Show message count and total size."""

    state = _state(ctx)
    mailbox = asyncio.run(_open(state, maildir))
    typer.echo(f"maildirbox {__version__}")
    typer.echo(f"Maildir: {mailbox.path}")
    typer.echo(f"Messages: {len(mailbox.messages())} of {mailbox.count()}")
    typer.echo(f"Total size: {mailbox.total_size()} bytes")


@app.command("list")
def list_messages(ctx: typer.Context, maildir: MaildirArgument = None) -> None:
    """List live messages as 'number size name flags'."""

    state = _state(ctx)
    mailbox = asyncio.run(_open(state, maildir))
    for info in mailbox.messages():
        base, flags = parse_maildir_info(info.path.name)
        typer.echo(f"{info.number} {info.size} {base} {flags or '-'}")


@app.command()
def show(
    ctx: typer.Context,
    number: Annotated[int, typer.Argument(help="Message number as shown by 'list'.")],
    maildir: MaildirArgument = None,
) -> None:
    """Print the content of a single message."""

    state = _state(ctx)
    typer.echo(asyncio.run(_show(state, maildir, number)), nl=False)


@app.command()
def delete(
    ctx: typer.Context,
    numbers: Annotated[list[int], typer.Argument(help="Message numbers to delete.")],
    maildir: Annotated[
        Path | None,
        typer.Option("-m", "--maildir", help="Maildir to open (defaults to config)."),
    ] = None,
    export: Annotated[
        Path | None,
        typer.Option("--export", help="Write the surviving messages to this mbox file."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Report what would be deleted without touching disk."),
    ] = False,
) -> None:
    """Delete messages and flush the deletions to disk."""

    state = _state(ctx)
    asyncio.run(_delete(state, maildir, numbers, export=export, dry_run=dry_run))


async def _open(state: CLIState, maildir: Path | None) -> Mailbox:
    path = _resolve_maildir(state, maildir)
    options = replace(state.config.mailbox, debug=True) if state.debug else state.config.mailbox
    mailbox = await Mailbox.create(path, options)
    result = mailbox.init_result
    if result is None or not result.ok:
        reason = result.reason if result else "unknown error"
        _fail(f"Unable to open maildir: {reason}")
    return mailbox


async def _show(state: CLIState, maildir: Path | None, number: int) -> str:
    mailbox = await _open(state, maildir)
    result = await mailbox.get(number)
    if not result.ok or result.content is None:
        _fail(f"Unable to read message {number}: {result.reason}")
    return result.content


async def _delete(
    state: CLIState,
    maildir: Path | None,
    numbers: list[int],
    *,
    export: Path | None,
    dry_run: bool,
) -> None:
    mailbox = await _open(state, maildir)
    for number in numbers:
        result = mailbox.delete(number)
        if not result.ok:
            _fail(f"Unable to delete message {number}: {result.reason}")
        typer.echo(f"Marked message {number} for deletion.")

    if dry_run:
        mailbox.reset()
        typer.echo("Dry run: no files were removed.")
        return

    flushed = await mailbox.flush(export.expanduser() if export else None)
    if not flushed.ok:
        _fail(f"Flush failed after {len(flushed.deleted)} file(s): {flushed.reason}")
    typer.echo(f"Removed {len(flushed.deleted)} message file(s).")
    if export:
        typer.echo(f"Exported {len(mailbox.messages())} message(s) to {export}.")


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise RuntimeError("CLI state missing from context.")
    return state


def _resolve_maildir(state: CLIState, maildir: Path | None) -> Path:
    if maildir is not None:
        return maildir.expanduser()
    if state.config.maildir is not None:
        return state.config.maildir
    _fail("No maildir given and none configured.")


def _load_config(path: Path | None) -> Config:
    try:
        return load_config(path)
    except ConfigError as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from exc


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def main() -> None:  # pragma: no cover - delegated to Typer
    app()


__all__ = ["app", "main"]
