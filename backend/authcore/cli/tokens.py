"""Flask CLI commands for refresh-token maintenance."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from authcore.core.container import get_container

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh-token ledger maintenance commands."""


@tokens_cli.command("sweep")
@with_appcontext
def sweep_command() -> None:
    """Delete expired and revoked refresh tokens now."""
    sweeper = get_container(current_app).sweeper
    try:
        purged = sweeper.run_once()
    except Exception as exc:
        LOGGER.error("manual sweep failed", exc_info=True)
        raise click.ClickException(f"Sweep failed: {exc}") from exc
    click.echo(f"Purged {purged} refresh token(s).")
