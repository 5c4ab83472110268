"""Operator commands for bulk session revocation."""

from __future__ import annotations

from uuid import UUID

import click
from flask.cli import with_appcontext

from algoshield.core.security import get_auth_service
from algoshield.services._shared.errors import InfrastructureError, NotFoundError


@click.group("sessions")
def sessions_cli() -> None:
    """Manage issued bearer tokens."""


@sessions_cli.command("revoke-user")
@click.argument("user_id", type=click.UUID)
@with_appcontext
def revoke_user_command(user_id: UUID) -> None:
    """Revoke every token issued to USER_ID before now."""
    service = get_auth_service()
    try:
        service.revoke_sessions(user_id)
    except NotFoundError as exc:
        raise click.ClickException(exc.message) from exc
    except InfrastructureError as exc:
        raise click.ClickException(f"Revocation failed: {exc.message}") from exc
    hours = service.revocation_horizon.total_seconds() / 3600
    click.echo(f"Revoked all sessions for {user_id} (marker kept {hours:g}h).")
