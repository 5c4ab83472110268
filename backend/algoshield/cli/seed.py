"""Flask CLI commands for idempotent role seeding."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from algoshield.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)

DEFAULT_ROLES: tuple[tuple[str, str], ...] = (
    ("viewer", "Read-only access; granted to every new principal."),
    ("rule_editor", "May author and edit detection rules."),
    ("admin", "Full administrative access, including session revocation."),
)


def _echo_summary(summary: dict[str, str]) -> None:
    """Pretty-print the seeding outcome per role."""
    click.echo("Seed summary:")
    width = max(len(name) for name in summary)
    for name, outcome in summary.items():
        click.echo(f"  {name.ljust(width)}  {outcome}")


@click.group("seed")
@click.option("--verbose", is_flag=True, help="Enable verbose logging for seeding.")
def seed_cli(verbose: bool) -> None:
    """Collection of database seeding commands."""
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)


@seed_cli.command("roles")
@with_appcontext
def roles_command() -> None:
    """Create the built-in roles when they are missing."""
    summary: dict[str, str] = {}
    try:
        with SQLAlchemyUnitOfWork() as uow:
            for name, description in DEFAULT_ROLES:
                _, created = uow.roles.get_or_create(name, description=description)
                summary[name] = "created" if created else "existing"
                LOGGER.debug("seed.role", extra={"role": name, "status": summary[name]})
    except SQLAlchemyError as exc:
        raise click.ClickException(f"Seeding failed: {exc}") from exc
    _echo_summary(summary)
