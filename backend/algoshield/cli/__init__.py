"""Operator commands: ``flask seed roles`` and ``flask sessions revoke-user``."""

from __future__ import annotations

from flask import Flask

from .seed import seed_cli
from .sessions import sessions_cli

COMMAND_GROUPS = (seed_cli, sessions_cli)


def init_app(app: Flask) -> None:
    for group in COMMAND_GROUPS:
        app.cli.add_command(group)
