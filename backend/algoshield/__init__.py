"""AlgoShield authentication and authorization service.

``gunicorn 'algoshield:create_app()'`` serves it; ``flask --app algoshield``
exposes the operator commands.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
