"""Principal (user) resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields


class RoleSchema(Schema):
    """Public representation of a role assignment."""

    id = fields.UUID(required=True)
    name = fields.String(required=True)


class PrincipalSchema(Schema):
    """Public representation of a principal. The password verifier is never dumped."""

    id = fields.UUID(required=True)
    email = fields.Email(required=True)
    name = fields.String(required=True)
    active = fields.Boolean(required=True)
    roles = fields.Method("dump_roles")
    last_login_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(allow_none=True)

    def dump_roles(self, obj: Any) -> list[dict[str, Any]]:
        roles = sorted(obj.roles, key=lambda role: role.name)
        return RoleSchema(many=True).dump(roles)
