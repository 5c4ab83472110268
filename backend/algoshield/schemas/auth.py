"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates

from .user import PrincipalSchema


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))

    @validates("name")
    def _name_not_blank(self, value: str, **kwargs) -> None:
        if not value.strip():
            raise ValidationError("Name must not be blank.")


class LoginSchema(Schema):
    """Input payload for authenticating a user.

    Only presence is checked: format and length mistakes must surface as
    ``INVALID_CREDENTIALS`` like any other wrong credential.
    """

    email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=1024))


class AuthResponseSchema(Schema):
    """Response payload for register/login."""

    token = fields.String(required=True)
    user = fields.Nested(PrincipalSchema, required=True)
