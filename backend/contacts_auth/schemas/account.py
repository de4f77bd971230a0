"""Account resource schemas."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema


class AccountSchema(Schema):
    """Public representation of an account (never includes the password hash)."""

    id = fields.String(required=True)
    display_name = fields.String(required=True)
    email = fields.Email(required=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)


class ProfileUpdateSchema(Schema):
    """Partial profile update; at least one field must be present."""

    display_name = fields.String(validate=validate.Length(min=1, max=255))
    email = fields.Email(validate=validate.Length(max=254))

    @validates_schema
    def _require_any(self, data, **kwargs):
        if not data:
            raise ValidationError("Provide at least one field to update.")


class PasswordChangeSchema(Schema):
    """Payload for changing the authenticated account's password."""

    current_password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    new_password = fields.String(required=True, validate=validate.Length(min=8, max=128))
