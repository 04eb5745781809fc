"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from donor_api.schemas.user import PASSWORD_RULE, ProfileFieldsSchema, UserSchema


class RegisterSchema(ProfileFieldsSchema):
    """Input payload for account registration. Roles cannot be chosen here."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, load_only=True, validate=PASSWORD_RULE)


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class SessionSchema(Schema):
    """Login/refresh response body. The refresh token travels only as a cookie."""

    access_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")
    user = fields.Nested(UserSchema, allow_none=True)
