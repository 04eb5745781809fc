"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from donor_api.models.user import AccountStatus, BloodType, Gender

PASSWORD_RULE = validate.Length(min=5, max=128)


class ProfileFieldsSchema(Schema):
    """Optional donor profile fields shared by registration and updates."""

    full_name = fields.String(allow_none=True, validate=validate.Length(max=100))
    phone = fields.String(allow_none=True, validate=validate.Length(max=32))
    gender = fields.String(allow_none=True, validate=validate.OneOf([g.value for g in Gender]))
    date_of_birth = fields.Date(allow_none=True)
    blood_type = fields.String(
        allow_none=True, validate=validate.OneOf([b.value for b in BloodType])
    )
    address = fields.String(allow_none=True, validate=validate.Length(max=255))
    medical_history = fields.String(allow_none=True)


class UserUpdateSchema(ProfileFieldsSchema):
    """Partial profile update; only keys present in the body are applied."""

    email = fields.Email(validate=validate.Length(max=254))


class PasswordChangeSchema(Schema):
    current_password = fields.String(load_default=None, load_only=True)
    new_password = fields.String(required=True, load_only=True, validate=PASSWORD_RULE)


class UserFilterSchema(Schema):
    """Supported query parameters for listing users."""

    class Meta:
        unknown = EXCLUDE

    status = fields.String(
        load_default=None, validate=validate.OneOf([s.value for s in AccountStatus])
    )
    email = fields.String(load_default=None, validate=validate.Length(min=1, max=254))


class UserSchema(Schema):
    """Public representation of a user. There is no password field to dump."""

    id = fields.Integer(required=True)
    email = fields.String(required=True)
    roles = fields.List(fields.String(), required=True)
    status = fields.String(required=True)
    full_name = fields.String(allow_none=True)
    phone = fields.String(allow_none=True)
    gender = fields.String(allow_none=True)
    date_of_birth = fields.Date(allow_none=True)
    blood_type = fields.String(allow_none=True)
    address = fields.String(allow_none=True)
    medical_history = fields.String(allow_none=True)
    donation_count = fields.Integer(required=True)
    last_donation_date = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
