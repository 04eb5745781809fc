"""Donation resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from donor_api.models.donation import NOTES_MAX_LENGTH, DonationStatus

STATUS_CHOICES = [s.value for s in DonationStatus]
INVALID_STATUS = f"Invalid status. Must be one of: {', '.join(STATUS_CHOICES)}"


class DonationCreateSchema(Schema):
    """Payload for requesting a donation. ``status`` is not accepted here."""

    center_id = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))
    scheduled_for = fields.AwareDateTime(required=True)
    notes = fields.String(load_default=None, validate=validate.Length(max=NOTES_MAX_LENGTH))


class DonationUpdateSchema(Schema):
    """Admin update; only keys present in the body are applied."""

    status = fields.Enum(
        DonationStatus,
        by_value=True,
        error_messages={"unknown": INVALID_STATUS},
    )
    scheduled_for = fields.AwareDateTime()
    notes = fields.String(allow_none=True, validate=validate.Length(max=NOTES_MAX_LENGTH))
    center_id = fields.Integer(strict=True, validate=validate.Range(min=1))
    completed_at = fields.AwareDateTime()


class DonationFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    status = fields.Enum(
        DonationStatus,
        by_value=True,
        load_default=None,
        error_messages={"unknown": INVALID_STATUS},
    )
    user_id = fields.Integer(load_default=None)
    center_id = fields.Integer(load_default=None)


class DonationSchema(Schema):
    """Representation of the donation entity."""

    id = fields.Integer(required=True)
    user_id = fields.Integer(required=True)
    center_id = fields.Integer(required=True)
    center_name = fields.String(allow_none=True)
    status = fields.String(required=True)
    requested_at = fields.DateTime(required=True)
    scheduled_for = fields.DateTime(required=True)
    completed_at = fields.DateTime(allow_none=True)
    notes = fields.String(allow_none=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
