"""Blood center resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from donor_api.models.blood_center import WEEKDAYS

_HOURS = fields.Dict(
    keys=fields.String(validate=validate.OneOf(WEEKDAYS)),
    values=fields.Dict(keys=fields.String(), values=fields.String()),
    allow_none=True,
)


class BloodCenterCreateSchema(Schema):
    """Payload for registering a blood center."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=120))
    address = fields.String(required=True, validate=validate.Length(min=1, max=255))
    phone = fields.String(required=True, validate=validate.Length(min=1, max=32))
    latitude = fields.Float(required=True, validate=validate.Range(min=-90, max=90))
    longitude = fields.Float(required=True, validate=validate.Range(min=-180, max=180))
    operating_hours = _HOURS
    current_donor_count = fields.Integer(load_default=0, validate=validate.Range(min=0))


class BloodCenterUpdateSchema(Schema):
    """Partial update; ``archived`` is changed only through the archive toggle."""

    name = fields.String(validate=validate.Length(min=1, max=120))
    address = fields.String(validate=validate.Length(min=1, max=255))
    phone = fields.String(validate=validate.Length(min=1, max=32))
    latitude = fields.Float(validate=validate.Range(min=-90, max=90))
    longitude = fields.Float(validate=validate.Range(min=-180, max=180))
    operating_hours = _HOURS
    current_donor_count = fields.Integer(validate=validate.Range(min=0))


class BloodCenterFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    archived = fields.Boolean(load_default=None)


class BloodCenterSchema(Schema):
    """Representation of the blood center entity."""

    id = fields.Integer(required=True)
    name = fields.String(required=True)
    address = fields.String(required=True)
    phone = fields.String(required=True)
    latitude = fields.Float(required=True)
    longitude = fields.Float(required=True)
    operating_hours = fields.Dict(allow_none=True)
    current_donor_count = fields.Integer(required=True)
    archived = fields.Boolean(required=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
