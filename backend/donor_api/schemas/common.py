"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from donor_api.services._shared.dto import PageMeta


class SortQuerySchema(Schema):
    """Parse comma-separated ``sort`` query parameters into a list."""

    class Meta:
        unknown = EXCLUDE

    sort = fields.String(load_default="")

    @post_load
    def split_sort(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        raw = data.get("sort") or ""
        data["sort"] = [segment.strip() for segment in raw.split(",") if segment.strip()]
        return data


class PaginationQuerySchema(SortQuerySchema):
    """Validate pagination parameters; ``limit`` is clamped to ``max_limit``."""

    def __init__(self, *, default_limit: int = 10, max_limit: int = 100, **kwargs: Any) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        super().__init__(**kwargs)

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))

    @post_load
    def apply_defaults(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        limit = data.get("limit", self._default_limit)
        data["limit"] = min(max(limit, 1), self._max_limit)
        data.setdefault("page", 1)
        return data


class PaginationSchema(Schema):
    """Pagination block of list responses, with camelCase keys for page math."""

    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    total = fields.Integer(required=True)
    total_pages = fields.Integer(required=True, data_key="totalPages")
    has_next_page = fields.Boolean(required=True, data_key="hasNextPage")
    has_prev_page = fields.Boolean(required=True, data_key="hasPrevPage")


_pagination_schema = PaginationSchema()


def build_pagination(meta: PageMeta) -> dict[str, Any]:
    """Return the ``pagination`` mapping for list responses."""

    return _pagination_schema.dump(meta)
