from __future__ import annotations

from collections.abc import Iterable

from donor_api.models.user import Role


def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    return actor_id is not None and str(actor_id) == str(owner_id)


def has_any_role(held: Iterable[Role], required: Iterable[Role]) -> bool:
    """Return True when the held and required role sets intersect."""
    return bool(frozenset(held) & frozenset(required))


def is_owner_or_admin(*, actor_id, actor_roles: Iterable[Role], owner_id) -> bool:
    """Self-or-admin capability, evaluated per resource."""
    return Role.ADMIN in frozenset(actor_roles) or is_owner(actor_id=actor_id, owner_id=owner_id)
