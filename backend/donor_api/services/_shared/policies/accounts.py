"""Pure decisions for account status and role toggles.

Both functions return the *next* value without touching persistence, so the
admin/banned exclusivity can be checked and tested apart from storage.
"""

from __future__ import annotations

from collections.abc import Iterable

from donor_api.models.user import AccountStatus, Role
from donor_api.services._shared.errors import BusinessRuleError

CANNOT_BAN_ADMIN = "Cannot ban an admin"
CANNOT_PROMOTE_BANNED = "Cannot grant admin role to a banned user"


def next_status_on_ban_toggle(roles: Iterable[Role], status: AccountStatus) -> AccountStatus:
    """Flip ``active``/``banned``.

    :raises BusinessRuleError: When the target holds the admin role.
    """
    if Role.ADMIN in frozenset(roles):
        raise BusinessRuleError(CANNOT_BAN_ADMIN)
    if AccountStatus(status) == AccountStatus.BANNED:
        return AccountStatus.ACTIVE
    return AccountStatus.BANNED


def next_roles_on_admin_toggle(roles: Iterable[Role], status: AccountStatus) -> frozenset[Role]:
    """Add the admin role, or remove it when already held.

    Removing admin from an admin-only set leaves ``{user}``.

    :raises BusinessRuleError: When granting admin to a banned user.
    """
    current = frozenset(roles)
    if Role.ADMIN in current:
        return (current - {Role.ADMIN}) or frozenset({Role.USER})
    if AccountStatus(status) == AccountStatus.BANNED:
        raise BusinessRuleError(CANNOT_PROMOTE_BANNED)
    return current | {Role.ADMIN}
