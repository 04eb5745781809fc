"""Donation state machine: pure decisions, no persistence.

``requested -> confirmed -> completed`` with ``canceled`` reachable from any
non-terminal state. An admin update may move a non-terminal donation to any
status, including straight to ``completed``. Terminal donations never change.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from donor_api.models.donation import DonationStatus
from donor_api.services._shared.errors import ImmutableStateError, InvalidInputError

EDITABLE_FIELDS = frozenset({"status", "scheduled_for", "notes", "center_id", "completed_at"})


@dataclass(frozen=True, slots=True)
class TransitionPlan:
    """
    Outcome of :func:`plan_update`.

    :param values: Column values to write, ``completed_at`` stamped if needed.
    :param completes: Whether this update moves the donation into ``completed``
        (the donor's aggregates must then be updated in the same transaction).
    :param completed_at: Completion instant when ``completes`` is true.
    """

    values: dict[str, Any]
    completes: bool
    completed_at: datetime | None


def ensure_mutable(status: DonationStatus | str) -> DonationStatus:
    """Return the status as an enum, refusing terminal ones."""
    current = DonationStatus(status)
    if current.is_terminal:
        raise ImmutableStateError(f"Cannot update a {current.value} donation")
    return current


def plan_update(
    current_status: DonationStatus | str,
    changes: Mapping[str, Any],
    now: datetime,
) -> TransitionPlan:
    """
    Decide what an admin update writes.

    :param current_status: Status currently stored.
    :param changes: Requested field changes (subset of :data:`EDITABLE_FIELDS`).
    :param now: Instant used to stamp ``completed_at`` when not supplied.
    :raises ImmutableStateError: The donation is already terminal.
    :raises InvalidInputError: Empty/unknown changes, or ``completed_at``
        without a transition into ``completed``.
    """
    current = ensure_mutable(current_status)

    if not changes:
        raise InvalidInputError("No fields to update")
    unknown = sorted(set(changes) - EDITABLE_FIELDS)
    if unknown:
        raise InvalidInputError(f"Fields cannot be updated: {', '.join(unknown)}")

    values = dict(changes)
    target = DonationStatus(values["status"]) if "status" in values else current
    if "status" in values:
        values["status"] = target

    completes = target == DonationStatus.COMPLETED
    completed_at: datetime | None = None
    if completes:
        completed_at = values.get("completed_at") or now
        values["completed_at"] = completed_at
    elif values.pop("completed_at", None) is not None:
        raise InvalidInputError("completed_at can only be set when completing a donation")

    return TransitionPlan(values=values, completes=completes, completed_at=completed_at)
