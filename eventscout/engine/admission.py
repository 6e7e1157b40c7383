"""
eventscout.engine.admission — Registration Capacity Decision
=============================================================

Pure decision logic for admitting a new registration.  The database work
(locking, counting, inserting) lives in
:mod:`eventscout.services.registration_service`.
"""

from __future__ import annotations

from dataclasses import dataclass

from eventscout.errors import Conflict

CAPACITY_REACHED = "Event has reached capacity"
ALREADY_REGISTERED = "Already registered for this event"


@dataclass(frozen=True, slots=True)
class AdmissionState:
    """Snapshot of an event's registration state, taken under lock."""

    capacity: int | None
    registered: int
    already_registered: bool

    @property
    def remaining(self) -> int | None:
        if self.capacity is None:
            return None
        return max(0, self.capacity - self.registered)


def has_capacity(capacity: int | None, registered: int) -> bool:
    """``True`` if one more registration fits.  ``None`` capacity is unlimited."""
    if capacity is None:
        return True
    return registered < capacity


def check_admission(state: AdmissionState) -> None:
    """Raise :class:`Conflict` if the registration must be refused.

    Capacity is checked before the duplicate check, so a user already
    registered for a full event is told the event is full.
    """
    if not has_capacity(state.capacity, state.registered):
        raise Conflict(CAPACITY_REACHED)
    if state.already_registered:
        raise Conflict(ALREADY_REGISTERED)
