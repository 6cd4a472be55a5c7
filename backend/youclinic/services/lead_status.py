"""
Lead status transitions.

Any status can move to any other status. Entering a status may set derived
fields; the activity log entry for the change is written by the flush hook
in ``services.activity``.
"""

import logging
from typing import Any, Callable

from ..models.lead import Lead, LeadStatus
from ..utils import dates


logger = logging.getLogger(__name__)


def _enter_on_follow_up(lead: Lead) -> None:
    lead.next_follow_up_date = dates.iso_date(dates.clinic_tomorrow())


def _enter_treatment_done(lead: Lead) -> None:
    lead.treatment_done_at = dates.utcnow()


# Side effects run when a lead enters the keyed status.
ON_ENTER: dict[LeadStatus, Callable[[Lead], None]] = {
    LeadStatus.ON_FOLLOW_UP: _enter_on_follow_up,
    LeadStatus.TREATMENT_DONE: _enter_treatment_done,
}


def change_status(lead: Lead, new_status: LeadStatus) -> bool:
    """
    Move ``lead`` to ``new_status``.

    Returns False (and touches nothing) when the lead is already in that
    status.
    """
    new_status = LeadStatus(new_status)
    if lead.status == new_status:
        return False

    lead.status = new_status
    lead.status_updated_at = dates.utcnow()
    handler = ON_ENTER.get(new_status)
    if handler is not None:
        handler(lead)
    return True


def apply_lead_update(lead: Lead, updates: dict[str, Any]) -> Lead:
    """
    Apply a partial update to ``lead``.

    ``status`` goes through ``change_status`` after the plain fields so
    that a transition's derived fields win over values sent alongside it.
    """
    updates = dict(updates)
    new_status = updates.pop("status", None)

    for field, value in updates.items():
        setattr(lead, field, value)

    if new_status is not None:
        change_status(lead, new_status)
    return lead
