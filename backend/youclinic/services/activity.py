"""
Activity logging service.

Writes the append-only activity log (logins, tab visits, lead status
changes). Status changes are not logged by route handlers: a
``before_flush`` hook inspects every dirty Lead and appends one
``status_update`` entry whenever the stored status value actually changes.
The acting user is read from ``session.info["actor"]``, which
``core.auth.get_current_user`` sets for every authenticated request.
"""

import logging
from typing import Any, Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from ..models.activity_log import ActivityLog, ActivityType
from ..models.lead import Lead
from ..models.user import User
from ..utils import dates


logger = logging.getLogger(__name__)

SYSTEM_ACTOR_NAME = "system"


def _status_value(value: Any) -> Optional[str]:
    return getattr(value, "value", value)


def _name_before_flush(lead: Lead) -> str:
    """Patient name as it was before the pending changes."""
    attrs = inspect(lead).attrs
    parts = []
    for key in ("first_name", "last_name"):
        history = attrs[key].history
        parts.append(history.deleted[0] if history.deleted else attrs[key].value)
    return " ".join(p for p in parts if p).strip()


def build_entry(
    type_: ActivityType,
    actor: Optional[User],
    details: Optional[dict[str, Any]] = None,
) -> ActivityLog:
    """Create an unsaved ActivityLog row with the actor's name snapshot."""
    return ActivityLog(
        type=type_,
        user_id=actor.id if actor is not None else None,
        user_name=actor.display_name if actor is not None else SYSTEM_ACTOR_NAME,
        timestamp=dates.iso_timestamp(),
        details={k: v for k, v in (details or {}).items() if v is not None},
    )


class ActivityLogger:
    """
    Service for writing activity log entries.

    Example usage:
        activity = ActivityLogger(db)
        activity.log_login(user)
        activity.log_tab_visit(user, "leads")
    """

    def __init__(self, db: Session):
        self.db = db

    def _create_log_entry(
        self,
        type_: ActivityType,
        actor: Optional[User],
        details: Optional[dict[str, Any]] = None,
        commit: bool = True,
    ) -> ActivityLog:
        entry = build_entry(type_, actor, details)
        self.db.add(entry)
        if commit:
            self.db.commit()
        return entry

    def log_login(self, user: User, commit: bool = True) -> ActivityLog:
        return self._create_log_entry(ActivityType.LOGIN, user, commit=commit)

    def log_tab_visit(self, user: User, tab: str, commit: bool = True) -> ActivityLog:
        return self._create_log_entry(ActivityType.TAB_VISIT, user, {"tab": tab}, commit=commit)


# =============================================================================
# Status change interception
# =============================================================================


@event.listens_for(Session, "before_flush")
def log_lead_status_changes(session: Session, flush_context, instances) -> None:
    """Append a status_update entry for every dirty Lead whose status value changed."""
    actor = session.info.get("actor")
    for obj in list(session.dirty):
        if not isinstance(obj, Lead):
            continue
        history = inspect(obj).attrs.status.history
        if not history.has_changes():
            continue
        old = _status_value(history.deleted[0]) if history.deleted else None
        new = _status_value(history.added[0]) if history.added else None
        if old is None or old == new:
            continue
        session.add(build_entry(
            ActivityType.STATUS_UPDATE,
            actor,
            {
                "patient_id": str(obj.id),
                "patient_name": _name_before_flush(obj),
                "old_status": old,
                "new_status": new,
            },
        ))
        logger.info("Lead %s status %s -> %s", obj.id, old, new)
