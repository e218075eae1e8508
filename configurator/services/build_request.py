"""Build-request flow as an explicit state machine.

    collecting_components -> collecting_contact_info -> submitting -> submitted
                          <- back                      |   ^
                                                       v   | retry
                                                      failed

Each transition takes a frozen ``BuildRequestFlow`` and returns a new one;
an illegal step raises ``InvalidTransition`` and leaves the input untouched.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import DatabaseError

from .compatibility import check_selection
from .selection import as_selection

logger = logging.getLogger(__name__)

COLLECTING_COMPONENTS = "collecting_components"
COLLECTING_CONTACT_INFO = "collecting_contact_info"
SUBMITTING = "submitting"
SUBMITTED = "submitted"
FAILED = "failed"

STATES = (COLLECTING_COMPONENTS, COLLECTING_CONTACT_INFO, SUBMITTING, SUBMITTED, FAILED)


class InvalidTransition(Exception):
    def __init__(self, state, action, reason=""):
        self.state = state
        self.action = action
        self.reason = reason
        message = f"Cannot {action} while {state}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


@dataclass(frozen=True)
class BuildRequestFlow:
    state: str = COLLECTING_COMPONENTS
    selection: Dict[str, object] = field(default_factory=dict)
    contact: Dict[str, str] = field(default_factory=dict)
    reference: str = ""
    error: str = ""

    @property
    def is_finished(self):
        return self.state == SUBMITTED


def _require(flow, state, action):
    if flow.state != state:
        raise InvalidTransition(flow.state, action)


def confirm_components(flow, selection, policy=None):
    """Lock in the selection; it must be non-empty with no critical issues."""
    _require(flow, COLLECTING_COMPONENTS, "confirm components")
    selection = as_selection(selection)
    if not len(selection):
        raise InvalidTransition(flow.state, "confirm components", "no components selected")
    critical = [i for i in check_selection(selection, policy) if i.severity == "critical"]
    if critical:
        raise InvalidTransition(
            flow.state,
            "confirm components",
            "; ".join(i.title for i in critical),
        )
    return replace(flow, state=COLLECTING_CONTACT_INFO, selection=selection.to_ids())


def back(flow):
    _require(flow, COLLECTING_CONTACT_INFO, "go back")
    return replace(flow, state=COLLECTING_COMPONENTS)


def provide_contact(flow, name, email, phone="", notes=""):
    _require(flow, COLLECTING_CONTACT_INFO, "provide contact details")
    name = (name or "").strip()
    email = (email or "").strip()
    if not name:
        raise InvalidTransition(flow.state, "provide contact details", "name is required")
    try:
        validate_email(email)
    except ValidationError:
        raise InvalidTransition(
            flow.state, "provide contact details", f"invalid email {email!r}"
        )
    contact = {
        "name": name,
        "email": email,
        "phone": (phone or "").strip(),
        "notes": (notes or "").strip(),
    }
    return replace(flow, state=SUBMITTING, contact=contact)


def mark_submitted(flow, reference):
    _require(flow, SUBMITTING, "mark submitted")
    return replace(flow, state=SUBMITTED, reference=str(reference), error="")


def mark_failed(flow, error):
    _require(flow, SUBMITTING, "mark failed")
    return replace(flow, state=FAILED, error=str(error))


def retry(flow):
    _require(flow, FAILED, "retry")
    return replace(flow, state=SUBMITTING, error="")


def submit(flow, persist):
    """Run ``persist(flow)`` and move to submitted, or failed on a DB error.

    ``persist`` returns the stored request's reference.
    """
    _require(flow, SUBMITTING, "submit")
    try:
        reference: Optional[str] = persist(flow)
    except DatabaseError as e:
        logger.exception("Build request could not be stored")
        return mark_failed(flow, e)
    logger.info("Build request %s submitted", reference)
    return mark_submitted(flow, reference)
