"""
Domain event hooks

Called by the booking, contact and form routes after their own write has been
committed. Hooks never raise: an automation problem must not fail the request
that caused the event.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..domain.automations.engine import AutomationDispatcher, DispatchResult
from ..models import Booking, Contact, FormSubmission
from ..models_automation import AutomationTrigger
from .automation_contexts import (
    build_booking_context,
    build_contact_context,
    build_form_context,
)

logger = logging.getLogger(__name__)


async def _fire(
    db: Session,
    dispatcher: AutomationDispatcher,
    workspace_id: int,
    trigger: AutomationTrigger,
    build_context,
) -> Optional[DispatchResult]:
    try:
        context = build_context()
        return await dispatcher.dispatch(db, workspace_id, trigger, context)
    except Exception as e:
        logger.error(f"❌ {trigger.value} automations not run for workspace {workspace_id}: {e}")
        return None


async def on_booking_created(
    db: Session, dispatcher: AutomationDispatcher, booking: Booking
) -> Optional[DispatchResult]:
    return await _fire(
        db,
        dispatcher,
        booking.workspace_id,
        AutomationTrigger.BOOKING_CREATED,
        lambda: build_booking_context(booking),
    )


async def on_booking_completed(
    db: Session, dispatcher: AutomationDispatcher, booking: Booking
) -> Optional[DispatchResult]:
    return await _fire(
        db,
        dispatcher,
        booking.workspace_id,
        AutomationTrigger.BOOKING_COMPLETED,
        lambda: build_booking_context(booking),
    )


async def on_contact_created(
    db: Session, dispatcher: AutomationDispatcher, contact: Contact
) -> Optional[DispatchResult]:
    return await _fire(
        db,
        dispatcher,
        contact.workspace_id,
        AutomationTrigger.CONTACT_CREATED,
        lambda: build_contact_context(contact),
    )


async def on_form_submitted(
    db: Session, dispatcher: AutomationDispatcher, submission: FormSubmission
) -> Optional[DispatchResult]:
    """Workspace comes from the form, so unbooked submissions still fire"""
    try:
        workspace_id = submission.form.workspace_id
    except Exception as e:
        logger.error(f"❌ Form submission {submission.id} has no form: {e}")
        return None

    return await _fire(
        db,
        dispatcher,
        workspace_id,
        AutomationTrigger.FORM_SUBMITTED,
        lambda: build_form_context(submission),
    )
