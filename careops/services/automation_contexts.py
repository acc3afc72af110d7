"""
Builders turning ORM rows into the typed template contexts automations render with.
Shared by the periodic scanners and the domain event hooks.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..domain.automations.schemas import (
    BookingContext,
    ContactContext,
    FormContext,
    InventoryContext,
)
from ..models import Booking, Contact, FormSubmission, InventoryItem

logger = logging.getLogger(__name__)

DATE_FORMAT = "%B %d, %Y"
TIME_FORMAT = "%I:%M %p"


def _workspace_zone(tz_name: Optional[str]):
    if not tz_name:
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"⚠️ Unknown workspace timezone {tz_name!r}, formatting in UTC")
        return timezone.utc


def format_local(moment: datetime, tz_name: Optional[str]) -> tuple[str, str]:
    """Format a naive UTC timestamp as (date, time) strings in the workspace's zone"""
    local = moment.replace(tzinfo=timezone.utc).astimezone(_workspace_zone(tz_name))
    return local.strftime(DATE_FORMAT), local.strftime(TIME_FORMAT)


def inventory_link(item: InventoryItem) -> str:
    return f"/inventory/{item.id}"


def build_contact_context(contact: Contact, link_to: Optional[str] = None) -> ContactContext:
    return ContactContext(
        contactName=contact.full_name,
        email=contact.email or None,
        phone=contact.phone or None,
        linkTo=link_to or f"/contacts/{contact.id}",
    )


def build_booking_context(booking: Booking) -> BookingContext:
    contact = booking.contact
    tz_name = booking.workspace.timezone if booking.workspace else None
    booking_date, booking_time = format_local(booking.start_time, tz_name)

    return BookingContext(
        contactName=contact.full_name,
        email=contact.email or None,
        phone=contact.phone or None,
        bookingType=booking.booking_type.name if booking.booking_type else "",
        bookingDate=booking_date,
        bookingTime=booking_time,
        linkTo=f"/bookings/{booking.id}",
    )


def build_form_context(submission: FormSubmission) -> FormContext:
    """Raises AttributeError when the submission has no contact"""
    contact = submission.contact
    form = submission.form
    due_date = None
    if submission.due_date:
        tz_name = form.workspace.timezone if form and form.workspace else None
        due_date = format_local(submission.due_date, tz_name)[0]

    return FormContext(
        contactName=contact.full_name,
        email=contact.email or None,
        phone=contact.phone or None,
        formName=form.name if form else "",
        dueDate=due_date,
        linkTo=f"/forms/submissions/{submission.id}",
    )


def build_inventory_context(item: InventoryItem) -> InventoryContext:
    return InventoryContext(
        itemName=item.name,
        quantity=item.quantity,
        threshold=item.low_stock_threshold,
        linkTo=inventory_link(item),
    )
