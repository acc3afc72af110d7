"""
Periodic automation scans
Each scan recomputes what is in scope from current timestamps (no cursor) and
hands qualifying entities to the dispatcher one at a time.

Run by the scheduler:
- every 15 minutes: booking reminders, pending forms, low inventory
- every hour: overdue forms (status housekeeping only, no notifications)
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ..config import INVENTORY_ALERT_DEDUP_HOURS, PENDING_FORM_REMINDER_HOURS
from ..domain.automations.engine import AutomationDispatcher
from ..domain.automations.repository import AutomationRepository
from ..models import (
    Booking,
    BookingStatus,
    FormSubmission,
    FormSubmissionStatus,
    InventoryItem,
)
from ..models_automation import AutomationTrigger
from .automation_contexts import (
    build_booking_context,
    build_form_context,
    build_inventory_context,
    inventory_link,
)

logger = logging.getLogger(__name__)

LOW_INVENTORY_ALERT_TYPE = "LOW_INVENTORY"
REMINDER_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def booking_reminder_window(now: datetime) -> tuple[datetime, datetime]:
    """[start of tomorrow, start of the day after) in UTC"""
    tomorrow_start = start_of_day(now) + timedelta(days=1)
    return tomorrow_start, tomorrow_start + timedelta(days=1)


def _new_summary(scanned: int) -> dict:
    return {"scanned": scanned, "dispatched": 0, "skipped": 0, "failed": 0}


# Blocking queries, run through asyncio.to_thread by the scans below


def _bookings_starting_between(db: Session, start: datetime, end: datetime) -> list[Booking]:
    return (
        db.query(Booking)
        .filter(
            Booking.start_time >= start,
            Booking.start_time < end,
            Booking.status.in_(REMINDER_STATUSES),
        )
        .all()
    )


def _pending_submissions_created_before(db: Session, cutoff: datetime) -> list[FormSubmission]:
    return (
        db.query(FormSubmission)
        .filter(
            FormSubmission.status == FormSubmissionStatus.PENDING.value,
            FormSubmission.created_at <= cutoff,
        )
        .all()
    )


def _low_stock_items(db: Session) -> list[InventoryItem]:
    return (
        db.query(InventoryItem)
        .filter(
            InventoryItem.is_active.is_(True),
            InventoryItem.quantity <= InventoryItem.low_stock_threshold,
        )
        .all()
    )


async def scan_booking_reminders(
    db: Session, dispatcher: AutomationDispatcher, now: Optional[datetime] = None
) -> dict:
    """Dispatch BOOKING_REMINDER for open bookings starting tomorrow"""
    now = now or datetime.utcnow()
    window_start, window_end = booking_reminder_window(now)

    bookings = await asyncio.to_thread(_bookings_starting_between, db, window_start, window_end)
    summary = _new_summary(len(bookings))

    for booking in bookings:
        booking_id = booking.id
        try:
            context = build_booking_context(booking)
        except Exception as e:
            logger.error(f"❌ Skipping reminder for booking {booking_id}: {e}")
            summary["skipped"] += 1
            continue

        result = await dispatcher.dispatch(
            db, booking.workspace_id, AutomationTrigger.BOOKING_REMINDER, context
        )
        summary["dispatched"] += 1
        summary["failed"] += result.failed

    logger.info(f"📅 Booking reminder scan: {summary}")
    return summary


async def scan_pending_forms(
    db: Session, dispatcher: AutomationDispatcher, now: Optional[datetime] = None
) -> dict:
    """Dispatch FORM_PENDING for submissions left pending past the reminder age"""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(hours=PENDING_FORM_REMINDER_HOURS)

    submissions = await asyncio.to_thread(_pending_submissions_created_before, db, cutoff)
    summary = _new_summary(len(submissions))

    for submission in submissions:
        submission_id = submission.id
        # Workspace is resolved through the booking; unbooked submissions are out of scope
        if submission.booking is None:
            summary["skipped"] += 1
            continue

        try:
            context = build_form_context(submission)
        except Exception as e:
            logger.error(f"❌ Skipping pending-form reminder for submission {submission_id}: {e}")
            summary["skipped"] += 1
            continue

        result = await dispatcher.dispatch(
            db, submission.booking.workspace_id, AutomationTrigger.FORM_PENDING, context
        )
        summary["dispatched"] += 1
        summary["failed"] += result.failed

    logger.info(f"📝 Pending form scan: {summary}")
    return summary


def mark_overdue_forms(db: Session, now: datetime) -> dict:
    """Move PENDING submissions past their due date to OVERDUE (one-way)"""
    summary = {"scanned": 0, "updated": 0}

    try:
        submissions = (
            db.query(FormSubmission)
            .filter(
                FormSubmission.status == FormSubmissionStatus.PENDING.value,
                FormSubmission.due_date.isnot(None),
                FormSubmission.due_date < now,
            )
            .all()
        )
        summary["scanned"] = len(submissions)

        for submission in submissions:
            submission.status = FormSubmissionStatus.OVERDUE.value
            summary["updated"] += 1
            logger.info(f"✅ Form submission {submission.id} transitioned: PENDING → OVERDUE")

        if summary["updated"] > 0:
            db.commit()
        else:
            logger.debug("ℹ️ No overdue form submissions")

        return summary

    except Exception as e:
        logger.error(f"❌ Error updating overdue form submissions: {str(e)}")
        db.rollback()
        raise


async def scan_overdue_forms(db: Session, now: Optional[datetime] = None) -> dict:
    return await asyncio.to_thread(mark_overdue_forms, db, now or datetime.utcnow())


async def scan_low_inventory(
    db: Session, dispatcher: AutomationDispatcher, now: Optional[datetime] = None
) -> dict:
    """Dispatch INVENTORY_LOW for active items at or below threshold, once per dedup window"""
    now = now or datetime.utcnow()
    since = now - timedelta(hours=INVENTORY_ALERT_DEDUP_HOURS)

    items = await asyncio.to_thread(_low_stock_items, db)
    summary = _new_summary(len(items))
    summary["deduplicated"] = 0

    for item in items:
        recent_alert = await asyncio.to_thread(
            AutomationRepository.find_recent_alert,
            db,
            item.workspace_id,
            LOW_INVENTORY_ALERT_TYPE,
            since=since,
            mentions=item.name,
            link_to=inventory_link(item),
        )
        if recent_alert:
            logger.debug(f"ℹ️ {item.name} already alerted (alert {recent_alert.id}), skipping")
            summary["deduplicated"] += 1
            continue

        result = await dispatcher.dispatch(
            db, item.workspace_id, AutomationTrigger.INVENTORY_LOW, build_inventory_context(item)
        )
        summary["dispatched"] += 1
        summary["failed"] += result.failed

    logger.info(f"📦 Low inventory scan: {summary}")
    return summary
