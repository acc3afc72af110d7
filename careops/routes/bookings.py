"""
Booking Routes
Creating a booking fires BOOKING_CREATED; completing one fires BOOKING_COMPLETED
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Booking, BookingStatus, BookingType, Contact, Workspace
from ..schemas import BookingCreate, BookingResponse, BookingStatusUpdate
from ..services.automation_events import on_booking_completed, on_booking_created

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces/{workspace_id}/bookings", tags=["bookings"])


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    workspace_id: int,
    data: BookingCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    workspace = db.query(Workspace).filter(Workspace.id == workspace_id).first()
    if not workspace:
        raise HTTPException(status_code=404, detail="Workspace not found")

    contact = (
        db.query(Contact)
        .filter(Contact.id == data.contact_id, Contact.workspace_id == workspace_id)
        .first()
    )
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found")

    if data.booking_type_id is not None:
        booking_type = (
            db.query(BookingType)
            .filter(BookingType.id == data.booking_type_id, BookingType.workspace_id == workspace_id)
            .first()
        )
        if not booking_type:
            raise HTTPException(status_code=404, detail="Booking type not found")

    booking = Booking(workspace_id=workspace_id, **data.model_dump())
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info(f"✅ Booking {booking.id} created in workspace {workspace_id}")

    await on_booking_created(db, request.app.state.automation_dispatcher, booking)
    db.refresh(booking)
    return booking


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    workspace_id: int,
    booking_id: int,
    data: BookingStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    booking = (
        db.query(Booking)
        .filter(Booking.id == booking_id, Booking.workspace_id == workspace_id)
        .first()
    )
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    old_status = booking.status
    booking.status = data.status
    db.commit()
    db.refresh(booking)
    logger.info(f"✅ Booking {booking.id} transitioned: {old_status} → {booking.status}")

    if booking.status == BookingStatus.COMPLETED.value and old_status != booking.status:
        await on_booking_completed(db, request.app.state.automation_dispatcher, booking)
        db.refresh(booking)

    return booking
