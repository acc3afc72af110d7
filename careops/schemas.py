from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime

from .shared.validators import validate_email, validate_phone


# Contact Schemas
class ContactCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v) or None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) or None


class ContactResponse(BaseModel):
    id: int
    workspace_id: int
    first_name: str
    last_name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


# Booking Schemas
class BookingCreate(BaseModel):
    contact_id: int
    booking_type_id: Optional[int] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    notes: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(PENDING|CONFIRMED|COMPLETED|CANCELLED|NO_SHOW)$")


class BookingResponse(BaseModel):
    id: int
    workspace_id: int
    contact_id: int
    booking_type_id: Optional[int]
    start_time: datetime
    end_time: Optional[datetime]
    status: str
    notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


# Form Submission Schemas
class FormSubmissionComplete(BaseModel):
    data: Optional[Dict[str, Any]] = None


class FormSubmissionResponse(BaseModel):
    id: int
    form_id: int
    contact_id: Optional[int]
    booking_id: Optional[int]
    status: str
    data: Optional[Dict[str, Any]]
    due_date: Optional[datetime]
    submitted_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True
