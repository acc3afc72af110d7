"""
Automation Models
Trigger/action rules configured per workspace and the in-product alerts they create
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base


class AutomationTrigger(str, Enum):
    BOOKING_REMINDER = "BOOKING_REMINDER"
    FORM_PENDING = "FORM_PENDING"
    INVENTORY_LOW = "INVENTORY_LOW"
    BOOKING_CREATED = "BOOKING_CREATED"
    CONTACT_CREATED = "CONTACT_CREATED"
    FORM_SUBMITTED = "FORM_SUBMITTED"
    BOOKING_COMPLETED = "BOOKING_COMPLETED"


class AutomationAction(str, Enum):
    SEND_EMAIL = "SEND_EMAIL"
    SEND_SMS = "SEND_SMS"
    CREATE_ALERT = "CREATE_ALERT"


class AlertPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AutomationRule(Base):
    """A trigger → action rule owned by one workspace"""

    __tablename__ = "automations"

    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(
        Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    trigger = Column(String(50), nullable=False, index=True)
    action = Column(String(50), nullable=False)
    # Action payload without the action tag, e.g. {"subject": ..., "body": ...}
    config = Column(JSON, default=dict, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    workspace = relationship("Workspace", back_populates="automations")


class Alert(Base):
    """In-product notification; title and message are already rendered"""

    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(
        Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(50), nullable=False, index=True)
    priority = Column(String(10), default=AlertPriority.MEDIUM.value, nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link_to = Column(String(500), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    workspace = relationship("Workspace", back_populates="alerts")
