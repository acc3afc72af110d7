"""Pytest configuration and fixtures."""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from careops import models, models_automation  # noqa: F401
from careops.database import Base, attach_slow_query_logging
from careops.domain.automations.engine import AutomationDispatcher, AutomationExecutor
from careops.domain.automations.schemas import dump_action_config
from careops.models import (
    Booking,
    BookingType,
    Contact,
    Form,
    FormSubmission,
    InventoryItem,
    Workspace,
)
from careops.models_automation import AutomationRule
from careops.services.notification_service import NotificationChannels
from careops.shared.exceptions import EmailDeliveryError, SmsDeliveryError


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    attach_slow_query_logging(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


class RecordingSenders:
    """Stand-in email/SMS transports that remember what they were asked to send."""

    def __init__(self, fail_email: bool = False, fail_sms: bool = False):
        self.fail_email = fail_email
        self.fail_sms = fail_sms
        self.emails = []
        self.sms = []

    async def send_email(self, **kwargs):
        if self.fail_email:
            raise EmailDeliveryError("mail server unreachable", provider="smtp")
        self.emails.append(kwargs)
        return {"id": f"email-{len(self.emails)}"}

    async def send_sms(self, to_phone, message_body):
        if self.fail_sms:
            raise SmsDeliveryError("carrier rejected message", provider="twilio")
        self.sms.append({"to": to_phone, "body": message_body})
        return {"sid": f"SM{len(self.sms)}", "status": "queued"}

    def channels(self) -> NotificationChannels:
        return NotificationChannels(email_sender=self.send_email, sms_sender=self.send_sms)


class FakeBroadcaster:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.published = []

    async def publish(self, workspace_id, payload):
        if self.fail:
            raise ConnectionError("socket layer down")
        self.published.append((workspace_id, payload))
        return 1


@pytest.fixture
def senders():
    return RecordingSenders()


@pytest.fixture
def broadcaster():
    return FakeBroadcaster()


@pytest.fixture
def dispatcher(senders, broadcaster):
    return AutomationDispatcher(AutomationExecutor(senders.channels(), broadcaster=broadcaster))


class Seeder:
    """Small helpers for inserting workspace data."""

    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def workspace(self, name="Sunrise Clinic", timezone="UTC"):
        return self._save(Workspace(name=name, timezone=timezone))

    def contact(self, workspace, first_name="Ada", last_name="Lovelace", email="ada@example.com",
                phone="+15550001111"):
        return self._save(
            Contact(
                workspace_id=workspace.id,
                first_name=first_name,
                last_name=last_name,
                email=email,
                phone=phone,
            )
        )

    def booking_type(self, workspace, name="Consultation"):
        return self._save(BookingType(workspace_id=workspace.id, name=name))

    def booking(self, workspace, contact, start_time, status="CONFIRMED", booking_type=None):
        return self._save(
            Booking(
                workspace_id=workspace.id,
                contact_id=contact.id,
                booking_type_id=booking_type.id if booking_type else None,
                start_time=start_time,
                status=status,
            )
        )

    def form(self, workspace, name="Intake Form"):
        return self._save(Form(workspace_id=workspace.id, name=name, fields=[]))

    def submission(self, form, contact=None, booking=None, status="PENDING", created_at=None,
                   due_date=None):
        return self._save(
            FormSubmission(
                form_id=form.id,
                contact_id=contact.id if contact else None,
                booking_id=booking.id if booking else None,
                status=status,
                created_at=created_at or datetime.utcnow(),
                due_date=due_date,
            )
        )

    def item(self, workspace, name="Gloves", quantity=3, threshold=10, is_active=True):
        return self._save(
            InventoryItem(
                workspace_id=workspace.id,
                name=name,
                quantity=quantity,
                low_stock_threshold=threshold,
                is_active=is_active,
            )
        )

    def rule(self, workspace, trigger, config, enabled=True, name="Rule"):
        return self._save(
            AutomationRule(
                workspace_id=workspace.id,
                name=name,
                trigger=trigger.value,
                action=config.action,
                config=dump_action_config(config),
                enabled=enabled,
            )
        )


@pytest.fixture
def seed(db):
    return Seeder(db)
