"""Tests for rule dispatch and execution."""

import pytest

from careops.domain.automations.engine import (
    FAILED,
    SENT,
    SKIPPED,
    AutomationDispatcher,
    AutomationExecutor,
)
from careops.domain.automations.schemas import (
    AlertActionConfig,
    BookingContext,
    ContactContext,
    EmailActionConfig,
    InventoryContext,
    SmsActionConfig,
)
from careops.models_automation import Alert, AutomationRule, AutomationTrigger

from conftest import FakeBroadcaster, RecordingSenders

WELCOME = EmailActionConfig(subject="Welcome {{contactName}}", body="Hi {{contactName}}")
LOW_STOCK = AlertActionConfig(
    alertType="LOW_INVENTORY",
    priority="HIGH",
    title="{{itemName}} low",
    message="Only {{quantity}} left (threshold {{threshold}})",
)


def contact_context(**overrides):
    values = {"contactName": "Ada Lovelace", "email": "ada@example.com", "phone": "+15550001111"}
    values.update(overrides)
    return ContactContext(**values)


class TestDispatchScoping:
    @pytest.mark.asyncio
    async def test_rules_of_other_workspaces_never_fire(self, db, seed, dispatcher, senders):
        ours = seed.workspace("Ours")
        theirs = seed.workspace("Theirs")
        seed.rule(ours, AutomationTrigger.CONTACT_CREATED, WELCOME)
        seed.rule(theirs, AutomationTrigger.CONTACT_CREATED, WELCOME)

        result = await dispatcher.dispatch(
            db, ours.id, AutomationTrigger.CONTACT_CREATED, contact_context()
        )

        assert result.matched == 1
        assert result.sent == 1
        assert len(senders.emails) == 1

    @pytest.mark.asyncio
    async def test_disabled_rules_never_fire(self, db, seed, dispatcher, senders):
        workspace = seed.workspace()
        seed.rule(workspace, AutomationTrigger.CONTACT_CREATED, WELCOME, enabled=False)

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context()
        )

        assert result.matched == 0
        assert senders.emails == []

    @pytest.mark.asyncio
    async def test_only_matching_trigger_fires(self, db, seed, dispatcher, senders):
        workspace = seed.workspace()
        seed.rule(workspace, AutomationTrigger.BOOKING_CREATED, WELCOME)

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context()
        )

        assert result.matched == 0
        assert senders.emails == []

    @pytest.mark.asyncio
    async def test_trigger_given_as_string(self, db, seed, dispatcher):
        workspace = seed.workspace()
        seed.rule(workspace, AutomationTrigger.CONTACT_CREATED, WELCOME)

        result = await dispatcher.dispatch(db, workspace.id, "CONTACT_CREATED", contact_context())

        assert result.sent == 1

    @pytest.mark.asyncio
    async def test_unknown_trigger_is_reported_not_raised(self, db, seed, dispatcher):
        workspace = seed.workspace()

        result = await dispatcher.dispatch(db, workspace.id, "NOT_A_TRIGGER", contact_context())

        assert result.error is not None
        assert result.matched == 0


class TestEmailAndSms:
    @pytest.mark.asyncio
    async def test_email_rendered_with_context(self, db, seed, dispatcher, senders):
        workspace = seed.workspace("Sunrise Clinic")
        seed.rule(workspace, AutomationTrigger.CONTACT_CREATED, WELCOME)

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context()
        )

        assert result.outcomes[0].status == SENT
        email = senders.emails[0]
        assert email["to"] == "ada@example.com"
        assert email["subject"] == "Welcome Ada Lovelace"
        assert email["body"] == "Hi Ada Lovelace"
        assert email["workspace_name"] == "Sunrise Clinic"

    @pytest.mark.asyncio
    async def test_empty_subject_falls_back_to_default(self, db, seed, dispatcher, senders):
        workspace = seed.workspace()
        seed.rule(
            workspace,
            AutomationTrigger.CONTACT_CREATED,
            EmailActionConfig(subject="", body="Hello"),
        )

        await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context()
        )

        assert senders.emails[0]["subject"] == "Notification"

    @pytest.mark.asyncio
    async def test_email_skipped_without_address(self, db, seed, dispatcher, senders):
        workspace = seed.workspace()
        seed.rule(workspace, AutomationTrigger.CONTACT_CREATED, WELCOME)

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context(email=None)
        )

        assert result.skipped == 1
        assert result.failed == 0
        assert senders.emails == []

    @pytest.mark.asyncio
    async def test_sms_skipped_without_phone(self, db, seed, dispatcher, senders):
        workspace = seed.workspace()
        seed.rule(
            workspace,
            AutomationTrigger.CONTACT_CREATED,
            SmsActionConfig(message="Hi {{contactName}}"),
        )

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context(phone="")
        )

        assert result.outcomes[0].status == SKIPPED
        assert senders.sms == []

    @pytest.mark.asyncio
    async def test_sms_sent_to_context_phone(self, db, seed, dispatcher, senders):
        workspace = seed.workspace()
        seed.rule(
            workspace,
            AutomationTrigger.BOOKING_REMINDER,
            SmsActionConfig(message="{{bookingType}} on {{bookingDate}} at {{bookingTime}}"),
        )
        context = BookingContext(
            contactName="Ada",
            phone="+15550001111",
            bookingType="Checkup",
            bookingDate="March 05, 2025",
            bookingTime="02:30 PM",
        )

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.BOOKING_REMINDER, context
        )

        assert result.sent == 1
        assert senders.sms == [
            {"to": "+15550001111", "body": "Checkup on March 05, 2025 at 02:30 PM"}
        ]


class TestAlerts:
    @pytest.mark.asyncio
    async def test_alert_persisted_and_published(self, db, seed, dispatcher, broadcaster):
        workspace = seed.workspace()
        seed.rule(workspace, AutomationTrigger.INVENTORY_LOW, LOW_STOCK)
        context = InventoryContext(itemName="Gloves", quantity=3, threshold=10, linkTo="/inventory/7")

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.INVENTORY_LOW, context
        )

        alert = db.query(Alert).one()
        assert result.outcomes[0].alert_id == alert.id
        assert alert.title == "Gloves low"
        assert alert.message == "Only 3 left (threshold 10)"
        assert alert.priority == "HIGH"
        assert alert.link_to == "/inventory/7"
        assert alert.is_read is False

        published_workspace, payload = broadcaster.published[0]
        assert published_workspace == workspace.id
        assert payload["id"] == alert.id
        assert payload["title"] == "Gloves low"
        assert payload["linkTo"] == "/inventory/7"

    @pytest.mark.asyncio
    async def test_priority_defaults_to_medium(self, db, seed, dispatcher):
        workspace = seed.workspace()
        seed.rule(
            workspace,
            AutomationTrigger.CONTACT_CREATED,
            AlertActionConfig(alertType="NEW_CONTACT", title="New contact", message="{{contactName}}"),
        )

        await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context(linkTo=None)
        )

        alert = db.query(Alert).one()
        assert alert.priority == "MEDIUM"
        assert alert.link_to is None

    @pytest.mark.asyncio
    async def test_publish_failure_keeps_alert(self, db, seed, senders):
        workspace = seed.workspace()
        seed.rule(workspace, AutomationTrigger.INVENTORY_LOW, LOW_STOCK)
        dispatcher = AutomationDispatcher(
            AutomationExecutor(senders.channels(), broadcaster=FakeBroadcaster(fail=True))
        )
        context = InventoryContext(itemName="Gloves", quantity=3, threshold=10)

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.INVENTORY_LOW, context
        )

        assert result.sent == 1
        assert db.query(Alert).count() == 1

    @pytest.mark.asyncio
    async def test_alert_created_without_broadcaster(self, db, seed, senders):
        workspace = seed.workspace()
        seed.rule(workspace, AutomationTrigger.INVENTORY_LOW, LOW_STOCK)
        dispatcher = AutomationDispatcher(AutomationExecutor(senders.channels()))

        await dispatcher.dispatch(
            db,
            workspace.id,
            AutomationTrigger.INVENTORY_LOW,
            InventoryContext(itemName="Gloves", quantity=3, threshold=10),
        )

        assert db.query(Alert).count() == 1


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_failing_rule_does_not_stop_the_next(self, db, seed, broadcaster):
        workspace = seed.workspace()
        seed.rule(workspace, AutomationTrigger.CONTACT_CREATED, WELCOME, name="Welcome email")
        seed.rule(
            workspace,
            AutomationTrigger.CONTACT_CREATED,
            AlertActionConfig(alertType="NEW_CONTACT", title="New contact", message="{{contactName}}"),
            name="Team alert",
        )
        failing = RecordingSenders(fail_email=True)
        dispatcher = AutomationDispatcher(
            AutomationExecutor(failing.channels(), broadcaster=broadcaster)
        )

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context()
        )

        assert result.matched == 2
        assert result.failed == 1
        assert result.sent == 1
        assert db.query(Alert).filter(Alert.title == "New contact").count() == 1

    @pytest.mark.asyncio
    async def test_malformed_stored_config_is_a_failed_outcome(self, db, seed, dispatcher):
        workspace = seed.workspace()
        rule = AutomationRule(
            workspace_id=workspace.id,
            name="Broken",
            trigger=AutomationTrigger.CONTACT_CREATED.value,
            action="SEND_EMAIL",
            config={"subject": "No body"},
            enabled=True,
        )
        db.add(rule)
        db.commit()

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context()
        )

        outcome = result.outcomes[0]
        assert outcome.status == FAILED
        assert outcome.rule_id == rule.id
        assert not outcome.ok

    @pytest.mark.asyncio
    async def test_sms_transport_error_is_reported(self, db, seed, broadcaster):
        workspace = seed.workspace()
        seed.rule(
            workspace,
            AutomationTrigger.CONTACT_CREATED,
            SmsActionConfig(message="Hi {{contactName}}"),
        )
        dispatcher = AutomationDispatcher(
            AutomationExecutor(RecordingSenders(fail_sms=True).channels(), broadcaster=broadcaster)
        )

        result = await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context()
        )

        assert result.failed == 1
        assert "carrier rejected" in result.outcomes[0].detail


class TestNullsInStoredConfig:
    @pytest.mark.asyncio
    async def test_null_priority_creates_medium_alert(self, db, seed, dispatcher):
        workspace = seed.workspace()
        db.add(
            AutomationRule(
                workspace_id=workspace.id,
                name="Low stock",
                trigger=AutomationTrigger.INVENTORY_LOW.value,
                action="CREATE_ALERT",
                config={
                    "alertType": "LOW_INVENTORY",
                    "priority": None,
                    "title": "{{itemName}} low",
                    "message": "Only {{quantity}} left",
                },
                enabled=True,
            )
        )
        db.commit()

        result = await dispatcher.dispatch(
            db,
            workspace.id,
            AutomationTrigger.INVENTORY_LOW,
            InventoryContext(itemName="Gloves", quantity=1, threshold=5),
        )

        assert result.outcomes[0].status == SENT
        alert = db.query(Alert).one()
        assert alert.priority == "MEDIUM"
        assert alert.title == "Gloves low"

    @pytest.mark.asyncio
    async def test_null_subject_sends_notification_subject(self, db, seed, dispatcher, senders):
        workspace = seed.workspace()
        db.add(
            AutomationRule(
                workspace_id=workspace.id,
                name="Welcome",
                trigger=AutomationTrigger.CONTACT_CREATED.value,
                action="SEND_EMAIL",
                config={"subject": None, "body": "Hi {{contactName}}"},
                enabled=True,
            )
        )
        db.commit()

        await dispatcher.dispatch(
            db, workspace.id, AutomationTrigger.CONTACT_CREATED, contact_context()
        )

        assert senders.emails[0]["subject"] == "Notification"
        assert senders.emails[0]["body"] == "Hi Ada Lovelace"
