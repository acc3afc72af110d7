"""Tests for rule config parsing and template validation."""

import pytest
from pydantic import ValidationError

from careops.domain.automations.schemas import (
    AlertActionConfig,
    AutomationCreate,
    EmailActionConfig,
    FormContext,
    InventoryContext,
    SmsActionConfig,
    dump_action_config,
    parse_action_config,
    validate_rule_templates,
)
from careops.domain.automations.templates import AUTOMATION_TEMPLATES
from careops.models_automation import AlertPriority, AutomationTrigger


class TestActionConfig:
    def test_parse_picks_variant_by_action(self):
        config = parse_action_config("SEND_SMS", {"message": "Hi"})
        assert isinstance(config, SmsActionConfig)

    def test_alert_priority_defaults_to_medium(self):
        config = parse_action_config(
            "CREATE_ALERT", {"alertType": "LOW_INVENTORY", "title": "t", "message": "m"}
        )
        assert config.priority == AlertPriority.MEDIUM

    def test_email_subject_defaults(self):
        config = parse_action_config("SEND_EMAIL", {"body": "Hello"})
        assert config.subject == "Notification"

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            parse_action_config("SEND_SMS", {})

    def test_unknown_action(self):
        with pytest.raises(ValidationError):
            parse_action_config("SEND_FAX", {"message": "Hi"})

    def test_null_priority_and_subject_mean_defaults(self):
        alert = parse_action_config(
            "CREATE_ALERT", {"alertType": "X", "priority": None, "title": "t", "message": "m"}
        )
        email = parse_action_config("SEND_EMAIL", {"subject": None, "body": "Hello"})

        assert alert.priority == AlertPriority.MEDIUM
        assert email.subject == "Notification"

    def test_dump_leaves_action_out(self):
        stored = dump_action_config(
            AlertActionConfig(alertType="X", priority="LOW", title="t", message="m")
        )
        assert stored == {"alertType": "X", "priority": "LOW", "title": "t", "message": "m"}
        assert isinstance(parse_action_config("CREATE_ALERT", stored), AlertActionConfig)


class TestTemplateValidation:
    def test_known_placeholders_accepted(self):
        validate_rule_templates(
            AutomationTrigger.FORM_PENDING,
            EmailActionConfig(subject="{{formName}}", body="Due {{dueDate}}, {{contactName}}"),
        )

    def test_unknown_placeholder_rejected(self):
        with pytest.raises(ValueError, match="itemName"):
            validate_rule_templates(
                AutomationTrigger.BOOKING_REMINDER, SmsActionConfig(message="{{itemName}}")
            )

    def test_sms_needs_a_phone_in_context(self):
        with pytest.raises(ValueError, match="phone"):
            validate_rule_templates(AutomationTrigger.INVENTORY_LOW, SmsActionConfig(message="low"))

    def test_create_payload_runs_validation(self):
        with pytest.raises(ValidationError):
            AutomationCreate(
                name="Bad",
                trigger="INVENTORY_LOW",
                config={"action": "CREATE_ALERT", "alertType": "X", "title": "{{bookingDate}}", "message": "m"},
            )

    @pytest.mark.parametrize("template_id", sorted(AUTOMATION_TEMPLATES))
    def test_onboarding_templates_are_valid(self, template_id):
        template = AUTOMATION_TEMPLATES[template_id]
        validate_rule_templates(template["trigger"], template["config"])


class TestContexts:
    def test_template_vars_skip_none(self):
        context = FormContext(contactName="Ada", formName="Intake")
        variables = context.template_vars()
        assert variables["formName"] == "Intake"
        assert "dueDate" not in variables
        assert "email" not in variables

    def test_inventory_context_fields(self):
        assert InventoryContext.template_fields() == {"itemName", "quantity", "threshold", "linkTo"}
