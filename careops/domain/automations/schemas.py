"""Automation domain schemas - rule configs, event contexts and API models"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from ...models_automation import AlertPriority, AutomationAction, AutomationTrigger
from ...services.template_renderer import placeholders

# ============================================================================
# RULE CONFIGURATION (tagged by action)
# ============================================================================


class EmailActionConfig(BaseModel):
    action: Literal["SEND_EMAIL"] = "SEND_EMAIL"
    subject: str = "Notification"
    body: str = Field(min_length=1)

    @field_validator("subject", mode="before")
    @classmethod
    def default_missing_subject(cls, value):
        return value or "Notification"

    def templates(self) -> list[str]:
        return [self.subject, self.body]


class SmsActionConfig(BaseModel):
    action: Literal["SEND_SMS"] = "SEND_SMS"
    message: str = Field(min_length=1)

    def templates(self) -> list[str]:
        return [self.message]


class AlertActionConfig(BaseModel):
    action: Literal["CREATE_ALERT"] = "CREATE_ALERT"
    alertType: str = Field(min_length=1)
    priority: AlertPriority = AlertPriority.MEDIUM
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)

    @field_validator("priority", mode="before")
    @classmethod
    def default_missing_priority(cls, value):
        return value or AlertPriority.MEDIUM

    def templates(self) -> list[str]:
        return [self.title, self.message]


ActionConfig = Annotated[
    Union[EmailActionConfig, SmsActionConfig, AlertActionConfig],
    Field(discriminator="action"),
]

_action_config_adapter = TypeAdapter(ActionConfig)


def parse_action_config(action: str, config: Optional[dict]) -> ActionConfig:
    """Rebuild the typed config from a stored (action, config JSON) pair.

    Raises pydantic.ValidationError when the stored payload is malformed.
    """
    payload = dict(config or {})
    payload["action"] = action
    return _action_config_adapter.validate_python(payload)


def dump_action_config(config: ActionConfig) -> dict:
    """Config JSON as stored on the rule row (the action lives in its own column)"""
    return config.model_dump(mode="json", exclude={"action"})


# ============================================================================
# EVENT CONTEXTS
# ============================================================================


class AutomationContext(BaseModel):
    """Base for the per-trigger template variables"""

    model_config = ConfigDict(frozen=True)

    linkTo: Optional[str] = None

    def template_vars(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @classmethod
    def template_fields(cls) -> set[str]:
        return set(cls.model_fields)


class ContactContext(AutomationContext):
    contactName: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None


class BookingContext(ContactContext):
    bookingType: str = ""
    bookingDate: str = ""
    bookingTime: str = ""


class FormContext(ContactContext):
    formName: str = ""
    dueDate: Optional[str] = None


class InventoryContext(AutomationContext):
    itemName: str
    quantity: int
    threshold: int


TRIGGER_CONTEXTS: dict[AutomationTrigger, type[AutomationContext]] = {
    AutomationTrigger.BOOKING_REMINDER: BookingContext,
    AutomationTrigger.BOOKING_CREATED: BookingContext,
    AutomationTrigger.BOOKING_COMPLETED: BookingContext,
    AutomationTrigger.CONTACT_CREATED: ContactContext,
    AutomationTrigger.FORM_PENDING: FormContext,
    AutomationTrigger.FORM_SUBMITTED: FormContext,
    AutomationTrigger.INVENTORY_LOW: InventoryContext,
}


def validate_rule_templates(trigger: AutomationTrigger, config: ActionConfig) -> None:
    """Reject placeholders the trigger's context never provides"""
    context_cls = TRIGGER_CONTEXTS[trigger]
    if isinstance(config, EmailActionConfig) and "email" not in context_cls.template_fields():
        raise ValueError(f"{trigger.value} events carry no email address")
    if isinstance(config, SmsActionConfig) and "phone" not in context_cls.template_fields():
        raise ValueError(f"{trigger.value} events carry no phone number")

    allowed = context_cls.template_fields()
    unknown = set()
    for template in config.templates():
        unknown |= placeholders(template) - allowed
    if unknown:
        raise ValueError(
            f"Unknown placeholders for {trigger.value}: {', '.join(sorted(unknown))}. "
            f"Available: {', '.join(sorted(allowed))}"
        )


# ============================================================================
# API MODELS
# ============================================================================


class AutomationCreate(BaseModel):
    """Schema for creating an automation rule"""

    name: str = Field(min_length=1, max_length=255)
    trigger: AutomationTrigger
    config: ActionConfig
    enabled: bool = True

    @model_validator(mode="after")
    def check_templates(self):
        validate_rule_templates(self.trigger, self.config)
        return self


class AutomationUpdate(BaseModel):
    """Schema for updating an automation rule; disabling replaces deletion"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    enabled: Optional[bool] = None
    config: Optional[ActionConfig] = None


class AutomationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    workspace_id: int
    name: str
    trigger: AutomationTrigger
    action: AutomationAction
    config: dict
    enabled: bool
    created_at: datetime


class OnboardingAutomationsRequest(BaseModel):
    """Template ids picked during onboarding"""

    templates: list[str] = Field(min_length=1)


class AutomationTemplateResponse(BaseModel):
    id: str
    name: str
    description: str
    trigger: AutomationTrigger
    action: AutomationAction
    enabled: bool


class AlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    workspace_id: int
    type: str
    priority: AlertPriority
    title: str
    message: str
    link_to: Optional[str] = None
    is_read: bool
    created_at: datetime


class CycleRunResult(BaseModel):
    cadence: Literal["fast", "slow"]
    scans: dict[str, dict]
