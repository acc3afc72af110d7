"""Automation templates offered during onboarding"""

from ...models_automation import AutomationTrigger
from .schemas import AlertActionConfig, EmailActionConfig, SmsActionConfig

AUTOMATION_TEMPLATES = {
    "booking-confirmation": {
        "name": "Booking Confirmation",
        "description": "Automatically send confirmation email when a booking is created",
        "trigger": AutomationTrigger.BOOKING_CREATED,
        "config": EmailActionConfig(
            subject="Your {{bookingType}} is booked",
            body=(
                "Hi {{contactName}},\n\n"
                "Your {{bookingType}} is booked for {{bookingDate}} at {{bookingTime}}.\n\n"
                "See you then!"
            ),
        ),
        "enabled": True,
    },
    "booking-reminder": {
        "name": "Booking Reminder",
        "description": "Send reminder 24 hours before appointment",
        "trigger": AutomationTrigger.BOOKING_REMINDER,
        "config": EmailActionConfig(
            subject="Reminder: {{bookingType}} tomorrow",
            body=(
                "Hi {{contactName}},\n\n"
                "This is a reminder of your {{bookingType}} on {{bookingDate}} at {{bookingTime}}."
            ),
        ),
        "enabled": True,
    },
    "booking-reminder-sms": {
        "name": "Booking Reminder (SMS)",
        "description": "Text the contact the day before their appointment",
        "trigger": AutomationTrigger.BOOKING_REMINDER,
        "config": SmsActionConfig(
            message="Hi {{contactName}}! Reminder: {{bookingType}} on {{bookingDate}} at {{bookingTime}}.",
        ),
        "enabled": False,
    },
    "follow-up": {
        "name": "Follow-up Message",
        "description": "Send follow-up email after appointment",
        "trigger": AutomationTrigger.BOOKING_COMPLETED,
        "config": EmailActionConfig(
            subject="Thanks for visiting",
            body="Hi {{contactName}},\n\nThank you for your {{bookingType}}. We hope to see you again soon!",
        ),
        "enabled": False,
    },
    "new-contact-welcome": {
        "name": "Welcome New Contacts",
        "description": "Send welcome email when a new contact is added",
        "trigger": AutomationTrigger.CONTACT_CREATED,
        "config": EmailActionConfig(
            subject="Welcome!",
            body="Hi {{contactName}},\n\nThanks for getting in touch. We'll be in contact shortly.",
        ),
        "enabled": False,
    },
    "form-autoresponder": {
        "name": "Form Auto-responder",
        "description": "Automatically reply when someone submits a form",
        "trigger": AutomationTrigger.FORM_SUBMITTED,
        "config": EmailActionConfig(
            subject="We received your {{formName}}",
            body="Hi {{contactName}},\n\nThanks for completing {{formName}}. No further action is needed.",
        ),
        "enabled": True,
    },
    "form-pending-reminder": {
        "name": "Pending Form Reminder",
        "description": "Remind contacts who haven't completed a form after 24 hours",
        "trigger": AutomationTrigger.FORM_PENDING,
        "config": EmailActionConfig(
            subject="Please complete {{formName}}",
            body="Hi {{contactName}},\n\nPlease take a moment to complete {{formName}} before your appointment.",
        ),
        "enabled": True,
    },
    "low-inventory-alert": {
        "name": "Low Inventory Alert",
        "description": "Alert the team when an item drops to its low-stock threshold",
        "trigger": AutomationTrigger.INVENTORY_LOW,
        "config": AlertActionConfig(
            alertType="LOW_INVENTORY",
            priority="HIGH",
            title="{{itemName}} low",
            message="Only {{quantity}} left (threshold {{threshold}})",
        ),
        "enabled": True,
    },
}


def get_template(template_id: str) -> dict:
    """Look up a template; raises KeyError for unknown ids"""
    return AUTOMATION_TEMPLATES[template_id]
