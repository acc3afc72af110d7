"""
Unified Notification Service
Single entry point for the email and SMS channels used by automations.
Senders are pluggable so the engine can be wired to other providers (or fakes in tests).
"""

import logging
from typing import Awaitable, Callable, Optional

from ..email_service import send_email
from .twilio_service import send_sms

logger = logging.getLogger(__name__)

EmailSender = Callable[..., Awaitable[dict]]
SmsSender = Callable[..., Awaitable[dict]]


class NotificationChannels:
    """Email + SMS delivery behind one uniform contract.

    Both methods raise on transport failure; callers decide whether to swallow.
    """

    def __init__(
        self,
        email_sender: Optional[EmailSender] = None,
        sms_sender: Optional[SmsSender] = None,
    ):
        self.email_sender = email_sender or send_email
        self.sms_sender = sms_sender or send_sms

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        from_address: Optional[str] = None,
        workspace_name: Optional[str] = None,
        link_to: Optional[str] = None,
    ) -> dict:
        logger.info(f"📧 Sending automation email to {to}")
        result = await self.email_sender(
            to=to,
            subject=subject,
            body=body,
            from_address=from_address,
            workspace_name=workspace_name,
            link_to=link_to,
        )
        logger.info(f"✅ Automation email sent to {to}")
        return result

    async def send_sms(self, to: str, message: str) -> dict:
        logger.info(f"📱 Sending automation SMS to {to}")
        result = await self.sms_sender(to_phone=to, message_body=message)
        logger.info(f"✅ Automation SMS sent to {to}")
        return result
