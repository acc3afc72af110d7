"""
Twilio SMS Service
SMS channel for automation messages, talking to the Twilio REST API
"""

import logging
from typing import Optional

import httpx

from ..config import (
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_MESSAGING_SERVICE_SID,
    TWILIO_PHONE_NUMBER,
    TWILIO_TIMEOUT_SECONDS,
)
from ..shared.exceptions import NotificationConfigError, SmsDeliveryError
from ..shared.validators import validate_phone

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


async def send_sms(
    to_phone: str,
    message_body: str,
    http_client: Optional[httpx.AsyncClient] = None,
) -> dict:
    """
    Send SMS via Twilio

    Args:
        to_phone: Recipient phone number, normalized to E.164 before sending
        message_body: SMS message content
        http_client: Optional client to reuse (a new one is opened otherwise)

    Returns:
        Dict with the Twilio message SID and status

    Raises:
        NotificationConfigError: Twilio credentials or sender missing
        SmsDeliveryError: invalid number, API error or transport failure
    """
    if not TWILIO_ACCOUNT_SID or not TWILIO_AUTH_TOKEN:
        raise NotificationConfigError("Twilio credentials are not configured", provider="twilio")
    if not TWILIO_MESSAGING_SERVICE_SID and not TWILIO_PHONE_NUMBER:
        raise NotificationConfigError(
            "TWILIO_PHONE_NUMBER or TWILIO_MESSAGING_SERVICE_SID must be set", provider="twilio"
        )

    try:
        formatted_phone = validate_phone(to_phone)
    except ValueError as e:
        raise SmsDeliveryError(f"Invalid phone number {to_phone}: {e}", provider="twilio") from e

    data = {
        "To": formatted_phone,
        "Body": message_body,
    }
    if TWILIO_MESSAGING_SERVICE_SID:
        data["MessagingServiceSid"] = TWILIO_MESSAGING_SERVICE_SID
    else:
        data["From"] = TWILIO_PHONE_NUMBER

    url = f"{TWILIO_API_BASE}/Accounts/{TWILIO_ACCOUNT_SID}/Messages.json"
    logger.info(f"📱 Sending SMS to Twilio API for {formatted_phone}")

    try:
        if http_client is not None:
            response = await http_client.post(
                url,
                auth=(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN),
                data=data,
                timeout=TWILIO_TIMEOUT_SECONDS,
            )
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    auth=(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN),
                    data=data,
                    timeout=TWILIO_TIMEOUT_SECONDS,
                )
    except httpx.HTTPError as e:
        logger.error(f"Twilio API error: {str(e)}")
        raise SmsDeliveryError(f"Twilio request failed: {str(e)}", provider="twilio") from e

    logger.info(f"📡 Twilio API response status: {response.status_code}")

    if response.status_code not in (200, 201):
        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        error_message = error_data.get("message", response.text or "Unknown error")
        error_code = error_data.get("code")
        logger.error(f"❌ Twilio API error [{error_code}]: {error_message}")
        raise SmsDeliveryError(
            f"[{error_code}] {error_message}" if error_code else error_message,
            provider="twilio",
        )

    result = response.json()
    message_sid = result.get("sid")
    logger.info(f"✅ SMS sent successfully to {formatted_phone} (SID: {message_sid})")
    return {"sid": message_sid, "status": result.get("status", "queued")}
