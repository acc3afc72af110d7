"""
Email channel using Resend (API) or direct SMTP
Automation bodies are wrapped in an MJML layout and compiled to HTML before sending
"""

import asyncio
import logging
import smtplib
import ssl
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import (
    EMAIL_FROM_ADDRESS,
    EMAIL_PROVIDER,
    FRONTEND_URL,
    RESEND_API_KEY,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USERNAME,
)
from .email_templates import automation_notification_template
from .shared.exceptions import EmailDeliveryError, NotificationConfigError

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # Newer releases return an object with .html/.errors, older ones a dict
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        if hasattr(result, "html"):
            if getattr(result, "errors", None):
                logger.warning(f"MJML compilation warnings: {result.errors}")
            return result.html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


def send_via_smtp(
    to: list[str],
    subject: str,
    html_content: str,
    from_address: str,
) -> dict:
    """Send email through the configured SMTP server"""
    if not SMTP_USERNAME or not SMTP_PASSWORD:
        raise NotificationConfigError("SMTP credentials are not configured", provider="smtp")

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)
    msg.attach(MIMEText(html_content, "html"))

    try:
        if SMTP_PORT == 465:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
        else:
            server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
            if SMTP_USE_TLS:
                context = ssl.create_default_context()
                server.starttls(context=context)

        try:
            server.login(SMTP_USERNAME, SMTP_PASSWORD)
            server.sendmail(from_address.split("<")[-1].rstrip(">"), to, msg.as_string())
        finally:
            server.quit()
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"❌ SMTP send failed via {SMTP_HOST}: {e}")
        raise EmailDeliveryError(f"SMTP send failed: {str(e)}", provider="smtp") from e

    logger.info(f"✅ SMTP email sent successfully via {SMTP_HOST}")
    return {"id": f"smtp-{datetime.utcnow().timestamp()}", "success": True}


def send_via_resend(
    to: list[str],
    subject: str,
    html_content: str,
    from_address: str,
) -> dict:
    """Send email through the Resend API"""
    if not RESEND_API_KEY:
        raise NotificationConfigError("RESEND_API_KEY is not configured", provider="resend")

    resend.api_key = RESEND_API_KEY
    try:
        response = resend.Emails.send(
            {
                "from": from_address,
                "to": to,
                "subject": subject,
                "html": html_content,
            }
        )
    except Exception as e:
        logger.error(f"❌ Resend send error to {to}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}", provider="resend") from e

    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    body: str,
    from_address: Optional[str] = None,
    workspace_name: Optional[str] = None,
    link_to: Optional[str] = None,
) -> dict:
    """
    Send an automation email through the configured provider

    Args:
        to: Recipient email(s)
        subject: Rendered subject line
        body: Rendered body (HTML fragments allowed, blank lines split paragraphs)
        from_address: Optional custom from address
        workspace_name: Shown in the footer of the layout
        link_to: Frontend path for the "View details" button

    Returns:
        Provider response dict

    Raises:
        NotificationConfigError: provider unknown or credentials missing
        EmailDeliveryError: provider rejected the message or was unreachable
    """
    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    cta_url = f"{FRONTEND_URL.rstrip('/')}{link_to}" if link_to else None
    html_content = compile_mjml_to_html(
        automation_notification_template(
            subject,
            body,
            cta_url=cta_url,
            cta_label="View details" if cta_url else None,
            workspace_name=workspace_name,
        )
    )

    logger.info(f"📧 Sending email via {EMAIL_PROVIDER} to: {recipients}")

    # Both transports are blocking, keep them off the event loop
    if EMAIL_PROVIDER == "smtp":
        return await asyncio.to_thread(send_via_smtp, recipients, subject, html_content, sender)
    if EMAIL_PROVIDER == "resend":
        return await asyncio.to_thread(send_via_resend, recipients, subject, html_content, sender)

    raise NotificationConfigError(f"Unknown EMAIL_PROVIDER: {EMAIL_PROVIDER}")
