import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./careops.db")

# Frontend base URL used for deep links in notifications
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Email configuration
# "resend" uses the Resend API, "smtp" talks to SMTP_HOST directly
EMAIL_PROVIDER = os.getenv("EMAIL_PROVIDER", "resend").lower()
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "CareOps <notifications@careops.app>")

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

# Twilio SMS configuration
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")
TWILIO_MESSAGING_SERVICE_SID = os.getenv("TWILIO_MESSAGING_SERVICE_SID")
TWILIO_TIMEOUT_SECONDS = float(os.getenv("TWILIO_TIMEOUT_SECONDS", "10"))

# Automation engine
AUTOMATION_SCHEDULER_ENABLED = os.getenv("AUTOMATION_SCHEDULER_ENABLED", "true").lower() == "true"
AUTOMATION_FAST_INTERVAL_SECONDS = int(os.getenv("AUTOMATION_FAST_INTERVAL_SECONDS", "900"))  # 15 min
AUTOMATION_SLOW_INTERVAL_SECONDS = int(os.getenv("AUTOMATION_SLOW_INTERVAL_SECONDS", "3600"))  # 1 hour
# Let the server finish starting before the first scan
AUTOMATION_INITIAL_DELAY_SECONDS = int(os.getenv("AUTOMATION_INITIAL_DELAY_SECONDS", "10"))
PENDING_FORM_REMINDER_HOURS = int(os.getenv("PENDING_FORM_REMINDER_HOURS", "24"))
INVENTORY_ALERT_DEDUP_HOURS = int(os.getenv("INVENTORY_ALERT_DEDUP_HOURS", "24"))
