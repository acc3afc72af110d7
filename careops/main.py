import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import models, models_automation  # noqa: F401 - register tables on Base
from .config import AUTOMATION_SCHEDULER_ENABLED
from .database import Base, SessionLocal, engine
from .domain.automations.router import router as automations_router
from .domain.automations.engine import AutomationDispatcher, AutomationExecutor
from .realtime import AlertHub
from .routes.bookings import router as bookings_router
from .routes.contacts import router as contacts_router
from .routes.form_submissions import router as form_submissions_router
from .routes.realtime import router as realtime_router
from .services.automation_scheduler import AutomationScheduler
from .services.notification_service import NotificationChannels

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    # One hub, dispatcher and scheduler per process; routes reach them through app.state
    hub = AlertHub()
    dispatcher = AutomationDispatcher(AutomationExecutor(NotificationChannels(), broadcaster=hub))
    scheduler = AutomationScheduler(SessionLocal, dispatcher)

    app.state.alert_hub = hub
    app.state.automation_dispatcher = dispatcher
    app.state.automation_scheduler = scheduler

    if AUTOMATION_SCHEDULER_ENABLED:
        scheduler.start()
    else:
        logger.info("Automation scheduler disabled (AUTOMATION_SCHEDULER_ENABLED=false)")

    yield

    logger.info("Application shutting down...")
    await scheduler.stop()


app = FastAPI(title="CareOps API", version="1.0.0", lifespan=lifespan)


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(contacts_router)
app.include_router(bookings_router)
app.include_router(form_submissions_router)
app.include_router(automations_router)
app.include_router(realtime_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health_check():
    scheduler = getattr(app.state, "automation_scheduler", None)
    hub = getattr(app.state, "alert_hub", None)
    return {
        "status": "healthy",
        "scheduler_running": bool(scheduler and scheduler.running),
        "realtime_connections": hub.connection_count if hub else 0,
    }
