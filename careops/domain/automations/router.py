"""Automation router - FastAPI endpoints for rules, templates, alerts and cycles"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import (
    AlertResponse,
    AutomationCreate,
    AutomationResponse,
    AutomationTemplateResponse,
    AutomationUpdate,
    CycleRunResult,
    OnboardingAutomationsRequest,
)
from .service import AutomationService
from .templates import AUTOMATION_TEMPLATES

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Automations"])


def get_automation_service(db: Session = Depends(get_db)) -> AutomationService:
    """Dependency injection for AutomationService"""
    return AutomationService(db)


# ============================================================================
# RULES
# ============================================================================


@router.get("/workspaces/{workspace_id}/automations", response_model=list[AutomationResponse])
async def list_automations(
    workspace_id: int,
    service: AutomationService = Depends(get_automation_service),
):
    return service.get_rules(workspace_id)


@router.post(
    "/workspaces/{workspace_id}/automations",
    response_model=AutomationResponse,
    status_code=201,
)
async def create_automation(
    workspace_id: int,
    data: AutomationCreate,
    service: AutomationService = Depends(get_automation_service),
):
    return service.create_rule(workspace_id, data)


@router.put(
    "/workspaces/{workspace_id}/automations/{rule_id}", response_model=AutomationResponse
)
async def update_automation(
    workspace_id: int,
    rule_id: int,
    data: AutomationUpdate,
    service: AutomationService = Depends(get_automation_service),
):
    """Rename, enable/disable or replace the config of a rule"""
    return service.update_rule(workspace_id, rule_id, data)


# ============================================================================
# ONBOARDING TEMPLATES
# ============================================================================


@router.get("/automation-templates", response_model=list[AutomationTemplateResponse])
async def list_automation_templates():
    return [
        AutomationTemplateResponse(
            id=template_id,
            name=template["name"],
            description=template["description"],
            trigger=template["trigger"],
            action=template["config"].action,
            enabled=template["enabled"],
        )
        for template_id, template in AUTOMATION_TEMPLATES.items()
    ]


@router.post(
    "/workspaces/{workspace_id}/onboarding/automations",
    response_model=list[AutomationResponse],
    status_code=201,
)
async def setup_onboarding_automations(
    workspace_id: int,
    data: OnboardingAutomationsRequest,
    service: AutomationService = Depends(get_automation_service),
):
    """Create the automations picked during onboarding"""
    return service.apply_onboarding_templates(workspace_id, data.templates)


# ============================================================================
# CYCLES
# ============================================================================


@router.post("/automations/run", response_model=CycleRunResult)
async def run_automation_cycle(
    request: Request,
    cadence: str = Query("fast", pattern="^(fast|slow)$"),
):
    """Run one scheduler cycle now and return the per-scan summaries"""
    scheduler = getattr(request.app.state, "automation_scheduler", None)
    if scheduler is None:
        raise HTTPException(status_code=503, detail="Automation scheduler not configured")

    logger.info(f"🔄 Manual {cadence} automation cycle requested")
    scans = await scheduler.run_cycle(cadence)
    return CycleRunResult(cadence=cadence, scans=scans)


# ============================================================================
# ALERTS
# ============================================================================


@router.get("/workspaces/{workspace_id}/alerts", response_model=list[AlertResponse])
async def list_alerts(
    workspace_id: int,
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    service: AutomationService = Depends(get_automation_service),
):
    return service.get_alerts(workspace_id, unread_only=unread_only, limit=limit)


@router.patch(
    "/workspaces/{workspace_id}/alerts/{alert_id}/read", response_model=AlertResponse
)
async def mark_alert_read(
    workspace_id: int,
    alert_id: int,
    service: AutomationService = Depends(get_automation_service),
):
    return service.mark_alert_read(workspace_id, alert_id)
