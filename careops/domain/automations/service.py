"""Automation service - Business logic for managing rules and alerts"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Workspace
from ...models_automation import Alert, AutomationRule, AutomationTrigger
from .repository import AutomationRepository
from .schemas import (
    AutomationCreate,
    AutomationUpdate,
    dump_action_config,
    validate_rule_templates,
)
from .templates import AUTOMATION_TEMPLATES

logger = logging.getLogger(__name__)

# Onboarding step reached once automations are configured
AUTOMATIONS_ONBOARDING_STEP = 5


class AutomationService:
    """Service layer for automation rule management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AutomationRepository()

    def get_workspace(self, workspace_id: int) -> Workspace:
        workspace = self.repo.get_workspace(self.db, workspace_id)
        if not workspace:
            raise HTTPException(status_code=404, detail="Workspace not found")
        return workspace

    def get_rules(self, workspace_id: int) -> list[AutomationRule]:
        self.get_workspace(workspace_id)
        return self.repo.get_rules(self.db, workspace_id)

    def get_rule(self, workspace_id: int, rule_id: int) -> AutomationRule:
        rule = self.repo.get_rule_by_id(self.db, rule_id, workspace_id)
        if not rule:
            raise HTTPException(status_code=404, detail="Automation not found")
        return rule

    def create_rule(self, workspace_id: int, data: AutomationCreate) -> AutomationRule:
        self.get_workspace(workspace_id)
        rule = self.repo.create_rule(
            self.db,
            workspace_id,
            name=data.name,
            trigger=data.trigger.value,
            action=data.config.action,
            config=dump_action_config(data.config),
            enabled=data.enabled,
        )
        logger.info(f"✅ Automation {rule.id} created for workspace {workspace_id}: {rule.name}")
        return rule

    def update_rule(self, workspace_id: int, rule_id: int, data: AutomationUpdate) -> AutomationRule:
        rule = self.get_rule(workspace_id, rule_id)

        updates = {"name": data.name, "enabled": data.enabled}
        if data.config is not None:
            try:
                validate_rule_templates(AutomationTrigger(rule.trigger), data.config)
            except ValueError as e:
                raise HTTPException(status_code=422, detail=str(e))
            updates["action"] = data.config.action
            updates["config"] = dump_action_config(data.config)

        rule = self.repo.update_rule(self.db, rule, **updates)
        logger.info(f"✏️ Automation {rule.id} updated (enabled={rule.enabled})")
        return rule

    def apply_onboarding_templates(
        self, workspace_id: int, template_ids: list[str]
    ) -> list[AutomationRule]:
        """Create one rule per selected template, then advance onboarding"""
        workspace = self.get_workspace(workspace_id)

        unknown = [t for t in template_ids if t not in AUTOMATION_TEMPLATES]
        if unknown:
            raise HTTPException(
                status_code=400, detail=f"Unknown automation templates: {', '.join(unknown)}"
            )

        rules = []
        for template_id in dict.fromkeys(template_ids):
            template = AUTOMATION_TEMPLATES[template_id]
            rules.append(
                {
                    "name": template["name"],
                    "trigger": template["trigger"].value,
                    "action": template["config"].action,
                    "config": dump_action_config(template["config"]),
                    # Picking a template during onboarding turns it on
                    "enabled": True,
                }
            )

        workspace.onboarding_step = max(workspace.onboarding_step or 0, AUTOMATIONS_ONBOARDING_STEP)
        created = self.repo.create_rules(self.db, workspace_id, rules)
        logger.info(f"✅ Onboarding created {len(created)} automations for workspace {workspace_id}")
        return created

    def get_alerts(self, workspace_id: int, unread_only: bool = False, limit: int = 50) -> list[Alert]:
        self.get_workspace(workspace_id)
        return self.repo.get_alerts(self.db, workspace_id, unread_only=unread_only, limit=limit)

    def mark_alert_read(self, workspace_id: int, alert_id: int) -> Alert:
        alert = self.repo.get_alert_by_id(self.db, alert_id, workspace_id)
        if not alert:
            raise HTTPException(status_code=404, detail="Alert not found")
        return self.repo.mark_alert_read(self.db, alert)
