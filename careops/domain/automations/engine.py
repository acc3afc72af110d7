"""
Automation engine - event dispatch and rule execution

The dispatcher fans a workspace event out to every enabled rule listening for
its trigger; the executor performs one rule's action. Neither raises: failures
are logged and reported through ExecutionOutcome / DispatchResult so callers
(scanners, domain event hooks, tests) can count them.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from sqlalchemy.orm import Session

from ...models_automation import AutomationRule, AutomationTrigger
from ...services.notification_service import NotificationChannels
from ...services.template_renderer import render
from .repository import AutomationRepository
from .schemas import (
    AlertActionConfig,
    AutomationContext,
    EmailActionConfig,
    SmsActionConfig,
    parse_action_config,
)

logger = logging.getLogger(__name__)

SENT = "sent"
SKIPPED = "skipped"
FAILED = "failed"


class AlertBroadcaster(Protocol):
    async def publish(self, workspace_id: int, payload: dict) -> int: ...


@dataclass
class ExecutionOutcome:
    """Result of running one rule against one event"""

    rule_id: int
    action: str
    status: str
    detail: Optional[str] = None
    alert_id: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status != FAILED


@dataclass
class DispatchResult:
    """Outcomes of every rule matched by one dispatch"""

    workspace_id: int
    trigger: str
    outcomes: list[ExecutionOutcome] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def matched(self) -> int:
        return len(self.outcomes)

    @property
    def sent(self) -> int:
        return sum(1 for o in self.outcomes if o.status == SENT)

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.status == SKIPPED)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == FAILED)


class AutomationExecutor:
    """Runs a single rule: render templates, then send or persist"""

    def __init__(
        self,
        channels: NotificationChannels,
        broadcaster: Optional[AlertBroadcaster] = None,
    ):
        self.channels = channels
        self.broadcaster = broadcaster

    async def execute(
        self, db: Session, rule: AutomationRule, context: AutomationContext
    ) -> ExecutionOutcome:
        rule_id = rule.id
        action = rule.action
        try:
            config = parse_action_config(action, rule.config)
            variables = context.template_vars()

            if isinstance(config, EmailActionConfig):
                return await self._send_email(rule, config, context, variables)
            if isinstance(config, SmsActionConfig):
                return await self._send_sms(rule, config, context, variables)
            if isinstance(config, AlertActionConfig):
                return await self._create_alert(db, rule, config, context, variables)

            return ExecutionOutcome(rule_id, action, FAILED, detail=f"Unsupported action {action}")
        except Exception as e:
            logger.error(f"❌ Automation {rule_id} ({action}) failed: {e}")
            db.rollback()
            return ExecutionOutcome(rule_id, action, FAILED, detail=str(e))

    async def _send_email(self, rule, config, context, variables) -> ExecutionOutcome:
        email = getattr(context, "email", None)
        if not email:
            logger.debug(f"⚠️ Automation {rule.id} skipped: no email address in context")
            return ExecutionOutcome(rule.id, rule.action, SKIPPED, detail="No email address")

        await self.channels.send_email(
            to=email,
            subject=render(config.subject, variables) or "Notification",
            body=render(config.body, variables),
            workspace_name=rule.workspace.name if rule.workspace else None,
            link_to=context.linkTo,
        )
        return ExecutionOutcome(rule.id, rule.action, SENT)

    async def _send_sms(self, rule, config, context, variables) -> ExecutionOutcome:
        phone = getattr(context, "phone", None)
        if not phone:
            logger.debug(f"⚠️ Automation {rule.id} skipped: no phone number in context")
            return ExecutionOutcome(rule.id, rule.action, SKIPPED, detail="No phone number")

        await self.channels.send_sms(to=phone, message=render(config.message, variables))
        return ExecutionOutcome(rule.id, rule.action, SENT)

    async def _create_alert(self, db, rule, config, context, variables) -> ExecutionOutcome:
        alert = AutomationRepository.create_alert(
            db,
            rule.workspace_id,
            type=config.alertType,
            priority=config.priority.value,
            title=render(config.title, variables),
            message=render(config.message, variables),
            link_to=context.linkTo or None,
        )
        logger.info(f"🔔 Alert {alert.id} created for workspace {rule.workspace_id}: {alert.title}")

        if self.broadcaster is not None:
            payload = {
                "id": alert.id,
                "type": alert.type,
                "priority": alert.priority,
                "title": alert.title,
                "message": alert.message,
                "linkTo": alert.link_to,
                "createdAt": alert.created_at.isoformat() if alert.created_at else None,
            }
            try:
                await self.broadcaster.publish(rule.workspace_id, payload)
            except Exception as e:
                # The alert row is the record; a failed live push is not a failed rule
                logger.warning(f"⚠️ Real-time publish failed for alert {alert.id}: {e}")

        return ExecutionOutcome(rule.id, rule.action, SENT, alert_id=alert.id)


class AutomationDispatcher:
    """Entry point for scanners and domain events"""

    def __init__(self, executor: AutomationExecutor):
        self.executor = executor

    async def dispatch(
        self,
        db: Session,
        workspace_id: int,
        trigger: AutomationTrigger,
        context: AutomationContext,
    ) -> DispatchResult:
        result = DispatchResult(workspace_id=workspace_id, trigger=getattr(trigger, "value", trigger))

        try:
            trigger = AutomationTrigger(trigger)
            rules = AutomationRepository.get_enabled_rules(db, workspace_id, trigger)
        except Exception as e:
            logger.error(
                f"❌ Failed to load automations for workspace {workspace_id} ({result.trigger}): {e}"
            )
            db.rollback()
            result.error = str(e)
            return result

        if not rules:
            logger.debug(f"ℹ️ No enabled automations for {trigger.value} in workspace {workspace_id}")
            return result

        for rule in rules:
            outcome = await self.executor.execute(db, rule, context)
            result.outcomes.append(outcome)

        logger.info(
            f"⚡ {trigger.value} in workspace {workspace_id}: "
            f"{result.sent} sent, {result.skipped} skipped, {result.failed} failed"
        )
        return result
