"""Automation repository - Database operations for rules and alerts"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Workspace
from ...models_automation import Alert, AutomationRule, AutomationTrigger


class AutomationRepository:
    """Repository for automation rule and alert database operations"""

    @staticmethod
    def get_workspace(db: Session, workspace_id: int) -> Optional[Workspace]:
        return db.query(Workspace).filter(Workspace.id == workspace_id).first()

    @staticmethod
    def get_enabled_rules(
        db: Session, workspace_id: int, trigger: AutomationTrigger
    ) -> list[AutomationRule]:
        """Rules that should fire for a workspace event"""
        return (
            db.query(AutomationRule)
            .filter(
                AutomationRule.workspace_id == workspace_id,
                AutomationRule.trigger == AutomationTrigger(trigger).value,
                AutomationRule.enabled.is_(True),
            )
            .all()
        )

    @staticmethod
    def get_rules(db: Session, workspace_id: int) -> list[AutomationRule]:
        return (
            db.query(AutomationRule)
            .filter(AutomationRule.workspace_id == workspace_id)
            .order_by(AutomationRule.created_at.asc(), AutomationRule.id.asc())
            .all()
        )

    @staticmethod
    def get_rule_by_id(db: Session, rule_id: int, workspace_id: int) -> Optional[AutomationRule]:
        return (
            db.query(AutomationRule)
            .filter(AutomationRule.id == rule_id, AutomationRule.workspace_id == workspace_id)
            .first()
        )

    @staticmethod
    def create_rule(db: Session, workspace_id: int, **rule_data) -> AutomationRule:
        rule = AutomationRule(workspace_id=workspace_id, **rule_data)
        db.add(rule)
        db.commit()
        db.refresh(rule)
        return rule

    @staticmethod
    def create_rules(db: Session, workspace_id: int, rules: list[dict]) -> list[AutomationRule]:
        """Bulk insert in one transaction (onboarding)"""
        created = [AutomationRule(workspace_id=workspace_id, **data) for data in rules]
        db.add_all(created)
        db.commit()
        for rule in created:
            db.refresh(rule)
        return created

    @staticmethod
    def update_rule(db: Session, rule: AutomationRule, **updates) -> AutomationRule:
        for key, value in updates.items():
            if value is not None and hasattr(rule, key):
                setattr(rule, key, value)

        db.commit()
        db.refresh(rule)
        return rule

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    @staticmethod
    def create_alert(db: Session, workspace_id: int, **alert_data) -> Alert:
        alert = Alert(workspace_id=workspace_id, **alert_data)
        db.add(alert)
        db.commit()
        db.refresh(alert)
        return alert

    @staticmethod
    def find_recent_alert(
        db: Session,
        workspace_id: int,
        alert_type: str,
        since: datetime,
        mentions: str,
        link_to: Optional[str] = None,
    ) -> Optional[Alert]:
        """Alert of a type created after `since` that names `mentions` or links to `link_to`"""
        matches = [
            Alert.title.contains(mentions, autoescape=True),
            Alert.message.contains(mentions, autoescape=True),
        ]
        if link_to:
            matches.append(Alert.link_to == link_to)

        return (
            db.query(Alert)
            .filter(
                Alert.workspace_id == workspace_id,
                Alert.type == alert_type,
                Alert.created_at >= since,
                or_(*matches),
            )
            .first()
        )

    @staticmethod
    def get_alerts(
        db: Session, workspace_id: int, unread_only: bool = False, limit: int = 50
    ) -> list[Alert]:
        query = db.query(Alert).filter(Alert.workspace_id == workspace_id)
        if unread_only:
            query = query.filter(Alert.is_read.is_(False))
        return query.order_by(Alert.created_at.desc(), Alert.id.desc()).limit(limit).all()

    @staticmethod
    def get_alert_by_id(db: Session, alert_id: int, workspace_id: int) -> Optional[Alert]:
        return (
            db.query(Alert)
            .filter(Alert.id == alert_id, Alert.workspace_id == workspace_id)
            .first()
        )

    @staticmethod
    def mark_alert_read(db: Session, alert: Alert) -> Alert:
        alert.is_read = True
        db.commit()
        db.refresh(alert)
        return alert
