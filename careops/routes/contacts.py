"""
Contact Routes
Creating a contact fires CONTACT_CREATED automations
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Contact, Workspace
from ..schemas import ContactCreate, ContactResponse
from ..services.automation_events import on_contact_created

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces/{workspace_id}/contacts", tags=["contacts"])


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(
    workspace_id: int,
    data: ContactCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    workspace = db.query(Workspace).filter(Workspace.id == workspace_id).first()
    if not workspace:
        raise HTTPException(status_code=404, detail="Workspace not found")

    contact = Contact(workspace_id=workspace_id, **data.model_dump())
    db.add(contact)
    db.commit()
    db.refresh(contact)
    logger.info(f"✅ Contact {contact.id} created in workspace {workspace_id}")

    await on_contact_created(db, request.app.state.automation_dispatcher, contact)
    db.refresh(contact)
    return contact
