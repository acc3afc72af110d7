"""
Form Submission Routes
Completing a submission fires FORM_SUBMITTED automations
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Form, FormSubmission, FormSubmissionStatus
from ..schemas import FormSubmissionComplete, FormSubmissionResponse
from ..services.automation_events import on_form_submitted

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces/{workspace_id}/form-submissions", tags=["forms"])


@router.post("/{submission_id}/submit", response_model=FormSubmissionResponse)
async def submit_form(
    workspace_id: int,
    submission_id: int,
    data: FormSubmissionComplete,
    request: Request,
    db: Session = Depends(get_db),
):
    submission = (
        db.query(FormSubmission)
        .join(Form, FormSubmission.form_id == Form.id)
        .filter(FormSubmission.id == submission_id, Form.workspace_id == workspace_id)
        .first()
    )
    if not submission:
        raise HTTPException(status_code=404, detail="Form submission not found")

    if submission.status == FormSubmissionStatus.COMPLETED.value:
        raise HTTPException(status_code=400, detail="Form already submitted")

    submission.status = FormSubmissionStatus.COMPLETED.value
    submission.data = data.data
    submission.submitted_at = datetime.utcnow()
    db.commit()
    db.refresh(submission)
    logger.info(f"✅ Form submission {submission.id} completed")

    await on_form_submitted(db, request.app.state.automation_dispatcher, submission)
    db.refresh(submission)
    return submission
