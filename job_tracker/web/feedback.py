"""Feedback routes: signed-in users report bugs and suggest features."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from job_tracker.errors import TrackerError, ValidationError
from job_tracker.feedback import FEEDBACK_TYPES, FeedbackStore, validate_feedback

from .dependencies import get_current_user, get_db, page_context

logger = logging.getLogger("job_tracker.web.feedback")

router = APIRouter(prefix="/feedback")

THANK_YOU = "Thank you for your feedback! We appreciate your input and will review it soon."


def _feedback_page(request: Request, user, status_code: int = 200, **extra):
    context = page_context(
        request, user,
        feedback_types=FEEDBACK_TYPES,
        form_errors={},
        form_values={"type": "bug", "email": user.email},
    )
    context.update(extra)
    return request.app.state.templates.TemplateResponse("feedback/index.html", context, status_code=status_code)


@router.get("")
def feedback_form(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)
    return _feedback_page(request, user)


@router.post("")
async def submit_feedback(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    form = dict(await request.form())
    try:
        fields = validate_feedback(form)
        request.app.state.action_limiters.get(user.id).check()
        FeedbackStore(db).submit(
            fields,
            user_id=user.id,
            url=request.headers.get("referer", ""),
            user_agent=request.headers.get("user-agent", ""),
        )
    except TrackerError as err:
        return _feedback_page(
            request, user,
            status_code=err.status_code,
            form_errors=err.errors if isinstance(err, ValidationError) else {},
            form_values=form,
            flash_message=str(err) if not isinstance(err, ValidationError) else "Please fix the errors below.",
            flash_type="error",
        )

    return _feedback_page(request, user, flash_message=THANK_YOU, flash_type="success")
