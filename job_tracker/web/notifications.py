"""Notification routes. Read/dismissed state lives in the session cookie.

Only ids of currently derived notifications are kept, so the cookie stays
bounded by the live notification list.
"""

from collections.abc import Callable
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from job_tracker.errors import TrackerError
from job_tracker.jobs.models import Notification
from job_tracker.jobs.notifications import NotificationInbox, unread_count

from .dependencies import build_board, get_current_user, get_db, page_context

router = APIRouter(prefix="/notifications")

SESSION_KEY = "notifications"


def _inbox(request: Request) -> NotificationInbox:
    return NotificationInbox.from_session(request.session.get(SESSION_KEY))


def _save(request: Request, inbox: NotificationInbox) -> None:
    request.session[SESSION_KEY] = inbox.to_session()


def _update_inbox(
    request: Request,
    db: Session,
    change: Callable[[NotificationInbox, list[Notification]], None],
):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    try:
        board = build_board(request, db, user)
    except TrackerError:
        return RedirectResponse("/notifications", status_code=303)

    notifications = board.notifications(datetime.now().astimezone())
    inbox = _inbox(request)
    change(inbox, notifications)
    inbox.retain(n.id for n in notifications)
    _save(request, inbox)
    return RedirectResponse("/notifications", status_code=303)


@router.get("")
def notifications_page(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    try:
        board = build_board(request, db, user)
    except TrackerError as err:
        return request.app.state.templates.TemplateResponse("notifications/index.html", page_context(
            request, user,
            notifications=[],
            unread=0,
            flash_message=str(err),
            flash_type="error",
        ), status_code=err.status_code)

    notifications = _inbox(request).apply(board.notifications(datetime.now().astimezone()))
    return request.app.state.templates.TemplateResponse("notifications/index.html", page_context(
        request, user,
        notifications=notifications,
        unread=unread_count(notifications),
    ))


@router.post("/{notification_id}/read")
def mark_read(notification_id: str, request: Request, db: Session = Depends(get_db)):
    return _update_inbox(request, db, lambda inbox, _: inbox.mark_read(notification_id))


@router.post("/read-all")
def mark_all_read(request: Request, db: Session = Depends(get_db)):
    return _update_inbox(request, db, lambda inbox, live: inbox.mark_all_read(live))


@router.post("/{notification_id}/delete")
def delete_notification(notification_id: str, request: Request, db: Session = Depends(get_db)):
    return _update_inbox(request, db, lambda inbox, _: inbox.delete(notification_id))
