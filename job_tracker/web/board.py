"""Board routes: the kanban view, job CRUD, drag-and-drop moves and bulk actions."""

import io
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.orm import Session

from job_tracker.errors import TrackerError, ValidationError
from job_tracker.export import write_jobs_csv
from job_tracker.jobs.board import JobBoard, bulk_updates_from_action
from job_tracker.jobs.filters import JobQuery, collect_tags
from job_tracker.jobs.models import JOB_TYPES, PRIORITIES, STATUSES
from job_tracker.jobs.notifications import NotificationInbox, unread_count
from job_tracker.jobs.workflow import Toast

from .dependencies import build_board, error_payload, get_current_user, get_db, page_context

logger = logging.getLogger("job_tracker.web.board")

router = APIRouter(prefix="/board")


def _render_board(
    request: Request,
    user,
    board: JobBoard,
    toast=None,
    form_errors: dict | None = None,
    form_values=None,
    status_code: int = 200,
):
    now = datetime.now().astimezone()
    query = JobQuery.from_params(request.query_params)
    visible = board.filtered(query, now)
    columns = [(status.value, [j for j in visible if j.status == status]) for status in STATUSES]

    inbox = NotificationInbox.from_session(request.session.get("notifications"))
    notifications = inbox.apply(board.notifications(now))

    context = page_context(
        request, user,
        columns=columns,
        visible_count=len(visible),
        total_count=len(board.jobs),
        stats=board.stats(now),
        query=query,
        all_tags=collect_tags(board.jobs),
        priorities=PRIORITIES,
        job_types=JOB_TYPES,
        unread_notifications=unread_count(notifications),
        form_errors=form_errors or {},
        form_values=form_values or {},
    )
    if toast is not None:
        context["flash_message"] = toast.message
        context["flash_type"] = toast.kind
    return request.app.state.templates.TemplateResponse("board/index.html", context, status_code=status_code)


def _render_failure(request: Request, user, err: TrackerError, db: Session, form_values=None):
    """Re-render the board with the error, reloading from the store when possible."""
    try:
        board = build_board(request, db, user)
    except TrackerError:
        logger.exception("Could not reload board for user %d", user.id)
        return request.app.state.templates.TemplateResponse("board/index.html", page_context(
            request, user,
            columns=[(s.value, []) for s in STATUSES],
            visible_count=0,
            total_count=0,
            stats=None,
            query=JobQuery(),
            all_tags=[],
            priorities=PRIORITIES,
            job_types=JOB_TYPES,
            unread_notifications=0,
            form_errors={},
            form_values={},
            flash_message="Failed to load job applications. Please try again.",
            flash_type="error",
        ), status_code=err.status_code)

    form_errors = err.errors if isinstance(err, ValidationError) else None
    return _render_board(
        request, user, board,
        toast=Toast("error", str(err) if not form_errors else "Please fix the highlighted fields."),
        form_errors=form_errors,
        form_values=form_values,
        status_code=err.status_code,
    )


@router.get("")
def board_index(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    try:
        board = build_board(request, db, user)
    except TrackerError as err:
        return _render_failure(request, user, err, db)
    return _render_board(request, user, board)


@router.post("/jobs")
async def add_job(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    form = await request.form()
    try:
        board = build_board(request, db, user)
        _, toast = board.add(form)
    except TrackerError as err:
        return _render_failure(request, user, err, db, form_values=dict(form))
    return _render_board(request, user, board, toast=toast)


@router.get("/jobs/{job_id}/edit")
def edit_job_form(job_id: str, request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    try:
        job = build_board(request, db, user).get(job_id)
    except TrackerError as err:
        return _render_failure(request, user, err, db)

    return request.app.state.templates.TemplateResponse("board/edit.html", page_context(
        request, user,
        job=job,
        priorities=PRIORITIES,
        job_types=JOB_TYPES,
        form_errors={},
    ))


@router.post("/jobs/{job_id}")
async def update_job(job_id: str, request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    form = await request.form()
    try:
        board = build_board(request, db, user)
        job = board.get(job_id)
        _, toast = board.update(job_id, form)
    except ValidationError as err:
        return request.app.state.templates.TemplateResponse("board/edit.html", page_context(
            request, user,
            job=job,
            priorities=PRIORITIES,
            job_types=JOB_TYPES,
            form_errors=err.errors,
            flash_message="Please fix the highlighted fields.",
            flash_type="error",
        ), status_code=err.status_code)
    except TrackerError as err:
        return _render_failure(request, user, err, db)
    return _render_board(request, user, board, toast=toast)


@router.post("/jobs/{job_id}/delete")
def delete_job(job_id: str, request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    try:
        board = build_board(request, db, user)
        toast = board.delete(job_id)
    except TrackerError as err:
        return _render_failure(request, user, err, db)
    return _render_board(request, user, board, toast=toast)


@router.post("/jobs/{job_id}/move")
async def move_job(job_id: str, request: Request, db: Session = Depends(get_db)):
    """JSON endpoint used by drag-and-drop on the board."""
    user = get_current_user(request, db)
    if not user:
        return JSONResponse({"error": "Not authenticated"}, status_code=401)

    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    status = body.get("status") if isinstance(body, dict) else None
    if not status:
        return JSONResponse({"error": "status is required"}, status_code=400)

    try:
        board = build_board(request, db, user)
        result = board.move(job_id, status)
    except ValueError:
        return JSONResponse({"error": f"Unknown status: {status}"}, status_code=400)
    except TrackerError as err:
        return JSONResponse(error_payload(err), status_code=err.status_code)
    return JSONResponse(result.to_dict())


@router.post("/bulk")
async def bulk_action(request: Request, db: Session = Depends(get_db)):
    """Apply one action to the selected jobs: {"job_ids": [...], "action": ..., "value": ...}."""
    user = get_current_user(request, db)
    if not user:
        return JSONResponse({"error": "Not authenticated"}, status_code=401)

    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
    if not isinstance(body, dict):
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    job_ids = body.get("job_ids") or []
    action = body.get("action", "")
    value = body.get("value")
    if not isinstance(job_ids, list):
        return JSONResponse({"error": "job_ids must be a list"}, status_code=400)

    try:
        board = build_board(request, db, user)
        if action == "tag":
            toast = board.bulk_add_tag(job_ids, value or "")
        else:
            toast = board.bulk_update(job_ids, bulk_updates_from_action(action, value))
    except TrackerError as err:
        return JSONResponse(error_payload(err), status_code=err.status_code)
    return JSONResponse({"toast": toast.to_dict(), "updated": len(job_ids)})


@router.get("/export.csv")
def export_csv(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    try:
        board = build_board(request, db, user)
    except TrackerError as err:
        return _render_failure(request, user, err, db)

    jobs = board.filtered(JobQuery.from_params(request.query_params), datetime.now().astimezone())
    buffer = io.StringIO()
    count = write_jobs_csv(jobs, buffer)
    logger.info("User %d exported %d jobs", user.id, count)
    return Response(
        buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="job-applications.csv"'},
    )
