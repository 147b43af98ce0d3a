"""Calendar route: a month of application, interview and follow-up dates."""

from datetime import date

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from job_tracker.calendar_view import calendar_events, events_by_day, month_grid, shift_month
from job_tracker.errors import TrackerError

from .dependencies import build_board, get_current_user, get_db, page_context

router = APIRouter(prefix="/calendar")


def _month_from_params(params) -> tuple[int, int]:
    today = date.today()
    try:
        year = int(params.get("year", today.year))
        month = int(params.get("month", today.month))
    except (TypeError, ValueError):
        return today.year, today.month
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        return today.year, today.month
    return year, month


@router.get("")
def calendar_page(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    year, month = _month_from_params(request.query_params)
    context = page_context(
        request, user,
        year=year,
        month=month,
        month_label=date(year, month, 1).strftime("%B %Y"),
        weeks=month_grid(year, month),
        prev_month=shift_month(year, month, -1),
        next_month=shift_month(year, month, 1),
        today=date.today(),
        events={},
    )

    try:
        board = build_board(request, db, user)
    except TrackerError as err:
        context.update(flash_message=str(err), flash_type="error")
        return request.app.state.templates.TemplateResponse("calendar/index.html", context, status_code=err.status_code)

    context["events"] = events_by_day(calendar_events(board.jobs))
    return request.app.state.templates.TemplateResponse("calendar/index.html", context)
