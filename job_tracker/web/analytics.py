"""Analytics routes: aggregate stats for the signed-in user."""

from collections import Counter
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from job_tracker.errors import TrackerError
from job_tracker.jobs.stats import jobs_in_range, status_breakdown

from .dependencies import build_board, get_current_user, get_db, page_context

router = APIRouter(prefix="/analytics")

TREND_WEEKS = 8


def _weekly_trend(jobs, now: datetime) -> list[tuple[str, int]]:
    """Applications created per trailing week, oldest first."""
    rows = []
    for weeks_back in range(TREND_WEEKS - 1, -1, -1):
        end = now - timedelta(days=7 * weeks_back)
        start = end - timedelta(days=7)
        rows.append((start.strftime("%b %d"), len(jobs_in_range(jobs, start, end))))
    return rows


@router.get("")
def analytics_page(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    try:
        board = build_board(request, db, user)
    except TrackerError as err:
        return request.app.state.templates.TemplateResponse("analytics/index.html", page_context(
            request, user,
            stats=None,
            flash_message=str(err),
            flash_type="error",
        ), status_code=err.status_code)

    now = datetime.now().astimezone()
    stats = board.stats(now)
    industries = Counter(j.industry for j in board.jobs if j.industry).most_common(5)

    return request.app.state.templates.TemplateResponse("analytics/index.html", page_context(
        request, user,
        stats=stats,
        breakdown=status_breakdown(stats),
        trend=_weekly_trend(board.jobs, now),
        top_industries=industries,
        remote_count=sum(1 for j in board.jobs if j.is_remote),
    ))
