"""FastAPI application factory."""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from jinja2 import Environment, FileSystemLoader
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import HTMLResponse

from job_tracker.admin import AdminResolver
from job_tracker.calendar_sync import GoogleCalendarClient
from job_tracker.config import AppConfig, load_config_or_default
from job_tracker.jobs.models import STATUSES
from job_tracker.jobs.rate_limit import ActionLimiterRegistry, FixedWindowLimiter
from job_tracker.models import init_db
from job_tracker.utils.currency import COUNTRIES, format_salary

from .admin import router as admin_router
from .analytics import router as analytics_router
from .auth import router as auth_router
from .board import router as board_router
from .calendar import router as calendar_router
from .dependencies import get_current_user, get_db
from .feedback import router as feedback_router
from .notifications import router as notifications_router
from .settings import router as settings_router

logger = logging.getLogger("job_tracker.web")

WEB_DIR = Path(__file__).parent
TEMPLATES_DIR = WEB_DIR / "templates"
STATIC_DIR = WEB_DIR / "static"


def _create_jinja_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=True,
    )
    env.filters["salary"] = format_salary
    env.globals["statuses"] = [s.value for s in STATUSES]
    env.globals["countries"] = COUNTRIES
    return env


class _Templates:
    """Thin wrapper that mimics Jinja2Templates from starlette."""

    def __init__(self):
        self.env = _create_jinja_env()

    def TemplateResponse(self, name: str, context: dict, status_code: int = 200) -> HTMLResponse:
        context.setdefault("user", None)
        context.setdefault("is_admin", False)
        context.setdefault("now", datetime.now())
        html = self.env.get_template(name).render(**context)
        return HTMLResponse(html, status_code=status_code)


def _build_calendar(config: AppConfig) -> GoogleCalendarClient | None:
    if not config.calendar.enabled:
        return None
    if not config.calendar.access_token:
        logger.warning("Calendar sync enabled without an access token - disabled")
        return None
    return GoogleCalendarClient(
        config.calendar.access_token,
        calendar_id=config.calendar.calendar_id,
        time_zone=config.calendar.time_zone,
        timeout=config.calendar.timeout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready")
    yield


def create_app(config: AppConfig | None = None) -> FastAPI:
    config = config or load_config_or_default(os.environ.get("JOB_TRACKER_CONFIG", "config.yaml"))

    app = FastAPI(title="Job Tracker", lifespan=lifespan)

    # Session middleware for cookie-based auth
    app.add_middleware(SessionMiddleware, secret_key=config.auth.session_secret)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    app.state.config = config
    app.state.templates = _Templates()
    app.state.action_limiters = ActionLimiterRegistry(config.tracker.action_interval_ms)
    app.state.admin_resolver = AdminResolver(
        config.auth.admin_emails, ttl_seconds=config.auth.admin_cache_seconds
    )
    app.state.verify_limiter = FixedWindowLimiter(config.rate_limits.admin_verify_per_minute, 60)
    app.state.team_limiter = FixedWindowLimiter(config.rate_limits.team_manage_per_minute, 60)
    app.state.calendar = _build_calendar(config)

    app.include_router(auth_router)
    app.include_router(board_router)
    app.include_router(notifications_router)
    app.include_router(analytics_router)
    app.include_router(calendar_router)
    app.include_router(settings_router)
    app.include_router(feedback_router)
    app.include_router(admin_router)

    # Landing page
    @app.get("/")
    def landing(request: Request, db: Session = Depends(get_db)):
        user = get_current_user(request, db)
        if user:
            return RedirectResponse("/board", status_code=303)
        return app.state.templates.TemplateResponse("landing.html", {"request": request})

    return app
