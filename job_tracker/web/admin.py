"""Admin routes: the admin panel, team roster, feedback triage, and the admin JSON APIs."""

import io
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.orm import Session

from job_tracker.errors import PermissionDeniedError, TrackerError, ValidationError
from job_tracker.export import write_feedback_csv
from job_tracker.feedback import (
    FEEDBACK_PRIORITIES,
    FEEDBACK_STATUSES,
    SORT_OPTIONS,
    FeedbackQuery,
    FeedbackStore,
    check_bulk_status_allowed,
    filter_feedback,
)
from job_tracker.jobs.stats import compute_stats
from job_tracker.models import User
from job_tracker.storage.job_store import JobStore
from job_tracker.team import ADMIN, ROLE_DESCRIPTIONS, TEAM_ROLES, TeamManager

from .dependencies import client_ip, error_payload, get_current_user, get_db, page_context

logger = logging.getLogger("job_tracker.web.admin")

router = APIRouter()

TEAM_ACTIONS = ("add_member", "update_member", "remove_member", "get_members")


def _team(request: Request, db: Session) -> TeamManager:
    return TeamManager(db, request.app.state.admin_resolver)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _admin_page(request: Request, db: Session, user, status_code: int = 200, **extra):
    team = _team(request, db)
    users = db.query(User).order_by(User.created_at.desc()).all()
    store = JobStore(db)
    context = page_context(
        request, user,
        users=users,
        job_counts={},
        stats=None,
        roles={u.email: team.role_of(u.email) for u in users},
        members=team.list_members(),
        can_manage_team=team.can_manage(user.email),
        team_roles=TEAM_ROLES,
        role_descriptions=ROLE_DESCRIPTIONS,
    )
    try:
        context["job_counts"] = store.count_by_owner()
        context["stats"] = compute_stats(store.list_all(), datetime.now().astimezone())
    except TrackerError as err:
        context["flash_message"] = str(err)
        context["flash_type"] = "error"
    context.update(extra)
    return request.app.state.templates.TemplateResponse("admin/index.html", context, status_code=status_code)


def _admin_user(request: Request, db: Session):
    """(user, redirect): redirect is set when the caller is not a signed-in admin."""
    user = get_current_user(request, db)
    if not user:
        return None, RedirectResponse("/login", status_code=303)
    if not request.app.state.admin_resolver.is_admin(user):
        return None, RedirectResponse("/board", status_code=303)
    return user, None


@router.get("/admin")
def admin_panel(request: Request, db: Session = Depends(get_db)):
    user, redirect = _admin_user(request, db)
    if redirect:
        return redirect
    return _admin_page(request, db, user)


@router.post("/admin/team")
async def add_team_member(request: Request, db: Session = Depends(get_db)):
    user, redirect = _admin_user(request, db)
    if redirect:
        return redirect

    form = await request.form()
    try:
        request.app.state.action_limiters.get(user.id).check()
        member = _team(request, db).add_member(
            user.email,
            form.get("email", ""),
            role=form.get("role") or ADMIN,
            display_name=form.get("display_name", ""),
            department=form.get("department", ""),
            notes=form.get("notes", ""),
        )
    except TrackerError as err:
        return _admin_page(request, db, user, status_code=err.status_code,
                           flash_message=str(err), flash_type="error")

    return _admin_page(request, db, user, flash_message=f"Added {member.email} to the team.", flash_type="success")


@router.post("/admin/team/{member_id}/remove")
def remove_team_member(member_id: int, request: Request, db: Session = Depends(get_db)):
    user, redirect = _admin_user(request, db)
    if redirect:
        return redirect

    team = _team(request, db)
    member = next((m for m in team.list_members() if m.id == member_id), None)
    if member is None:
        return _admin_page(request, db, user, status_code=404,
                           flash_message="Team member not found", flash_type="error")
    email = member.email
    try:
        request.app.state.action_limiters.get(user.id).check()
        team.remove_member(user.email, email)
    except TrackerError as err:
        return _admin_page(request, db, user, status_code=err.status_code,
                           flash_message=str(err), flash_type="error")

    return _admin_page(request, db, user, flash_message=f"Removed {email} from the team.", flash_type="success")


@router.get("/admin/feedback")
def feedback_admin(request: Request, db: Session = Depends(get_db)):
    user, redirect = _admin_user(request, db)
    if redirect:
        return redirect

    query = FeedbackQuery.from_params(request.query_params)
    context = page_context(
        request, user,
        items=[],
        total_count=0,
        query=query,
        statuses=FEEDBACK_STATUSES,
        priorities=FEEDBACK_PRIORITIES,
        sort_options=SORT_OPTIONS,
        assignable=_assignable(request, db),
    )
    try:
        items = FeedbackStore(db).list_all()
    except TrackerError as err:
        context["flash_message"] = str(err)
        context["flash_type"] = "error"
    else:
        context["items"] = filter_feedback(items, query)
        context["total_count"] = len(items)
    return request.app.state.templates.TemplateResponse("admin/feedback.html", context)


def _assignable(request: Request, db: Session) -> list[str]:
    """Emails feedback can be assigned to: the allow-list plus active team members."""
    emails = set(request.app.state.admin_resolver.admin_emails)
    emails.update(m.email for m in _team(request, db).list_members() if m.is_active)
    return sorted(emails)


@router.post("/admin/feedback/{feedback_id}/status")
async def update_feedback_status(feedback_id: int, request: Request, db: Session = Depends(get_db)):
    user, redirect = _admin_user(request, db)
    if redirect:
        return redirect

    form = await request.form()
    status = form.get("status", "")
    try:
        if not _team(request, db).has_permission(user.email, "write:feedback"):
            raise PermissionDeniedError("Insufficient permissions to update feedback status")
        request.app.state.action_limiters.get(user.id).check()
        FeedbackStore(db).update_status(feedback_id, status)
    except TrackerError as err:
        logger.warning("Feedback %d status update by %s rejected: %s", feedback_id, user.email, err)
    return RedirectResponse("/admin/feedback", status_code=303)


@router.post("/admin/feedback/bulk")
async def bulk_feedback(request: Request, db: Session = Depends(get_db)):
    """Bulk triage: {"ids": [...], "action": "assign" | "status", "value": ...}."""
    user = get_current_user(request, db)
    if not user:
        return JSONResponse({"error": "Not logged in"}, status_code=401)
    if not request.app.state.admin_resolver.is_admin(user):
        return JSONResponse({"error": "Admin privileges required"}, status_code=403)

    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        return JSONResponse({"error": "Invalid request body"}, status_code=400)

    action = body.get("action")
    value = body.get("value")
    team = _team(request, db)
    store = FeedbackStore(db)
    try:
        ids = [int(i) for i in body.get("ids") or []]
    except (TypeError, ValueError):
        return JSONResponse({"error": "Invalid feedback ids"}, status_code=400)

    try:
        if not team.has_permission(user.email, "write:feedback"):
            raise PermissionDeniedError("Insufficient permissions for bulk feedback actions")
        if action == "assign":
            request.app.state.action_limiters.get(user.id).check()
            count = store.bulk_assign(ids, value or "", assigned_by=user.email)
        elif action == "status":
            check_bulk_status_allowed(team.role_of(user.email), len(ids), value or "")
            request.app.state.action_limiters.get(user.id).check()
            count = store.bulk_update_status(ids, value or "")
        else:
            raise ValidationError({"action": f"Unknown bulk action: {action}"})
    except TrackerError as err:
        return JSONResponse(error_payload(err), status_code=err.status_code)

    return JSONResponse({"success": True, "count": count, "timestamp": _timestamp()})


@router.get("/admin/feedback/export.csv")
def export_feedback(request: Request, db: Session = Depends(get_db)):
    user, redirect = _admin_user(request, db)
    if redirect:
        return redirect
    if not _team(request, db).has_permission(user.email, "export:data"):
        return RedirectResponse("/admin/feedback", status_code=303)

    try:
        items = filter_feedback(FeedbackStore(db).list_all(), FeedbackQuery.from_params(request.query_params))
    except TrackerError:
        return RedirectResponse("/admin/feedback", status_code=303)

    buffer = io.StringIO()
    count = write_feedback_csv(items, buffer)
    logger.info("%s exported %d feedback items", user.email, count)
    filename = f"feedback-export-{datetime.now().date().isoformat()}.csv"
    return Response(
        buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/api/team/manage")
async def manage_team(request: Request, db: Session = Depends(get_db)):
    """Team roster API. Rate limited per client IP; only super-admins may change the roster."""
    ip = client_ip(request)
    if not request.app.state.team_limiter.allow(ip):
        logger.warning("Team management rate limit exceeded for %s", ip)
        return JSONResponse({"error": "Rate limit exceeded"}, status_code=429)

    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}
    action = body.get("action")
    if not action:
        return JSONResponse({"error": "Action is required"}, status_code=400)
    if action not in TEAM_ACTIONS:
        return JSONResponse({"error": "Invalid action"}, status_code=400)

    user = get_current_user(request, db)
    if not user:
        return JSONResponse({"error": "Not logged in"}, status_code=401)
    logger.info("Team management action %s by %s from %s", action, user.email, ip)

    team = _team(request, db)
    try:
        if action == "get_members":
            if not team.has_permission(user.email, "read:team"):
                raise PermissionDeniedError("Insufficient permissions to view team members")
            return JSONResponse({
                "success": True,
                "members": [m.to_dict() for m in team.list_members()],
                "timestamp": _timestamp(),
            })

        email = body.get("email") or ""
        if action == "add_member":
            member = team.add_member(
                user.email,
                email,
                role=body.get("role") or ADMIN,
                display_name=body.get("displayName") or "",
                department=body.get("department") or "",
                notes=body.get("notes") or "",
            )
        elif action == "update_member":
            updates = {}
            for key, name in (("role", "role"), ("displayName", "display_name"), ("department", "department"),
                              ("notes", "notes"), ("isActive", "is_active")):
                if key in body:
                    updates[name] = body[key]
            member = team.update_member(user.email, email, updates)
        else:
            team.remove_member(user.email, email)
            return JSONResponse({"success": True, "timestamp": _timestamp()})
    except TrackerError as err:
        return JSONResponse(error_payload(err), status_code=err.status_code)

    return JSONResponse({"success": True, "member": member.to_dict(), "timestamp": _timestamp()})


@router.api_route("/api/team/manage", methods=["GET", "PUT", "DELETE"])
def manage_team_method_not_allowed():
    return JSONResponse({"error": "Method not allowed"}, status_code=405)


@router.post("/api/admin/verify")
async def verify_admin(request: Request):
    """Report whether an email is on the admin allow-list. Rate limited per client IP."""
    ip = client_ip(request)
    if not request.app.state.verify_limiter.allow(ip):
        logger.warning("Admin verification rate limit exceeded for %s", ip)
        return JSONResponse({"error": "Rate limit exceeded"}, status_code=429)

    try:
        body = await request.json()
    except ValueError:
        body = None
    email = body.get("email") if isinstance(body, dict) else None
    if not email or not isinstance(email, str):
        return JSONResponse({"error": "Invalid email provided"}, status_code=400)

    is_admin = request.app.state.admin_resolver.is_listed(email)
    if body.get("action") == "verify":
        logger.debug("Admin verification for %s from %s: %s", email.strip().lower(), ip, is_admin)

    return JSONResponse({
        "isAdmin": is_admin,
        "timestamp": _timestamp(),
    })


@router.api_route("/api/admin/verify", methods=["GET", "PUT", "DELETE"])
def verify_admin_method_not_allowed():
    return JSONResponse({"error": "Method not allowed"}, status_code=405)
