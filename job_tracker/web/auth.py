"""Authentication routes: signup, login, logout."""

import logging
from datetime import datetime, timezone

import bcrypt
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from job_tracker.models import User
from job_tracker.utils.sanitize import is_valid_email, sanitize_email, sanitize_text, validate_password

from .dependencies import get_db

logger = logging.getLogger("job_tracker.web.auth")

router = APIRouter()


def _hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def _verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode(), hashed.encode())


def _auth_page(request: Request, name: str, error: str | None = None, status_code: int = 200):
    return request.app.state.templates.TemplateResponse(
        name, {"request": request, "error": error}, status_code=status_code
    )


@router.get("/signup")
def signup_form(request: Request):
    return _auth_page(request, "auth/signup.html")


@router.post("/signup")
async def signup(request: Request, db: Session = Depends(get_db)):
    form = await request.form()

    name = sanitize_text(form.get("name", ""))
    email = sanitize_email(form.get("email", ""))
    password = form.get("password", "")
    confirm = form.get("confirm_password", "")

    if not email or not password:
        return _auth_page(request, "auth/signup.html", "Email and password are required.", 400)
    if not is_valid_email(email):
        return _auth_page(request, "auth/signup.html", "Please enter a valid email address.", 400)
    if password != confirm:
        return _auth_page(request, "auth/signup.html", "Passwords do not match.", 400)
    password_errors = validate_password(password, email=email, name=name)
    if password_errors:
        return _auth_page(request, "auth/signup.html", " ".join(password_errors), 400)

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        return _auth_page(request, "auth/signup.html", "An account with this email already exists.", 400)

    user = User(
        name=name,
        email=email,
        password_hash=_hash_password(password),
        country_code=request.app.state.config.tracker.default_country,
    )
    db.add(user)
    db.commit()
    logger.info("New account %s (id=%d)", email, user.id)

    request.session["user_id"] = user.id
    return RedirectResponse("/board", status_code=303)


@router.get("/login")
def login_form(request: Request):
    return _auth_page(request, "auth/login.html")


@router.post("/login")
async def login(request: Request, db: Session = Depends(get_db)):
    form = await request.form()

    email = sanitize_email(form.get("email", ""))
    password = form.get("password", "")

    user = db.query(User).filter(User.email == email).first()
    if not user or not user.is_active or not _verify_password(password, user.password_hash):
        return _auth_page(request, "auth/login.html", "Invalid email or password.", 400)

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()

    request.session["user_id"] = user.id
    return RedirectResponse("/board", status_code=303)


@router.get("/logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/", status_code=303)
