"""Settings routes: display name and salary currency."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from job_tracker.utils.currency import get_country
from job_tracker.utils.sanitize import sanitize_text

from .dependencies import get_current_user, get_db, page_context

router = APIRouter(prefix="/settings")

MAX_NAME_LENGTH = 100


@router.get("")
def settings_page(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    return request.app.state.templates.TemplateResponse("settings/index.html", page_context(request, user))


@router.post("")
async def update_settings(request: Request, db: Session = Depends(get_db)):
    user = get_current_user(request, db)
    if not user:
        return RedirectResponse("/login", status_code=303)

    form = await request.form()
    name = sanitize_text(form.get("name", ""))[:MAX_NAME_LENGTH]
    country = get_country(form.get("country_code", ""))
    if country is None:
        return request.app.state.templates.TemplateResponse("settings/index.html", page_context(
            request, user,
            flash_message="Please choose a supported country.",
            flash_type="error",
        ), status_code=400)

    user.name = name
    user.country_code = country.code
    db.commit()

    return request.app.state.templates.TemplateResponse("settings/index.html", page_context(
        request, user,
        flash_message="Settings saved.",
        flash_type="success",
    ))
