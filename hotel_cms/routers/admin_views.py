from fastapi import APIRouter, Depends, Request, Form
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..config import settings
from ..db import get_db
from ..limiter import limiter
from ..security import end_session, issue_session, session_admin
from ..services import categories, gallery
from ..services.admin import authenticate
from ..templating import templates

router = APIRouter(prefix="/admin", tags=["admin-pages"])


@router.get("/login", response_class=HTMLResponse)
def admin_login_form(request: Request):
    return templates.TemplateResponse(request, "admin/login.html", {"error": request.query_params.get("error")})


@router.post("/login")
@limiter.limit(settings.RATE_LIMIT_AUTH)
def admin_login(request: Request, email: str = Form(...), password: str = Form(...), db: Session = Depends(get_db)):
    admin = authenticate(db, email, password)
    if not admin:
        return templates.TemplateResponse(
            request, "admin/login.html", {"error": "Invalid email or password", "email": email}, status_code=400
        )
    redirect = RedirectResponse(url="/admin", status_code=303)
    issue_session(redirect, admin)
    return redirect


@router.post("/logout")
def admin_logout():
    redirect = RedirectResponse(url="/admin/login", status_code=303)
    end_session(redirect)
    return redirect


@router.get("", response_class=HTMLResponse)
def admin_dashboard(request: Request, db: Session = Depends(get_db)):
    admin = session_admin(request, db)
    if not admin:
        return RedirectResponse(url="/admin/login", status_code=303)
    rooms = categories.list_categories(db)
    items = gallery.list_items(db)
    return templates.TemplateResponse(
        request,
        "admin/dashboard.html",
        {
            "admin": admin,
            "rooms": rooms,
            "gallery_items": items,
            "max_price_tiers": settings.MAX_PRICE_TIERS,
        },
    )
