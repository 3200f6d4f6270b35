from typing import Optional
from fastapi import APIRouter, Request, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..services import categories, gallery
from ..templating import templates

router = APIRouter(tags=["public"])

GALLERY_LABELS = ["Exterior", "Rooms", "Dining", "Amenities"]


@router.get("/", response_class=HTMLResponse)
@router.get("/rooms", response_class=HTMLResponse)
def rooms_page(request: Request, db: Session = Depends(get_db)):
    rooms = categories.list_categories(db)
    response = templates.TemplateResponse(request, "rooms.html", {"rooms": rooms})
    response.headers["Cache-Control"] = "no-store"
    return response


@router.get("/gallery", response_class=HTMLResponse)
def gallery_page(request: Request, category: Optional[str] = None, db: Session = Depends(get_db)):
    items = gallery.list_items(db, label=category)
    response = templates.TemplateResponse(
        request, "gallery.html", {"items": items, "labels": GALLERY_LABELS, "active_label": category}
    )
    response.headers["Cache-Control"] = "no-store"
    return response
