import logging
import os

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import settings
from .db import SessionLocal, create_schema
from .errors import register_exception_handlers
from .limiter import limiter
from .routers import public_api, public_views, auth_api, admin_views
from .routers import admin_rooms, admin_categories, admin_gallery, upload
from .services.admin import ensure_default_admin

# --- Logging configuration ---
_level = logging.DEBUG if getattr(settings, "DEBUG", False) else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# Align uvicorn loggers with our level (useful under Docker Compose)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(_level)
logger = logging.getLogger("hotel_cms.startup")
logger.info("Starting %s (DEBUG=%s, storage=%s)", settings.APP_NAME, settings.DEBUG, settings.STORAGE_BACKEND)

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        f"{settings.APP_NAME}: room categories, pricing tiers and gallery.\n\n"
        "Public endpoints live under /api; admin endpoints under /api/admin "
        "require an admin session cookie from POST /api/auth."
    ),
)


@app.on_event("startup")
def startup_event():
    """Runs startup tasks: create missing tables and ensure the admin row exists."""
    logger.info("Running startup tasks...")
    create_schema()
    db = SessionLocal()
    try:
        ensure_default_admin(db)
    finally:
        db.close()
    logger.info("Startup tasks complete.")


register_exception_handlers(app)

# Add the limiter to the app state
app.state.limiter = limiter
# Add the exception handler for rate limit exceeded errors
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(public_views.router)
app.include_router(public_api.router)
app.include_router(auth_api.router)
app.include_router(admin_views.router)
app.include_router(admin_rooms.router)
app.include_router(admin_categories.router)
app.include_router(admin_gallery.router)
app.include_router(upload.router)

# Static files; the local storage backend writes under static/uploads
app.mount(
    "/static",
    StaticFiles(directory=os.path.join(os.path.dirname(__file__), "static"), check_dir=False),
    name="static",
)


@app.get("/healthz")
@limiter.exempt
def healthz():
    return {"status": "ok"}
