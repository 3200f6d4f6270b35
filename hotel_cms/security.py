from typing import Optional
from passlib.context import CryptContext
from itsdangerous import URLSafeTimedSerializer, BadSignature
from fastapi import Request, Response, Depends
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .errors import Unauthorized
from .models import Admin

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
serializer = URLSafeTimedSerializer(settings.SECRET_KEY, salt="hotel-admin-session")

SESSION_MAX_AGE = settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def issue_session(response: Response, admin: Admin) -> None:
    # The email rides along so a re-seeded admin row invalidates old cookies
    token = serializer.dumps({"aid": admin.id, "em": admin.email})
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.ENVIRONMENT == "production",
        path="/",
        max_age=SESSION_MAX_AGE,
    )


def end_session(response: Response) -> None:
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")


def session_admin(request: Request, db: Session) -> Optional[Admin]:
    """Admin behind the request's session cookie, or None for a missing, forged, expired or stale one."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    try:
        # Expiry is checked here too, not only by the browser
        data = serializer.loads(token, max_age=SESSION_MAX_AGE)
        admin = db.get(Admin, int(data["aid"]))
    except (BadSignature, KeyError, ValueError, TypeError):
        return None
    if admin is None or admin.email != data.get("em"):
        return None
    return admin


def require_admin(request: Request, db: Session = Depends(get_db)) -> Admin:
    """Dependency guarding every admin operation; fails with 401 before any body handling."""
    admin = session_admin(request, db)
    if admin is None:
        raise Unauthorized()
    return admin
