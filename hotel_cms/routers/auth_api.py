from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import Unauthorized
from ..limiter import limiter
from ..models import Admin
from ..schemas import AdminOut, ApiResponse, LoginIn
from ..security import end_session, issue_session, require_admin
from ..services.admin import authenticate

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("", response_model=ApiResponse[AdminOut])
@limiter.limit(settings.RATE_LIMIT_AUTH)
def api_login(request: Request, payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    admin = authenticate(db, payload.email, payload.password)
    if not admin:
        raise Unauthorized("Invalid email or password")
    issue_session(response, admin)
    return ApiResponse(data=AdminOut.model_validate(admin), message="Logged in")


@router.get("", response_model=ApiResponse[AdminOut])
def api_me(admin: Admin = Depends(require_admin)):
    return ApiResponse(data=AdminOut.model_validate(admin))


@router.delete("", response_model=ApiResponse[None])
def api_logout(response: Response):
    end_session(response)
    return ApiResponse(message="Logged out")
