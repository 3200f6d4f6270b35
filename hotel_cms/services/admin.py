import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models import Admin
from ..security import hash_password, verify_password

logger = logging.getLogger(__name__)


def ensure_default_admin(db: Session) -> Admin:
    """Create the single admin row from ADMIN_EMAIL / ADMIN_PASSWORD if none exists."""
    admin = db.query(Admin).first()
    if admin:
        return admin
    admin = Admin(
        email=settings.ADMIN_EMAIL.strip().lower(),
        hashed_password=hash_password(settings.ADMIN_PASSWORD),
        singleton=1,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Default admin %s created.", admin.email)
    return admin


def authenticate(db: Session, email: str, password: str) -> Optional[Admin]:
    admin = db.query(Admin).filter(Admin.email == email.strip().lower()).first()
    if not admin or not verify_password(password, admin.hashed_password):
        logger.warning("Failed admin login for %s", email)
        return None
    return admin
