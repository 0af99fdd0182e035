from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional

from ..core.config import settings
from ..core.database import get_db
from ..core.security import decode_access_token
from ..models.resident import Resident
from ..models.staff import StaffUser
from ..services.auth_service import AuthService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/staff/auth", auto_error=False)


def _token_claims(token: Optional[str], kind: str) -> Optional[dict]:
    if not token:
        return None
    claims = decode_access_token(token)
    if not claims or claims.get("kind") != kind or not claims.get("sub"):
        return None
    return claims


def get_current_staff(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> StaffUser:
    """Staff member from the session cookie, or from a bearer token."""
    token = request.cookies.get(settings.staff_cookie_name) or bearer_token
    claims = _token_claims(token, "staff")
    staff = AuthService.get_staff(db, claims["sub"]) if claims else None
    if staff is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return staff


def get_current_resident(
    request: Request,
    db: Session = Depends(get_db)
) -> Resident:
    claims = _token_claims(request.cookies.get(settings.resident_cookie_name), "resident")
    resident = AuthService.get_active_resident(db, claims["sub"]) if claims else None
    if resident is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return resident
