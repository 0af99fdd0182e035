from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from ..core.config import settings
from ..core.database import get_db
from ..models.staff import StaffUser
from ..schemas.auth import (
    LogoutResponse, PortalLogin, StaffCreate, StaffInfo, StaffLogin, StaffLoginResponse, StaffResponse
)
from ..schemas.resident import ResidentResponse
from ..services.auth_service import AuthService
from ..utils.dependencies import get_current_staff

router = APIRouter(tags=["Authentication"])


def _set_session_cookie(response: Response, name: str, token: str) -> None:
    response.set_cookie(
        key=name,
        value=token,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="strict",
        max_age=settings.access_token_expire_minutes * 60,
    )


def _clear_session_cookie(response: Response, name: str) -> None:
    response.delete_cookie(key=name, httponly=True, secure=settings.secure_cookies, samesite="strict")


@router.post("/staff/auth", response_model=StaffLoginResponse)
def staff_login(staff_login: StaffLogin, response: Response, db: Session = Depends(get_db)):
    """Login staff member and start a 24h session"""
    result = AuthService.login_staff(db, staff_login)
    staff = result["user"]
    _set_session_cookie(response, settings.staff_cookie_name, result["token"])
    return StaffLoginResponse(
        token=result["token"],
        user=StaffInfo(
            id=staff.id,
            email=staff.email,
            first_name=staff.first_name,
            last_name=staff.last_name,
            role=staff.role
        )
    )


@router.delete("/staff/auth", response_model=LogoutResponse)
def staff_logout(response: Response):
    """Clear the staff session cookie"""
    _clear_session_cookie(response, settings.staff_cookie_name)
    return LogoutResponse()


@router.post("/staff/users", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
def create_staff(
    staff: StaffCreate,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Create another staff account"""
    return AuthService.create_staff(db, staff)


@router.post("/portal/login", response_model=ResidentResponse)
def resident_login(portal_login: PortalLogin, response: Response, db: Session = Depends(get_db)):
    """Resident portal sign-in by phone number"""
    result = AuthService.login_resident(db, portal_login.phone)
    _set_session_cookie(response, settings.resident_cookie_name, result["token"])
    return result["resident"]


@router.delete("/portal/login", response_model=LogoutResponse)
def resident_logout(response: Response):
    """Clear the resident portal cookie"""
    _clear_session_cookie(response, settings.resident_cookie_name)
    return LogoutResponse()
