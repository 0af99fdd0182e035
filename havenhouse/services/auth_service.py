import logging

from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from ..models.staff import StaffUser
from ..models.resident import Resident
from ..schemas.auth import StaffCreate, StaffLogin
from ..core.security import get_password_hash, verify_password, create_access_token
from ..utils.dates import utcnow
from .resident_service import ResidentService
from typing import Optional

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:

    @staticmethod
    def create_staff(db: Session, staff: StaffCreate) -> StaffUser:
        email = staff.email.strip().lower()
        existing_staff = db.query(StaffUser).filter(StaffUser.email == email).first()
        if existing_staff:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        db_staff = StaffUser(
            email=email,
            password_hash=get_password_hash(staff.password),
            first_name=staff.first_name,
            last_name=staff.last_name,
            role=staff.role
        )
        db.add(db_staff)
        db.commit()
        db.refresh(db_staff)
        return db_staff

    @staticmethod
    def authenticate_staff(db: Session, email: str, password: str) -> Optional[StaffUser]:
        staff = db.query(StaffUser).filter(
            StaffUser.email == email.strip().lower(),
            StaffUser.is_active == True
        ).first()
        if not staff:
            return None
        if not verify_password(password, staff.password_hash):
            return None
        return staff

    @staticmethod
    def login_staff(db: Session, staff_login: StaffLogin):
        if not staff_login.email or not staff_login.password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email and password are required"
            )

        staff = AuthService.authenticate_staff(db, staff_login.email, staff_login.password)
        if not staff:
            # Same answer for unknown users and wrong passwords
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=INVALID_CREDENTIALS,
            )

        staff.last_login = utcnow()
        db.commit()
        db.refresh(staff)
        logger.info("Staff %s signed in", staff.id)

        token = create_access_token(data={
            "sub": staff.id,
            "kind": "staff",
            "staffId": staff.id,
            "email": staff.email,
            "role": staff.role,
            "firstName": staff.first_name,
            "lastName": staff.last_name,
        })
        return {"token": token, "user": staff}

    @staticmethod
    def get_staff(db: Session, staff_id: str) -> Optional[StaffUser]:
        return db.query(StaffUser).filter(StaffUser.id == staff_id, StaffUser.is_active == True).first()

    @staticmethod
    def login_resident(db: Session, phone: str):
        resident = ResidentService.get_active_by_phone(db, phone)
        if not resident:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Phone number not found or account inactive. Please contact staff."
            )
        token = create_access_token(data={"sub": resident.id, "kind": "resident"})
        return {"token": token, "resident": resident}

    @staticmethod
    def get_active_resident(db: Session, resident_id: str) -> Optional[Resident]:
        return db.query(Resident).filter(Resident.id == resident_id, Resident.status == "active").first()

    @staticmethod
    def ensure_bootstrap_admin(db: Session, email: str, password: str) -> Optional[StaffUser]:
        """Create the first admin account if no staff exist yet."""
        if db.query(StaffUser).first():
            return None
        staff = AuthService.create_staff(db, StaffCreate(
            email=email,
            password=password,
            first_name="Admin",
            last_name="User",
            role="admin"
        ))
        logger.info("Bootstrap admin %s created", staff.email)
        return staff
