from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..schemas.application import ContactRequest, ContactResponse
from ..services.application_service import ApplicationService

router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def submit_application(request: ContactRequest, db: Session = Depends(get_db)):
    """Public housing application form"""
    application = ApplicationService.submit_application(db, request)
    return ContactResponse(
        message="Application submitted successfully! We will contact you within 24 hours.",
        application_id=application.id
    )


@router.get("", include_in_schema=False)
def contact_get_not_allowed():
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={"detail": "Method not allowed"},
        headers={"Allow": "POST"}
    )
