import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from .core.config import settings
from .core.database import SessionLocal, init_db
from .routers import analytics, applications, auth, contact, incidents, notifications, payments, portal, residents
from .utils.route_guard import RouteGuardMiddleware

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("havenhouse")

# Initialize FastAPI app
app = FastAPI(
    title="Haven House API",
    description="Applications, residents, payments and analytics for a sober-living home",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RouteGuardMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"{location}: {errors[0].get('msg')}" if location else errors[0].get("msg", message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error. Please try again later."}
    )


# Include routers
app.include_router(contact.router, prefix="/api/v1")
app.include_router(auth.router, prefix="/api/v1")
app.include_router(applications.router, prefix="/api/v1")
app.include_router(residents.router, prefix="/api/v1")
app.include_router(payments.router, prefix="/api/v1")
app.include_router(incidents.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")
app.include_router(portal.router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"message": "Haven House API is running"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# Startup event to create tables and the first staff account
@app.on_event("startup")
def startup_event():
    """Create tables and the bootstrap admin if configured"""
    from .services.auth_service import AuthService

    init_db()
    if not (settings.bootstrap_admin_email and settings.bootstrap_admin_password):
        return

    db = SessionLocal()
    try:
        AuthService.ensure_bootstrap_admin(db, settings.bootstrap_admin_email, settings.bootstrap_admin_password)
    except SQLAlchemyError:
        logger.exception("Error creating bootstrap admin")
    finally:
        db.close()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
