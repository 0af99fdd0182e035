"""Shared test infrastructure.

Provides:
- session_factory / db_session: in-memory SQLite shared across threads
- client: TestClient with the database dependencies pointed at the test engine
- staff_user / staff_client: an active staff account and a client carrying its cookie
- make_application / make_resident / make_payment / make_notification: row factories
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import havenhouse.models  # noqa: F401
from havenhouse.core.config import settings
from havenhouse.core.database import Base, get_db, get_session_factory
from havenhouse.core.security import create_access_token, get_password_hash
from havenhouse.main import app
from havenhouse.models import Application, Notification, Payment, Resident, StaffUser
from havenhouse.utils.dates import utcnow

STAFF_PASSWORD = "correct-horse-battery"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------

@pytest.fixture
def client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def staff_user(db_session):
    staff = StaffUser(
        email="manager@havenhouse.test",
        password_hash=get_password_hash(STAFF_PASSWORD),
        first_name="Dana",
        last_name="Reyes",
        role="admin",
    )
    db_session.add(staff)
    db_session.commit()
    db_session.refresh(staff)
    return staff


@pytest.fixture
def staff_client(client, staff_user):
    token = create_access_token({"sub": staff_user.id, "kind": "staff"})
    client.cookies.set(settings.staff_cookie_name, token)
    return client


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_application(db_session):
    counter = {"n": 0}

    def _factory(**overrides) -> Application:
        counter["n"] += 1
        data = {
            "first_name": "Jamie",
            "last_name": f"Applicant{counter['n']}",
            "phone": f"555-010-{counter['n']:04d}",
            "status": "pending",
        }
        data.update(overrides)
        application = Application(**data)
        db_session.add(application)
        db_session.commit()
        db_session.refresh(application)
        return application

    return _factory


@pytest.fixture
def make_resident(db_session):
    counter = {"n": 0}

    def _factory(**overrides) -> Resident:
        counter["n"] += 1
        data = {
            "first_name": "Alex",
            "last_name": f"Resident{counter['n']}",
            "phone": f"555-020-{counter['n']:04d}",
            "move_in_date": utcnow().date() - timedelta(days=60),
            "status": "active",
            "room_number": f"{counter['n']}A",
            "monthly_rent": Decimal("500.00"),
        }
        data.update(overrides)
        resident = Resident(**data)
        db_session.add(resident)
        db_session.commit()
        db_session.refresh(resident)
        return resident

    return _factory


@pytest.fixture
def make_payment(db_session):
    def _factory(resident: Resident, **overrides) -> Payment:
        data = {
            "resident_id": resident.id,
            "amount": Decimal("500.00"),
            "type": "rent",
            "due_date": utcnow().date() + timedelta(days=10),
            "status": "pending",
        }
        data.update(overrides)
        payment = Payment(**data)
        db_session.add(payment)
        db_session.commit()
        db_session.refresh(payment)
        return payment

    return _factory


@pytest.fixture
def make_notification(db_session):
    def _factory(**overrides) -> Notification:
        data = {
            "title": "Heads up",
            "message": "Something happened",
            "type": "general",
            "is_read": False,
        }
        data.update(overrides)
        notification = Notification(**data)
        db_session.add(notification)
        db_session.commit()
        db_session.refresh(notification)
        return notification

    return _factory
