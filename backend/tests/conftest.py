"""
Pytest configuration for the backend test suite.

Tests run against an in-memory SQLite database (static pool, one shared
connection). The schema is created and dropped around every test, and object
storage is replaced with an in-memory fake.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["FRONTEND_URL"] = "http://crm.test"

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from youclinic import models  # noqa: E402,F401
from youclinic.core.database import Base, SessionLocal, engine  # noqa: E402
from youclinic.core.security import create_access_token, hash_password  # noqa: E402
from youclinic.main import app  # noqa: E402
from youclinic.models import Lead, LeadStatus, User, UserRole  # noqa: E402
from youclinic.services.storage import get_storage  # noqa: E402
from youclinic.utils import dates  # noqa: E402


PASSWORD = "secret123"


class FakeStorage:
    """In-memory stand-in for the MinIO-backed FileStorage."""

    def __init__(self):
        self.deleted = []
        self.fail_on = set()

    def upload_url(self, object_key):
        return f"http://storage.test/upload/{object_key}"

    def download_url(self, object_key):
        return f"http://storage.test/download/{object_key}"

    def delete_many(self, object_keys):
        failed = [k for k in object_keys if k in self.fail_on]
        self.deleted.extend(k for k in object_keys if k not in self.fail_on)
        return failed


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage():
    fake = FakeStorage()
    app.dependency_overrides[get_storage] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture
def client(storage):
    return TestClient(app)


@pytest.fixture
def clinic_day(monkeypatch):
    """Freeze the clinic clock at a given date (defaults to 2024-01-01 10:00)."""
    def _freeze(year=2024, month=1, day=1, hour=10):
        frozen = datetime(year, month, day, hour, 0, tzinfo=dates.clinic_tz())
        monkeypatch.setattr(dates, "clinic_now", lambda: frozen)
        return frozen
    return _freeze


# =============================================================================
# Users
# =============================================================================


def make_user(db, email, role=UserRole.SALESPERSON.value, name=None, phone=None):
    user = User(
        email=email,
        name=name,
        role=role,
        phone=phone,
        password_hash=hash_password(PASSWORD),
    )
    db.add(user)
    db.commit()
    return user


def auth_headers(user):
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(db):
    return make_user(db, "admin@youclinic.com", role=UserRole.ADMIN.value, name="Admin")


@pytest.fixture
def alice(db):
    return make_user(db, "alice@youclinic.com", name="Alice", phone="+90 555 000 0001")


@pytest.fixture
def bob(db):
    return make_user(db, "bob@youclinic.com", name="Bob")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def alice_headers(alice):
    return auth_headers(alice)


@pytest.fixture
def bob_headers(bob):
    return auth_headers(bob)


# =============================================================================
# Leads
# =============================================================================


def make_lead(db, owner, phone, first_name="Test", last_name="Patient", status=LeadStatus.NEW, **fields):
    lead = Lead(
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        status=status,
        assigned_to=owner.id if owner is not None else None,
        sales_person=owner.display_name if owner is not None else None,
        **fields,
    )
    db.add(lead)
    db.commit()
    return lead
