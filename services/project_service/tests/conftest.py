import os
import tempfile

# Must be configured before the service modules create their engine
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.mkdtemp(), "project_service_test.db")
os.environ.pop("RABBITMQ_URL", None)

import pytest
from fastapi.testclient import TestClient

from auth import create_access_token
from crud import create_project, override_project_status
from database import SessionLocal, engine
from main import app
from models import Base, ProjectStatus

CUSTOMER_ID = 1
OTHER_CUSTOMER_ID = 2
MERCHANT_A_ID = 10
MERCHANT_B_ID = 11
ADMIN_ID = 99


def auth_headers(user_id: int, role: str) -> dict:
    token = create_access_token({"sub": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def customer_headers():
    return auth_headers(CUSTOMER_ID, "customer")


@pytest.fixture
def other_customer_headers():
    return auth_headers(OTHER_CUSTOMER_ID, "customer")


@pytest.fixture
def merchant_a_headers():
    return auth_headers(MERCHANT_A_ID, "merchant")


@pytest.fixture
def merchant_b_headers():
    return auth_headers(MERCHANT_B_ID, "merchant")


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_ID, "admin")


@pytest.fixture
def make_project(db):
    """Create a project for CUSTOMER_ID directly in the store, optionally in a given status."""
    def _make(title="Fence install", status=ProjectStatus.DRAFT, customer_id=CUSTOMER_ID):
        project = create_project(db, customer_id, title=title, description="Replace the garden fence", category_id="cat1")
        if status != ProjectStatus.DRAFT:
            project = override_project_status(db, project.id, status)
        return project
    return _make
