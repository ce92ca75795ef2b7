import os
import tempfile

# Must be set before `database` is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "freight-ledger-test-logs"))

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
import models  # noqa: F401
from main import app
from models.customers import Customer
from utils.auth_utils import get_current_user

TEST_USER = {"email": "accounts@example.com", "sub": "test-user"}


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    app.dependency_overrides[get_current_user] = lambda: TEST_USER
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def customer(db_session):
    db_customer = Customer(name="Sharma Traders", address="12 MG Road", state="Karnataka", city="Bengaluru")
    db_session.add(db_customer)
    db_session.commit()
    db_session.refresh(db_customer)
    return db_customer
