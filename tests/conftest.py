import os
import tempfile

# Point the app at a throwaway database before any app module is imported
_tmpdir = tempfile.mkdtemp(prefix="store-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_tmpdir, "test.db")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

import main
from database import Base, SessionLocal, engine
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def products(db):
    items = [
        Product(name="Widget", price=Decimal("9.99")),
        Product(name="Gadget", price=Decimal("5.50")),
    ]
    db.add_all(items)
    db.commit()
    for p in items:
        db.refresh(p)
    return items


def make_user(db, name="Ana", email="ana@example.com"):
    user = User(name=name, email=email, password_hash=get_password_hash(PASSWORD))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def other_user(db):
    return make_user(db, name="Beto", email="beto@example.com")


@pytest.fixture
def client():
    with TestClient(main.app) as c:
        yield c


def login(client, email="ana@example.com", password=PASSWORD):
    return client.post("/login", data={"email": email, "password": password}, follow_redirects=False)


@pytest.fixture
def logged_in(client, user):
    response = login(client)
    assert response.status_code == 303
    return client
