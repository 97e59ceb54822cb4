import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from org_service.core.config import settings
from org_service.database.base import Base, enable_sqlite_write_locking, get_db
from org_service.database.init_database import init_db
from org_service.main import app
from org_service.models.auth import User
from org_service.services.catalog import HierarchyCatalog
from org_service.services.coordinator import MembershipCoordinator
from org_service.services.resolver import RoleResolver

@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every connection in a test"""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    enable_sqlite_write_locking(test_engine)
    init_db(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()

@pytest.fixture
def db(engine):
    """Database session"""
    session = sessionmaker(bind=engine, autoflush=False, future=True)()
    yield session
    session.close()

@pytest.fixture
def make_user(db):
    """Insert a user the way the identity subsystem would"""
    def _make_user(email: str, name: str = None) -> User:
        user = User(email=email.lower(), name=name)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user

@pytest.fixture
def catalog(db):
    return HierarchyCatalog(db)

@pytest.fixture
def resolver(db):
    return RoleResolver(db)

@pytest.fixture
def coordinator(db):
    return MembershipCoordinator(db)

@pytest.fixture
def client(db):
    """FastAPI test client bound to the test session"""
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def auth_headers():
    """Bearer headers for a user, as issued by the upstream identity provider"""
    def _auth_headers(user: User) -> dict:
        token = jwt.encode({"sub": str(user.id)}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
