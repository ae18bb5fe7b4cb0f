import itertools
import os

os.environ.setdefault("JWT_SECRET_KEY", "scrs-test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scrs.main import app
from scrs.core.database import Base, create_db_engine, get_db
from scrs.core.security import get_password_hash
from scrs.models.department import Department
from scrs.models.user import User, UserRole

# 1. Setup In-Memory SQLite Database
engine = create_db_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Hashing is deliberately slow; compute the shared test hash once
TEST_PASSWORD = "secret123"
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


# 2. Dependency Override
def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db


# 3. Unit-test fixtures (fresh schema per test)
@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role=UserRole.STUDENT, is_active=True, username=None, department_id=None):
        n = next(counter)
        name = username or f"{role.value.lower()}{n}"
        user = User(
            username=name,
            email=f"{name}@uni.example.com",
            hashed_password=TEST_PASSWORD_HASH,
            first_name=name.capitalize(),
            role=role,
            is_active=is_active,
            department_id=department_id,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_department(db):
    def _make(name, is_active=True):
        department = Department(name=name, description=f"{name} department", is_active=is_active)
        db.add(department)
        db.commit()
        db.refresh(department)
        return department

    return _make


# 4. API fixtures (shared per module)
@pytest.fixture(scope="module")
def client():
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Pre-seed Data
    db = TestingSessionLocal()
    seeded = [
        ("admin", "admin@uni.example.com", "admin123", UserRole.ADMIN),
        ("staff", "staff@uni.example.com", "staff123", UserRole.STAFF),
        ("student", "student@uni.example.com", "student123", UserRole.STUDENT),
        ("student2", "student2@uni.example.com", "student123", UserRole.STUDENT),
    ]
    for username, email, password, role in seeded:
        if not db.query(User).filter(User.username == username).first():
            db.add(User(
                username=username,
                email=email,
                hashed_password=get_password_hash(password),
                first_name=username.capitalize(),
                role=role,
                is_active=True,
            ))
    db.commit()
    db.close()

    with TestClient(app) as c:
        yield c

    # Drop tables (cleanup)
    Base.metadata.drop_all(bind=engine)


def _login(client, identifier, password):
    response = client.post("/api/v1/auth/login", json={"identifier": identifier, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest.fixture(scope="module")
def admin_token(client):
    return _login(client, "admin@uni.example.com", "admin123")


@pytest.fixture(scope="module")
def staff_token(client):
    return _login(client, "staff", "staff123")


@pytest.fixture(scope="module")
def student_token(client):
    return _login(client, "student", "student123")


@pytest.fixture(scope="module")
def student2_token(client):
    return _login(client, "student2", "student123")
