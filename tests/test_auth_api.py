from __future__ import annotations

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Skip suite when FastAPI dependency is not present in local environment.
pytest.importorskip("fastapi")

from fastapi import HTTPException
from app.api.auth import login, register
from app.database import Base
from app.schemas.auth import LoginRequest, RegisterRequest
from app.utils.security import decode_access_token, get_current_user


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def test_register_login_and_resolve_user(db_session):
    created = register(
        RegisterRequest(name="Ada", email="Ada@Test.edu", password="secret123", role="Alumni"),
        db=db_session,
    )
    assert created["message"] == "Registration successful"

    token = login(LoginRequest(email="ada@test.edu", password="secret123"), db=db_session)
    assert token["token_type"] == "bearer"
    assert token["role"] == "alumni"
    assert decode_access_token(token["access_token"]).email == "ada@test.edu"

    user = get_current_user(token=token["access_token"], db=db_session)
    assert user.id == created["id"]
    assert user.is_alumni is True


def test_duplicate_email_is_rejected(db_session):
    payload = RegisterRequest(name="Bob", email="bob@test.edu", password="secret123")
    register(payload, db=db_session)
    with pytest.raises(HTTPException) as exc_info:
        register(payload, db=db_session)
    assert exc_info.value.status_code == 400


def test_wrong_password_is_401(db_session):
    register(RegisterRequest(name="Cy", email="cy@test.edu", password="secret123"), db=db_session)
    with pytest.raises(HTTPException) as exc_info:
        login(LoginRequest(email="cy@test.edu", password="wrong-pass"), db=db_session)
    assert exc_info.value.status_code == 401


def test_unknown_role_is_rejected():
    with pytest.raises(ValidationError):
        RegisterRequest(name="Dee", email="dee@test.edu", password="secret123", role="admin")


def test_invalid_token_is_401(db_session):
    with pytest.raises(HTTPException) as exc_info:
        get_current_user(token="not-a-jwt", db=db_session)
    assert exc_info.value.status_code == 401
