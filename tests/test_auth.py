from datetime import timedelta

import pytest

from conftest import auth_headers
from hostel_leave.core.security import create_access_token, decode_token, hash_password, verify_password
from hostel_leave.models.user import UserRole
from hostel_leave.services.auth_service import create_user


def test_password_hash_roundtrip_and_long_passwords():
    hashed = hash_password("hostel123")
    assert verify_password("hostel123", hashed)
    assert not verify_password("hostel124", hashed)

    # longer than bcrypt's 72-byte window; the tail must still matter
    long_a = "x" * 80 + "a"
    long_b = "x" * 80 + "b"
    assert verify_password(long_a, hash_password(long_a))
    assert not verify_password(long_b, hash_password(long_a))


def test_token_carries_subject_and_role():
    token = create_access_token(subject="abc", data={"role": "student"})
    payload = decode_token(token)
    assert payload["sub"] == "abc"
    assert payload["role"] == "student"


@pytest.mark.asyncio
async def test_login_success(client, db_session):
    await create_user(db_session, "Meera", "Meera@Example.com", "s3cret!", role=UserRole.Student)

    res = await client.post("/api/auth/login", json={"email": "meera@example.com", "password": "s3cret!"})
    assert res.status_code == 200
    data = res.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["role"] == "Student"
    assert decode_token(data["access_token"])["role"] == "student"

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "meera@example.com"


@pytest.mark.asyncio
async def test_login_wrong_password(client, db_session):
    await create_user(db_session, "Meera", "meera@example.com", "s3cret!", role=UserRole.Student)

    res = await client.post("/api/auth/login", json={"email": "meera@example.com", "password": "nope"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_expired_and_garbage_tokens_are_rejected(client, student):
    expired = create_access_token(subject=str(student.id), expires_delta=timedelta(minutes=-5))

    res = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert res.status_code == 401

    res = await client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_admin_creates_and_lists_users(client, admin):
    payload = {
        "name": "New Student",
        "email": "new.student@example.com",
        "password": "pass1234",
        "role": "Student",
    }
    res = await client.post("/api/users/", json=payload, headers=auth_headers(admin))
    assert res.status_code == 201
    assert res.json()["role"] == "Student"

    res = await client.post("/api/users/", json=payload, headers=auth_headers(admin))
    assert res.status_code == 400

    res = await client.get("/api/users/", headers=auth_headers(admin))
    assert res.status_code == 200
    assert "new.student@example.com" in {u["email"] for u in res.json()}


@pytest.mark.asyncio
async def test_student_cannot_manage_users(client, student):
    res = await client.get("/api/users/", headers=auth_headers(student))
    assert res.status_code == 403
