# -*- coding: utf-8 -*-
"""
Verificación de JWT y dependencias de usuario/admin.
"""

import uuid
from datetime import timedelta

import httpx
import pytest
from fastapi import Depends, FastAPI, HTTPException

from app.modules.auth.dependencies import get_current_user, require_admin, validate_jwt_token
from app.modules.auth.enums import UserRole
from app.modules.auth.security import create_access_token
from app.shared.database import get_async_session


def test_validate_jwt_token_returns_user_id():
    user_id = uuid.uuid4()
    assert validate_jwt_token(create_access_token(user_id)) == user_id


def test_expired_token_is_rejected():
    token = create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-10))
    with pytest.raises(HTTPException) as ei:
        validate_jwt_token(token)
    assert ei.value.status_code == 401
    assert ei.value.detail["error"] == "invalid_token"


def test_non_uuid_subject_is_rejected():
    with pytest.raises(HTTPException) as ei:
        validate_jwt_token(create_access_token("42"))
    assert ei.value.status_code == 401


def test_garbage_token_is_rejected():
    with pytest.raises(HTTPException):
        validate_jwt_token("no.es.jwt")


@pytest.fixture
async def client(db_session):
    app = FastAPI()

    @app.get("/whoami")
    async def whoami(user=Depends(get_current_user)):
        return {"email": user.user_email}

    @app.get("/admin")
    async def admin(user=Depends(require_admin)):
        return {"ok": True}

    async def _session():
        yield db_session

    app.dependency_overrides[get_async_session] = _session
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c


def _bearer(user_id):
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.mark.asyncio
async def test_current_user_resolved_from_token(client, user):
    response = await client.get("/whoami", headers=_bearer(user.user_id))
    assert response.status_code == 200
    assert response.json() == {"email": "ana@example.com"}


@pytest.mark.asyncio
async def test_missing_token_is_401(client):
    response = await client.get("/whoami")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_user_is_401(client, user):
    response = await client.get("/whoami", headers=_bearer(uuid.uuid4()))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_member_is_not_admin(client, user):
    response = await client.get("/admin", headers=_bearer(user.user_id))
    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "forbidden"


@pytest.mark.asyncio
async def test_admin_passes(client, user, db_session):
    user.user_role = UserRole.admin
    await db_session.commit()

    response = await client.get("/admin", headers=_bearer(user.user_id))
    assert response.status_code == 200
