from datetime import timedelta

import pytest
from httpx import AsyncClient

from learnhub.models import UserSession
from learnhub.services.session_service import session_service


@pytest.mark.asyncio
async def test_read_main(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["cache"] == "disabled"


@pytest.mark.asyncio
async def test_unknown_token_is_unauthorized(client: AsyncClient):
    response = await client.get("/api/points", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json() == {"error": "unauthorized", "message": "Session expired or invalid"}


@pytest.mark.asyncio
async def test_expired_session_is_removed(client: AsyncClient, session, learner):
    token = session_service.create_session(session, learner.id, ttl=timedelta(seconds=-1))

    response = await client.get("/api/points", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert session.get(UserSession, token) is None


@pytest.mark.asyncio
async def test_inactive_user_is_unauthorized(client: AsyncClient, session, learner):
    token = session_service.create_session(session, learner.id)
    learner.status = "inactive"
    session.commit()

    response = await client.get("/api/points", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
