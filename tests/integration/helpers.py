"""Helpers shared by the integration flows."""

import uuid

from httpx import AsyncClient


def unique_user() -> dict[str, str]:
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"it_{uid}",
        "email": f"it_{uid}@example.com",
        "password": "TestPass1",
    }


async def register_and_login(client: AsyncClient, deposit: int = 0) -> tuple[str, dict[str, str]]:
    """Register a fresh user, optionally fund it; return (user_id, auth headers)."""
    user = unique_user()
    reg = await client.post("/api/v1/auth/register", json=user)
    user_id = reg.json()["data"]["user_id"]
    login = await client.post(
        "/api/v1/auth/login",
        json={"username": user["username"], "password": user["password"]},
    )
    headers = {"Authorization": f"Bearer {login.json()['data']['access_token']}"}
    if deposit:
        await client.post("/api/v1/account/deposit", json={"amount": deposit}, headers=headers)
    return user_id, headers
