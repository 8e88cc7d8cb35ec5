"""
Authentication endpoints of the EcoWatch backend
"""

from typing import Any, Dict

from ..client import ApiClient


class AuthAPI:
    """Credential lifecycle; the bearer token is attached by the client"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        return await self.client.post(
            "/api/auth/register",
            {"name": name, "email": email, "password": password}
        )

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self.client.post("/api/auth/login", {"email": email, "password": password})

    async def logout(self) -> Any:
        return await self.client.post("/api/auth/logout")

    async def me(self) -> Dict[str, Any]:
        return await self.client.get("/api/auth/me")
