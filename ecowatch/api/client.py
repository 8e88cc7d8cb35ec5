"""
HTTP transport for the EcoWatch backend
"""

from typing import Any, Callable, Dict, Optional
import logging

import httpx

from ..core.errors import ProtocolError, TransportError

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class ApiClient:
    """
    Thin JSON client over a shared httpx.AsyncClient.

    Every call has a bounded timeout. Failures surface as TransportError
    (the request did not complete) or ProtocolError (it completed but the
    answer is not a usable JSON success).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"}
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Execute a request and decode its JSON body

        Args:
            method: HTTP method (GET, POST)
            path: Endpoint path starting with /api
            json_body: Request body
            params: Query parameters; None values are dropped

        Returns:
            Decoded JSON payload
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._client.request(
                method.upper(),
                path,
                json=json_body,
                params=params or None,
                headers=self._headers()
            )
        except httpx.TimeoutException as e:
            logger.error(f"Request timed out: {method.upper()} {path}")
            raise TransportError(f"{method.upper()} {path} timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Request failed: {method.upper()} {path} - {e}")
            raise TransportError(f"{method.upper()} {path} failed: {e}") from e

        try:
            payload = response.json() if response.content else None
        except ValueError as e:
            raise ProtocolError(
                f"{method.upper()} {path} returned a non-JSON body",
                status_code=response.status_code
            ) from e

        if not response.is_success:
            message = payload.get("message") if isinstance(payload, dict) else None
            raise ProtocolError(
                message or f"{method.upper()} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                payload=payload
            )

        return payload

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json_body: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json_body=json_body)


def require_success(payload: Any, what: str) -> dict:
    """Reject payloads that are not a ``{"success": true, ...}`` object"""
    if not isinstance(payload, dict) or not payload.get("success"):
        message = payload.get("message") if isinstance(payload, dict) else None
        raise ProtocolError(message or f"{what} was not successful", payload=payload)
    return payload
