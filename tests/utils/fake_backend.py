"""
In-process fake of the EcoWatch backend for tests

Serves the sensor, report, chat and auth endpoints from mutable state and is
driven through httpx without opening sockets.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from fastapi import APIRouter, FastAPI, Header, HTTPException, Query, status
from fastapi.responses import JSONResponse

BASE_URL = "http://testserver"


def make_reading(device_id: str = "sensor-01", **overrides) -> Dict[str, Any]:
    """Wire-format reading with healthy parameters"""
    parameters = {
        "temperature": 20,
        "pH": 7,
        "turbidity": 10,
        "dissolvedOxygen": 6,
        "nitrate": 2,
        "phosphate": 0.05,
    }
    parameters.update(overrides.pop("parameters", {}))
    reading = {
        "_id": f"rec-{device_id}",
        "deviceId": device_id,
        "location": {"lat": -1.2864, "lng": 36.8172},
        "parameters": parameters,
        "bloomRisk": "Low",
        "analysis": "Water quality is within normal range.",
        "timestamp": "2026-10-18T08:00:00Z",
    }
    reading.update(overrides)
    return reading


def make_report(report_id: str = "r1", severity: str = "High", created_at: str = "2026-10-17T09:30:00Z",
                **overrides) -> Dict[str, Any]:
    report = {
        "_id": report_id,
        "location": "Nairobi River - Midstream",
        "description": "Oily discharge near outfall",
        "severity": severity,
        "createdAt": created_at,
        "updatedAt": created_at,
    }
    report.update(overrides)
    return report


class FakeBackend:
    """Mutable backend state plus the FastAPI app serving it"""

    def __init__(self):
        self.latest_payload: Any = [make_reading()]
        self.reports: List[Dict[str, Any]] = [make_report()]
        self.reports_success = True
        self.chat_histories: Dict[str, List[Dict[str, Any]]] = {}
        self.chat_replies: List[str] = []
        self.chat_status = status.HTTP_200_OK
        self.chat_delay: Optional[asyncio.Event] = None
        self.users: Dict[str, Dict[str, Any]] = {}
        self.valid_tokens: Dict[str, str] = {}
        self.offline = False
        self.requests: List[str] = []
        self.chat_in_flight = 0
        self.max_chat_in_flight = 0
        self.received_messages: List[Dict[str, Any]] = []
        self.app = self._build_app()

    @property
    def transport(self) -> httpx.AsyncBaseTransport:
        return _SwitchableTransport(self)

    def _build_app(self) -> FastAPI:
        app = FastAPI(title="Fake EcoWatch backend")
        app.include_router(self._sensor_router(), prefix="/api")
        app.include_router(self._report_router(), prefix="/api")
        app.include_router(self._chat_router(), prefix="/api")
        app.include_router(self._auth_router(), prefix="/api")
        return app

    def _sensor_router(self) -> APIRouter:
        router = APIRouter(tags=["sensors"])

        @router.get("/sensor-data/latest")
        async def latest():
            return JSONResponse(self.latest_payload)

        @router.get("/sensor-data/realtime-metrics")
        async def realtime_metrics():
            data = self.latest_payload if isinstance(self.latest_payload, list) else []
            return {"success": True, "count": len(data), "data": data, "ai_analysis": "All sensors nominal."}

        @router.get("/sensor-data/{device_id}/history")
        async def history(device_id: str, hours: int = Query(24)):
            return {"success": True, "deviceId": device_id, "hours": hours, "data": [make_reading(device_id)]}

        @router.get("/sensor-data/{device_id}")
        async def device(device_id: str):
            return make_reading(device_id)

        @router.post("/analysis/summary")
        async def analysis_summary(body: Dict[str, Any]):
            parameters = body.get("parameters", {})
            return {
                "success": True,
                "assessment": "Poor" if parameters.get("nitrate", 0) > 10 else "Good",
                "recommendations": ["Reduce fertilizer runoff"],
            }

        return router

    def _report_router(self) -> APIRouter:
        router = APIRouter(tags=["reports"])

        @router.get("/reports")
        async def reports():
            if not self.reports_success:
                return {"success": False, "message": "Report store unavailable"}
            return {"success": True, "reports": self.reports}

        @router.get("/discharge/events")
        async def discharge_events(
            from_: Optional[str] = Query(None, alias="from"),
            to: Optional[str] = Query(None),
            severity: Optional[str] = Query(None)
        ):
            return {"success": True, "filters": {"from": from_, "to": to, "severity": severity}, "events": []}

        return router

    def _chat_router(self) -> APIRouter:
        router = APIRouter(tags=["chat"])

        @router.post("/chatbot/chat")
        async def chat(body: Dict[str, Any]):
            self.received_messages.append(body)
            self.chat_in_flight += 1
            self.max_chat_in_flight = max(self.max_chat_in_flight, self.chat_in_flight)
            try:
                if self.chat_delay is not None:
                    await self.chat_delay.wait()
                if self.chat_status != status.HTTP_200_OK:
                    raise HTTPException(status_code=self.chat_status, detail="Chat backend failure")
                reply = self.chat_replies.pop(0) if self.chat_replies else f"echo: {body.get('message')}"
                return {"success": True, "reply": reply}
            finally:
                self.chat_in_flight -= 1

        @router.get("/chat/history/{session_id}")
        async def chat_history(session_id: str):
            return {"success": True, "history": self.chat_histories.get(session_id, [])}

        return router

    def _auth_router(self) -> APIRouter:
        router = APIRouter(prefix="/auth", tags=["auth"])

        def user_for(authorization: Optional[str]) -> Dict[str, Any]:
            token = (authorization or "").removeprefix("Bearer ")
            email = self.valid_tokens.get(token)
            if email is None:
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
            return self.users[email]

        @router.post("/register", status_code=status.HTTP_201_CREATED)
        async def register(body: Dict[str, Any]):
            if body["email"] in self.users:
                return JSONResponse({"success": False, "message": "Email already registered"}, status_code=400)
            self.users[body["email"]] = {"_id": f"u{len(self.users) + 1}", "name": body["name"],
                                         "email": body["email"], "password": body["password"]}
            return {"success": True, "message": "Registered"}

        @router.post("/login")
        async def login(body: Dict[str, Any]):
            user = self.users.get(body.get("email"))
            if user is None or user["password"] != body.get("password"):
                return JSONResponse({"success": False, "message": "Invalid credentials"}, status_code=401)
            token = f"token-{user['_id']}-{datetime.now(timezone.utc).timestamp()}"
            self.valid_tokens[token] = user["email"]
            return {"success": True, "token": token,
                    "user": {"_id": user["_id"], "name": user["name"], "email": user["email"]}}

        @router.post("/logout")
        async def logout(authorization: Optional[str] = Header(None)):
            user_for(authorization)
            self.valid_tokens.pop((authorization or "").removeprefix("Bearer "), None)
            return {"success": True}

        @router.get("/me")
        async def me(authorization: Optional[str] = Header(None)):
            user = user_for(authorization)
            return {"success": True, "user": {"_id": user["_id"], "name": user["name"], "email": user["email"]}}

        return router


class _SwitchableTransport(httpx.AsyncBaseTransport):
    """ASGI transport that can simulate the network being down"""

    def __init__(self, backend: FakeBackend):
        self.backend = backend
        self.inner = httpx.ASGITransport(app=backend.app)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.backend.requests.append(f"{request.method} {request.url.path}")
        if self.backend.offline:
            raise httpx.ConnectError("Backend unreachable", request=request)
        return await self.inner.handle_async_request(request)
