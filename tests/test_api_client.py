"""
Tests for the HTTP client and endpoint wrappers
"""

import httpx
import pytest

from ecowatch.api import ApiClient, AuthAPI, ChatAPI, ReportAPI, SensorAPI, require_success
from ecowatch.core.errors import ProtocolError, TransportError
from ecowatch.schemas import ParameterSet
from tests.utils.fake_backend import BASE_URL, make_reading


def mock_client(handler, **kwargs) -> ApiClient:
    return ApiClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_latest_returns_raw_payload(client, backend):
    """The latest endpoint is returned as sent"""
    backend.latest_payload = {"success": True, "data": [make_reading("sensor-02")]}
    payload = await SensorAPI(client).latest()
    assert payload["data"][0]["deviceId"] == "sensor-02"


@pytest.mark.asyncio
async def test_realtime_metrics_is_parsed(client, backend):
    """Realtime metrics are parsed into readings"""
    backend.latest_payload = [make_reading("sensor-01"), make_reading("sensor-03")]
    metrics = await SensorAPI(client).realtime_metrics()
    assert metrics.count == 2
    assert [r.device_id for r in metrics.data] == ["sensor-01", "sensor-03"]
    assert metrics.ai_analysis == "All sensors nominal."


@pytest.mark.asyncio
async def test_device_and_history(client, backend):
    """Device and history lookups hit per-device paths"""
    api = SensorAPI(client)
    assert (await api.device("sensor-04"))["deviceId"] == "sensor-04"

    history = await api.history("sensor-04", hours=6)
    assert history["hours"] == 6
    assert "GET /api/sensor-data/sensor-04/history" in backend.requests

    assert (await SensorAPI(client, history_hours=48).history("sensor-04"))["hours"] == 48


@pytest.mark.asyncio
async def test_analysis_summary_accepts_parameter_set(client):
    """Analysis accepts a ParameterSet or a plain dict"""
    parameters = ParameterSet(temperature=22, pH=7.1, turbidity=4, dissolvedOxygen=7, nitrate=12, phosphate=0.02)
    summary = await SensorAPI(client).analysis_summary(parameters)
    assert summary.assessment == "Poor"
    assert summary.recommendations == ["Reduce fertilizer runoff"]

    summary = await SensorAPI(client).analysis_summary({"nitrate": 1})
    assert summary.assessment == "Good"


@pytest.mark.asyncio
async def test_reports_requires_success(client, backend):
    """Reports need a success flag"""
    api = ReportAPI(client)
    assert [r["_id"] for r in await api.reports()] == ["r1"]

    backend.reports_success = False
    with pytest.raises(ProtocolError, match="Report store unavailable"):
        await api.reports()


@pytest.mark.asyncio
async def test_discharge_events_forward_filters(client):
    """Discharge filters are sent as query parameters"""
    payload = await ReportAPI(client).discharge_events(from_="2026-10-01", severity="High")
    assert payload["filters"] == {"from": "2026-10-01", "to": None, "severity": "High"}


@pytest.mark.asyncio
async def test_chat_round_trip(client, backend):
    """Chat returns the reply text and history list"""
    api = ChatAPI(client)
    assert await api.chat("session_1", "hello") == "echo: hello"
    assert await api.history("session_1") == []


@pytest.mark.asyncio
async def test_offline_backend_raises_transport_error(client, backend):
    """An unreachable backend is a transport error"""
    backend.offline = True
    with pytest.raises(TransportError):
        await SensorAPI(client).latest()


@pytest.mark.asyncio
async def test_http_error_status_raises_protocol_error(client, backend):
    """A non-2xx status is a protocol error"""
    backend.chat_status = 503
    with pytest.raises(ProtocolError) as exc_info:
        await ChatAPI(client).chat("session_1", "hello")
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_error_message_is_taken_from_payload(client, backend):
    """The backend message is used as the error text"""
    with pytest.raises(ProtocolError, match="Invalid credentials") as exc_info:
        await AuthAPI(client).login("nobody@example.com", "secret1")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_timeout_raises_transport_error():
    """A timeout is a transport error"""
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    async with mock_client(handler) as api_client:
        with pytest.raises(TransportError, match="timed out"):
            await api_client.get("/api/reports")


@pytest.mark.asyncio
async def test_non_json_body_raises_protocol_error():
    """A non-JSON body is a protocol error"""
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    async with mock_client(handler) as api_client:
        with pytest.raises(ProtocolError, match="non-JSON"):
            await api_client.get("/api/sensor-data/latest")


@pytest.mark.asyncio
async def test_bearer_token_and_params():
    """Bearer header is sent only with a token, None params are dropped"""
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    token = {"value": None}
    async with mock_client(handler, token_provider=lambda: token["value"]) as api_client:
        await api_client.get("/api/auth/me", params={"hours": 24, "skip": None})
        token["value"] = "abc"
        await api_client.get("/api/auth/me")

    assert "authorization" not in seen[0].headers
    assert seen[0].url.params.get("hours") == "24"
    assert "skip" not in seen[0].url.params
    assert seen[1].headers["authorization"] == "Bearer abc"


def test_require_success():
    """Only success objects pass"""
    assert require_success({"success": True, "x": 1}, "thing") == {"success": True, "x": 1}
    with pytest.raises(ProtocolError, match="thing was not successful"):
        require_success({"success": False}, "thing")
    with pytest.raises(ProtocolError):
        require_success([1, 2], "thing")
