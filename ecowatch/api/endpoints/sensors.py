"""
Sensor data endpoints of the EcoWatch backend
"""

from typing import Any, Dict, Optional, Union

from ..client import ApiClient, require_success
from ...schemas.sensor import AnalysisSummary, ParameterSet, RealtimeMetrics


class SensorAPI:
    """Sensor readings, history and analysis"""

    def __init__(self, client: ApiClient, history_hours: int = 24):
        self.client = client
        self.history_hours = history_hours

    async def latest(self) -> Any:
        """
        Current reading(s). The shape varies between a single object, a list
        and a ``{success, data}`` wrapper; callers normalize it.
        """
        return await self.client.get("/api/sensor-data/latest")

    async def realtime_metrics(self) -> RealtimeMetrics:
        """All current readings plus an AI summary"""
        payload = require_success(
            await self.client.get("/api/sensor-data/realtime-metrics"),
            "Realtime metrics"
        )
        return RealtimeMetrics.model_validate(payload)

    async def device(self, device_id: str) -> Any:
        """Latest reading for one device (raw payload)"""
        return await self.client.get(f"/api/sensor-data/{device_id}")

    async def history(self, device_id: str, hours: Optional[int] = None) -> Any:
        """Time-series history for one device (raw payload)"""
        return await self.client.get(
            f"/api/sensor-data/{device_id}/history",
            params={"hours": hours or self.history_hours}
        )

    async def analysis_summary(self, parameters: Union[ParameterSet, Dict[str, float]]) -> AnalysisSummary:
        """Quality assessment and recommendations for a parameter set"""
        if isinstance(parameters, ParameterSet):
            parameters = parameters.as_dict()
        payload = await self.client.post("/api/analysis/summary", {"parameters": parameters})
        if not isinstance(payload, dict):
            payload = {"details": {"raw": payload}}
        return AnalysisSummary.model_validate(payload)
