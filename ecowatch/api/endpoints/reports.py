"""
Report and discharge event endpoints of the EcoWatch backend
"""

from typing import Any, List, Optional

from ..client import ApiClient, require_success
from ...core.errors import ProtocolError


class ReportAPI:
    """Pollution reports and discharge events"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def reports(self) -> List[Any]:
        """Raw report records from ``{success, reports}``"""
        payload = require_success(await self.client.get("/api/reports"), "Fetching reports")
        reports = payload.get("reports")
        if not isinstance(reports, list):
            raise ProtocolError("Reports payload has no report list", payload=payload)
        return reports

    async def discharge_events(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
        severity: Optional[str] = None
    ) -> Any:
        """Discharge events, optionally filtered by time range and severity"""
        return await self.client.get(
            "/api/discharge/events",
            params={"from": from_, "to": to, "severity": severity}
        )
