"""
Live sensor and report monitors built on the Poller
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from .channel import StateChannel, Subscriber, UpdateKind
from .classifier import bloom_risk_badge, classify, metric_statuses
from .errors import ProtocolError
from .normalizer import normalize
from .poller import DEFAULT_INTERVAL_MS, PollHandle, Poller
from ..api.endpoints import ReportAPI, SensorAPI
from ..schemas.report import Report
from ..schemas.sensor import Reading, SensorView

logger = logging.getLogger(__name__)

# Known deployments; anything else gets a generic name
WATER_BODY_NAMES = {
    "sensor-01": "Nairobi River - Upstream",
    "sensor-02": "Nairobi River - Midstream",
    "sensor-03": "Nairobi River - Downstream",
    "sensor-04": "Lake Victoria - North Shore",
    "sensor-05": "Tana River",
}


def latest_by_device(readings: List[Reading]) -> List[Reading]:
    """Keep only the newest snapshot per device, in first-seen device order"""
    latest: Dict[str, Reading] = {}
    for reading in readings:
        current = latest.get(reading.device_id)
        if current is None or reading.timestamp > current.timestamp:
            latest[reading.device_id] = reading
    return list(latest.values())


def sensor_view(reading: Reading) -> SensorView:
    coordinates = f"{reading.location.lat:.3f}, {reading.location.lng:.3f}"
    return SensorView(
        id=reading.device_id,
        name=WATER_BODY_NAMES.get(reading.device_id, f"Water Body {reading.device_id}"),
        location=coordinates,
        lat=reading.location.lat,
        lng=reading.location.lng,
        status=classify(reading.parameters),
        bloom_risk=bloom_risk_badge(reading.bloom_risk),
        metrics=metric_statuses(reading.parameters),
        last_reading=reading.timestamp,
        reading=reading
    )


def build_sensor_views(raw: Any) -> List[SensorView]:
    """
    Poll transform for sensor payloads.
    An empty result keeps the previous state instead of blanking it.
    """
    readings = normalize(raw)
    if not readings:
        raise ProtocolError("Sensor payload contained no readings", payload=raw)
    return [sensor_view(r) for r in latest_by_device(readings)]


def filter_sensors(views: List[SensorView], term: str) -> List[SensorView]:
    """Case-insensitive search on name, location or device id"""
    term = term.strip().lower()
    if not term:
        return list(views)
    return [
        v for v in views
        if term in v.name.lower() or term in v.location.lower() or term in v.id.lower()
    ]


def parse_reports(raw: Any) -> List[Report]:
    """Poll transform for report lists; malformed records are skipped"""
    if not isinstance(raw, list):
        raise ProtocolError("Reports payload is not a list", payload=raw)

    reports = []
    for item in raw:
        try:
            reports.append(Report.model_validate(item))
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed report: {e.error_count()} errors")
    return reports


class _Monitor:
    """Shared start/stop plumbing of the monitors"""

    kind: UpdateKind

    def __init__(
        self,
        fetch_once: Callable[[], Awaitable[Any]],
        transform: Callable[[Any], Any],
        interval_ms: int = DEFAULT_INTERVAL_MS,
        timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.fetch_once = fetch_once
        self.interval_ms = interval_ms
        self.channel = StateChannel(self.kind)
        self.poller = Poller(self.channel, transform=transform, timeout=timeout, sleep=sleep)
        self.handle: Optional[PollHandle] = None

    @property
    def running(self) -> bool:
        return self.handle is not None and self.handle.alive

    def start(self) -> PollHandle:
        if self.running:
            return self.handle
        self.handle = self.poller.start(self.fetch_once, self.interval_ms)
        return self.handle

    def stop(self):
        if self.handle is not None:
            self.poller.stop(self.handle)

    async def drain(self):
        if self.handle is not None:
            await self.poller.drain(self.handle)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self.channel.subscribe(callback)


class SensorMonitor(_Monitor):
    """Keeps the latest sensor views fresh"""

    kind = UpdateKind.READINGS

    def __init__(self, sensor_api: SensorAPI, interval_ms: int = DEFAULT_INTERVAL_MS,
                 timeout: Optional[float] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        super().__init__(sensor_api.latest, build_sensor_views, interval_ms, timeout, sleep)

    @property
    def views(self) -> List[SensorView]:
        return self.channel.data or []

    def find(self, device_id: str) -> Optional[SensorView]:
        return next((v for v in self.views if v.id == device_id), None)


class ReportMonitor(_Monitor):
    """Keeps the report list fresh"""

    kind = UpdateKind.REPORTS

    def __init__(self, report_api: ReportAPI, interval_ms: int = DEFAULT_INTERVAL_MS,
                 timeout: Optional[float] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        super().__init__(report_api.reports, parse_reports, interval_ms, timeout, sleep)

    @property
    def reports(self) -> List[Report]:
        return self.channel.data or []
