"""
Published state for real-time consumers (dashboards, sensor list, map, reports)
"""

from typing import Any, Callable, Dict, List, Optional
from datetime import datetime, timezone
from enum import Enum
import itertools
import json
import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class UpdateKind(Enum):
    """Kinds of state published by the pollers"""
    READINGS = "readings"
    REPORTS = "reports"


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class StateUpdate:
    """One tick's outcome: either fresh data or an error"""
    def __init__(
        self,
        tick: int,
        kind: UpdateKind,
        data: Any = None,
        error: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ):
        self.tick = tick
        self.kind = kind
        self.data = data
        self.error = error
        self.timestamp = timestamp or datetime.now(timezone.utc)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        """Convert update to dictionary"""
        return {
            "tick": self.tick,
            "type": self.kind.value,
            "data": _jsonable(self.data),
            "error": self.error,
            "timestamp": self.timestamp.isoformat()
        }

    def to_json(self) -> str:
        """Convert update to JSON string"""
        return json.dumps(self.to_dict())


Subscriber = Callable[["StateChannel", StateUpdate], None]


class StateChannel:
    """
    Latest-wins holder of canonical state.

    Every update carries the tick that produced it. Data from a tick older
    than the last applied one is dropped, so a slow response can never
    overwrite a newer one. A failed tick keeps the previous data, and a
    failure older than the newest data or failure is dropped as well.
    """

    def __init__(self, kind: UpdateKind):
        self.kind = kind
        self.data: Any = None
        self.last_tick: int = -1
        self.last_error: Optional[str] = None
        self.last_error_tick: int = -1
        self.updated_at: Optional[datetime] = None
        self.loading = True
        self._ticks = itertools.count()
        self.subscribers: List[Subscriber] = []
        self.stats = {
            "published": 0,
            "errors": 0,
            "rejected_stale": 0,
            "subscriber_errors": 0
        }

    def next_tick(self) -> int:
        """Ticket for the next request feeding this channel"""
        return next(self._ticks)

    @property
    def has_data(self) -> bool:
        return self.updated_at is not None

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a consumer; returns a function that unregisters it"""
        self.subscribers.append(callback)

        def unsubscribe():
            if callback in self.subscribers:
                self.subscribers.remove(callback)
        return unsubscribe

    def publish(self, update: StateUpdate) -> bool:
        """
        Apply an update and notify subscribers

        Returns:
            False when the update was older than the applied state
        """
        newest = self.last_tick if update.ok else max(self.last_tick, self.last_error_tick)
        if update.tick <= newest:
            self.stats["rejected_stale"] += 1
            logger.debug(f"Dropping stale {self.kind.value} update from tick {update.tick} (newest {newest})")
            return False

        self.loading = False
        if update.ok:
            self.data = update.data
            self.last_tick = update.tick
            self.last_error = None
            self.updated_at = update.timestamp
            self.stats["published"] += 1
        else:
            # failures never replace data; later data ticks stay eligible
            self.last_error = update.error
            self.last_error_tick = update.tick
            self.stats["errors"] += 1

        self._notify(update)
        return True

    def _notify(self, update: StateUpdate):
        for callback in list(self.subscribers):
            try:
                callback(self, update)
            except Exception as e:
                self.stats["subscriber_errors"] += 1
                logger.error(f"State subscriber failed on {self.kind.value} tick {update.tick}: {e}")

    def snapshot(self) -> Dict[str, Any]:
        """Current state for display or diagnostics"""
        return {
            "type": self.kind.value,
            "loading": self.loading,
            "has_data": self.has_data,
            "tick": self.last_tick,
            "data": _jsonable(self.data),
            "error": self.last_error,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "stats": dict(self.stats)
        }
