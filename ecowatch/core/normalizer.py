"""
Response normalizer: turns any sensor-data payload into a list of Readings
"""

from typing import Any, List, Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from ..schemas.sensor import Reading

logger = logging.getLogger(__name__)


def _extract_items(raw: Any) -> Optional[list]:
    """
    Detect the payload shape, in priority order:
    1. a list of readings
    2. a success wrapper with a list-valued ``data`` field
    3. a single reading object
    Returns None when no shape matches.
    """
    if isinstance(raw, (list, tuple)):
        return list(raw)

    if isinstance(raw, dict):
        if raw.get("success") and isinstance(raw.get("data"), list):
            return raw["data"]
        if raw.get("deviceId"):
            return [raw]

    if isinstance(raw, Reading):
        return [raw]

    return None


def _to_reading(item: Any) -> Optional[Reading]:
    if isinstance(item, Reading):
        return item
    if not isinstance(item, dict):
        logger.warning(f"Skipping non-object reading of type {type(item).__name__}")
        return None
    try:
        return Reading.model_validate(item)
    except PydanticValidationError as e:
        logger.warning(f"Skipping malformed reading for device {item.get('deviceId')!r}: {e.error_count()} errors")
        return None


def normalize(raw: Any) -> List[Reading]:
    """
    Convert an arbitrarily-shaped server response into Readings.

    Never raises: an unrecognized payload yields an empty list and a logged
    diagnostic, and malformed items inside a recognized payload are skipped.
    """
    items = _extract_items(raw)
    if items is None:
        logger.warning(f"Unrecognized sensor payload shape: {type(raw).__name__}")
        return []

    readings = []
    for item in items:
        reading = _to_reading(item)
        if reading is not None:
            readings.append(reading)
    return readings
