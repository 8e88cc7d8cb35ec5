"""
Threshold-based status classification for sensor readings
"""

from typing import Any, Optional

from ..schemas.sensor import BloomRisk, MetricStatus, ParameterSet, SensorStatus

# Aggregate "abnormal" limits
TEMPERATURE_MAX = 30
PH_MIN = 6.5
PH_MAX = 8.5
DISSOLVED_OXYGEN_MIN = 3
NITRATE_MAX = 10
TURBIDITY_MAX = 50
PHOSPHATE_MAX = 0.1

# Per-metric display tiers; each check is (predicate, tier), first match wins
METRIC_THRESHOLDS = {
    'temperature': [
        (lambda v: v > 30, MetricStatus.WARNING),
    ],
    'pH': [
        (lambda v: v < 6 or v > 9, MetricStatus.DANGER),
        (lambda v: v < 6.5 or v > 8.5, MetricStatus.WARNING),
    ],
    'turbidity': [
        (lambda v: v > 50, MetricStatus.WARNING),
    ],
    'dissolvedOxygen': [
        (lambda v: v < 3, MetricStatus.DANGER),
        (lambda v: v < 5, MetricStatus.WARNING),
    ],
    'nitrate': [
        (lambda v: v > 10, MetricStatus.DANGER),
    ],
    'phosphate': [
        (lambda v: v > 0.1, MetricStatus.WARNING),
    ],
}


def is_offline(p: ParameterSet) -> bool:
    """A sensor reporting all zeros is treated as offline"""
    return all(value == 0 for value in p.as_dict().values())


def is_abnormal(p: ParameterSet) -> bool:
    return (
        p.temperature > TEMPERATURE_MAX
        or p.ph < PH_MIN
        or p.ph > PH_MAX
        or p.dissolved_oxygen < DISSOLVED_OXYGEN_MIN
        or p.nitrate > NITRATE_MAX
        or p.turbidity > TURBIDITY_MAX
        or p.phosphate > PHOSPHATE_MAX
    )


def classify(p: ParameterSet) -> SensorStatus:
    """
    Map a parameter set to a sensor status.
    Returns: offline, warning or active (first match wins)
    """
    if is_offline(p):
        return SensorStatus.OFFLINE
    if is_abnormal(p):
        return SensorStatus.WARNING
    return SensorStatus.ACTIVE


def metric_status(name: str, value: float) -> MetricStatus:
    """Display tier of a single metric; unknown metrics are always good"""
    for predicate, tier in METRIC_THRESHOLDS.get(name, []):
        if predicate(value):
            return tier
    return MetricStatus.GOOD


def metric_statuses(p: ParameterSet) -> dict:
    """Display tier of every metric, keyed by wire name"""
    return {name: metric_status(name, value) for name, value in p.as_dict().items()}


def bloom_risk_badge(value: Any) -> Optional[BloomRisk]:
    """Badge tier for a server-supplied bloom risk; unknown values map to None"""
    try:
        return BloomRisk(value)
    except (ValueError, TypeError):
        return None
