"""
Sensor reading schemas for the EcoWatch sync client
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from enum import Enum


class SensorStatus(str, Enum):
    """Locally derived sensor health tier"""
    ACTIVE = "active"
    WARNING = "warning"
    OFFLINE = "offline"


class MetricStatus(str, Enum):
    """Per-metric display tier"""
    GOOD = "good"
    WARNING = "warning"
    DANGER = "danger"


class BloomRisk(str, Enum):
    """Server-supplied algae bloom risk tier"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Location(BaseModel):
    """Geographic position of a sensor"""
    lat: float = Field(..., description="Latitude")
    lng: float = Field(..., description="Longitude")

    class Config:
        frozen = True


class ParameterSet(BaseModel):
    """The six physical measurements, always populated as a unit"""
    temperature: float = Field(..., description="Water temperature in °C")
    ph: float = Field(..., alias="pH", description="pH level")
    turbidity: float = Field(..., description="Turbidity in NTU")
    dissolved_oxygen: float = Field(..., alias="dissolvedOxygen", description="Dissolved oxygen in mg/L")
    nitrate: float = Field(..., description="Nitrate in mg/L")
    phosphate: float = Field(..., description="Phosphate in mg/L")

    class Config:
        frozen = True
        populate_by_name = True

    def as_dict(self) -> Dict[str, float]:
        """Wire-named view of the measurements"""
        return self.model_dump(by_alias=True)


class Reading(BaseModel):
    """Immutable snapshot of one sensor's measurements"""
    record_id: Optional[str] = Field(None, alias="_id", description="Backend record identifier")
    device_id: str = Field(..., alias="deviceId", description="Stable device identifier")
    location: Location
    parameters: ParameterSet
    bloom_risk: Optional[str] = Field(None, alias="bloomRisk", description="Low, Medium or High")
    analysis: str = Field(default="", description="Free-text AI analysis")
    timestamp: datetime = Field(..., description="When the reading was taken")

    class Config:
        frozen = True
        populate_by_name = True

    @validator('analysis', pre=True)
    def default_analysis(cls, v):
        return "" if v is None else v

    @validator('timestamp')
    def assume_utc(cls, v):
        # naive timestamps are UTC
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


class RealtimeMetrics(BaseModel):
    """Response of the realtime-metrics endpoint"""
    success: bool
    count: int = 0
    data: List[Reading] = Field(default_factory=list)
    ai_analysis: Optional[str] = None


class AnalysisSummary(BaseModel):
    """Quality assessment returned by the analysis endpoint"""
    success: bool = True
    assessment: Optional[str] = Field(None, description="Overall water quality assessment")
    recommendations: List[str] = Field(default_factory=list)
    details: Dict[str, Any] = Field(default_factory=dict)


class SensorView(BaseModel):
    """Display-ready view of a sensor's latest reading"""
    id: str = Field(..., description="Device identifier")
    name: str = Field(..., description="Water body display name")
    location: str = Field(..., description="'lat, lng' rounded to 3 decimals")
    lat: float
    lng: float
    status: SensorStatus
    bloom_risk: Optional[BloomRisk] = Field(None, description="Badge tier, None when unrecognized")
    metrics: Dict[str, MetricStatus] = Field(default_factory=dict, description="Per-metric display tier")
    parameters: int = Field(default=6, description="Number of measured parameters")
    last_reading: datetime
    reading: Reading
