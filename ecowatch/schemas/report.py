"""
Report and discharge event schemas for the EcoWatch sync client
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class ReportSeverity(str, Enum):
    """Report severity levels"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Report(BaseModel):
    """Pollution report, fetched independently and never mutated locally"""
    id: str = Field(..., alias="_id", description="Report identifier")
    location: str = Field(..., description="Where the report was filed")
    description: str = Field(default="", description="Report details")
    severity: ReportSeverity = Field(..., description="Report severity")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Optional evidence image")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    class Config:
        frozen = True
        populate_by_name = True
