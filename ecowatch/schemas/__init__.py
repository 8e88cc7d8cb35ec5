"""
Pydantic schemas for the EcoWatch sync client
"""

from .sensor import (
    SensorStatus, MetricStatus, BloomRisk, Location, ParameterSet, Reading,
    RealtimeMetrics, AnalysisSummary, SensorView
)
from .report import ReportSeverity, Report
from .chat import ChatRole, ChatState, ChatMessage, ChatSession
from .auth import UserRegister, UserLogin, UserProfile

__all__ = [
    "SensorStatus", "MetricStatus", "BloomRisk", "Location", "ParameterSet", "Reading",
    "RealtimeMetrics", "AnalysisSummary", "SensorView",
    "ReportSeverity", "Report",
    "ChatRole", "ChatState", "ChatMessage", "ChatSession",
    "UserRegister", "UserLogin", "UserProfile",
]
