"""
Backend API access for the EcoWatch sync client
"""

from .client import ApiClient, require_success
from .endpoints import SensorAPI, ReportAPI, ChatAPI, AuthAPI

__all__ = ["ApiClient", "require_success", "SensorAPI", "ReportAPI", "ChatAPI", "AuthAPI"]
