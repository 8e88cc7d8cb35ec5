"""
Backend endpoint wrappers
"""

from .sensors import SensorAPI
from .reports import ReportAPI
from .chat import ChatAPI
from .auth import AuthAPI

__all__ = ["SensorAPI", "ReportAPI", "ChatAPI", "AuthAPI"]
