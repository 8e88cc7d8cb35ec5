"""
Error taxonomy for the EcoWatch sync client
"""

from typing import Any, Optional


class EcoWatchError(Exception):
    """Base class for client errors"""


class TransportError(EcoWatchError):
    """The request could not complete (connection failure, timeout)"""


class ProtocolError(EcoWatchError):
    """The backend answered, but not with a usable success payload"""
    
    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class ValidationError(EcoWatchError):
    """User input was rejected before any request was made"""
