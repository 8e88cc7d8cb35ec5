"""
Chat schemas for the EcoWatch sync client
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone
from enum import Enum


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChatRole(str, Enum):
    """Author of a chat message"""
    USER = "user"
    BOT = "bot"


class ChatState(str, Enum):
    """Lifecycle of one chat session inside the engine"""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    SENDING = "sending"


class ChatMessage(BaseModel):
    """One message of a session transcript"""
    role: ChatRole
    content: str
    timestamp: datetime = Field(default_factory=utc_now)

    class Config:
        frozen = True


class ChatSession(BaseModel):
    """Catalog entry of a chat session; the transcript lives server-side"""
    id: str = Field(..., description="Opaque, time-derived session id")
    last_message_preview: Optional[str] = Field(None, alias="lastMessage")
    last_message_timestamp: Optional[datetime] = Field(None, alias="lastDate")

    class Config:
        populate_by_name = True

    def to_record(self) -> dict:
        """Storage shape of the catalog entry"""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
