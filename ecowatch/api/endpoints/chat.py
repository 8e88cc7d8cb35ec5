"""
Chatbot endpoints of the EcoWatch backend
"""

from typing import Any, List

from ..client import ApiClient, require_success
from ...core.errors import ProtocolError


class ChatAPI:
    """Chat round-trips and remote transcripts"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def chat(self, session_id: str, message: str) -> str:
        """Send one message and return the bot reply"""
        payload = require_success(
            await self.client.post("/api/chatbot/chat", {"sessionId": session_id, "message": message}),
            "Chat request"
        )
        reply = payload.get("reply")
        if not isinstance(reply, str):
            raise ProtocolError("Chat response has no reply", payload=payload)
        return reply

    async def history(self, session_id: str) -> List[Any]:
        """Raw transcript records of a session"""
        payload = require_success(
            await self.client.get(f"/api/chat/history/{session_id}"),
            "Chat history"
        )
        history = payload.get("history")
        return history if isinstance(history, list) else []
