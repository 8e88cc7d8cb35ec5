"""
Chat engine: binds chat sessions to their transcripts
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from .errors import EcoWatchError, ProtocolError, TransportError, ValidationError
from ..api.endpoints import ChatAPI
from ..schemas.chat import ChatMessage, ChatRole, ChatSession, ChatState, utc_now
from ..storage.session_storage import SessionStore

logger = logging.getLogger(__name__)

WELCOME_GREETING = "👋 Hello! I'm EcoBot, your water quality companion. Ask me anything about sensors, data, or algae bloom risks!"
DEFAULT_GREETING = "🌊 Hi there! I'm EcoBot. You can ask me about water quality, bloom risks, or sensor readings."
NEW_CHAT_GREETING = "🧼 New chat started. Ask away!"
SEND_FAILED_MESSAGE = "⚠️ Sorry, I couldn't process your message."
NETWORK_ERROR_MESSAGE = "❌ Network error. Please try again later."


class ChatEngine:
    """
    Per-session transcripts with optimistic sends.

    A user message is appended before the remote call. Failures append a
    synthetic bot message instead of raising, and the session stays usable.
    Only one send per session may be pending; further sends are rejected
    until it settles, which keeps the transcript in submission order.
    """

    def __init__(self, chat_api: ChatAPI, sessions: SessionStore,
                 clock: Callable[[], datetime] = utc_now):
        self.chat_api = chat_api
        self.sessions = sessions
        self.clock = clock
        self.active_session_id: Optional[str] = None
        self._transcripts: Dict[str, List[ChatMessage]] = {}
        self._states: Dict[str, ChatState] = {}

    def state(self, session_id: str) -> ChatState:
        return self._states.get(session_id, ChatState.UNINITIALIZED)

    def transcript(self, session_id: str) -> List[ChatMessage]:
        return list(self._transcripts.get(session_id, []))

    def can_send(self, session_id: str) -> bool:
        """Whether the send affordance should be enabled"""
        return self.state(session_id) not in (ChatState.LOADING, ChatState.SENDING)

    def list_sessions(self) -> List[ChatSession]:
        return self.sessions.list_sessions()

    def _bot_message(self, content: str) -> ChatMessage:
        return ChatMessage(role=ChatRole.BOT, content=content, timestamp=self.clock())

    def _seed(self, session_id: str, greeting: str):
        self._transcripts[session_id] = [self._bot_message(greeting)]
        self._states[session_id] = ChatState.READY

    @staticmethod
    def _parse_history(records: List[Any]) -> List[ChatMessage]:
        messages = []
        for record in records:
            try:
                messages.append(ChatMessage.model_validate(record))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed chat message: {e.error_count()} errors")
        return messages

    async def load_history(self, session_id: str, force: bool = False) -> List[ChatMessage]:
        """
        Fetch the remote transcript of a session

        An empty transcript or a failed fetch yields a single greeting.
        A session already loaded is not fetched again unless forced.
        """
        state = self.state(session_id)
        if state in (ChatState.LOADING, ChatState.SENDING):
            return self.transcript(session_id)
        if state == ChatState.READY and not force:
            return self.transcript(session_id)

        self._states[session_id] = ChatState.LOADING
        try:
            messages = self._parse_history(await self.chat_api.history(session_id))
        except EcoWatchError as e:
            logger.warning(f"Failed to load chat history for {session_id}: {e}")
            messages = []

        if not messages:
            messages = [self._bot_message(DEFAULT_GREETING)]

        self._transcripts[session_id] = messages
        self._states[session_id] = ChatState.READY
        return self.transcript(session_id)

    async def send_message(self, session_id: str, text: str) -> bool:
        """
        Send a user message and append the reply

        Returns:
            False when another send for this session is still pending

        Raises:
            ValidationError: when the message is blank
        """
        if not text or not text.strip():
            raise ValidationError("Message cannot be empty")

        if not self.can_send(session_id):
            logger.info(f"Ignoring send for {session_id} while it is {self.state(session_id).value}")
            return False

        self._states[session_id] = ChatState.SENDING
        transcript = self._transcripts.setdefault(session_id, [])
        transcript.append(ChatMessage(role=ChatRole.USER, content=text, timestamp=self.clock()))

        try:
            reply = await self.chat_api.chat(session_id, text)
        except ProtocolError as e:
            logger.warning(f"Chat request for {session_id} was rejected: {e}")
            transcript.append(self._bot_message(SEND_FAILED_MESSAGE))
        except TransportError as e:
            logger.error(f"Chat error for {session_id}: {e}")
            transcript.append(self._bot_message(NETWORK_ERROR_MESSAGE))
        else:
            bot_message = self._bot_message(reply)
            transcript.append(bot_message)
            self.sessions.update_session_preview(session_id, bot_message.content, bot_message.timestamp)
        finally:
            self._states[session_id] = ChatState.READY

        return True

    async def open_session(self) -> str:
        """Bind the persisted active session, creating a greeted one if needed"""
        session_id = self.sessions.get_active_session_id()
        if session_id is None:
            session_id = self.sessions.create_session().id
            self._seed(session_id, WELCOME_GREETING)
        else:
            await self.load_history(session_id)
        self.active_session_id = session_id
        return session_id

    def new_session(self) -> ChatSession:
        """Start a fresh session; earlier transcripts stay on the server"""
        session = self.sessions.create_session()
        self._seed(session.id, NEW_CHAT_GREETING)
        self.active_session_id = session.id
        return session

    async def switch_session(self, session_id: str) -> List[ChatMessage]:
        """Make another catalog session active and load it once"""
        self.sessions.activate(session_id)
        self.active_session_id = session_id
        return await self.load_history(session_id)

    async def reload(self, session_id: str) -> List[ChatMessage]:
        return await self.load_history(session_id, force=True)
