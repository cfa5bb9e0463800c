"""
Conversational assistant grounded in the tool directory.

Each conversation is an explicit ChatSession object holding its own history;
the manager creates, looks up and tears sessions down by id.
"""

import logging
import uuid
from collections import OrderedDict
from typing import Dict, List, Optional

import anthropic

from integrations.anthropic_client import DEFAULT_MODEL, extract_text
from schemas.domain import Tool, utc_now
from utils.errors import ExternalServiceError, FeatureDisabledError

logger = logging.getLogger(__name__)

MAX_HISTORY_MESSAGES = 40


def build_system_prompt(tools: List[Tool]) -> str:
    tool_lines = "\n".join(f"- {t.name}: {t.description[:100]}..." for t in tools)
    return f"""You are Findora, a friendly and helpful AI assistant for an app that helps users discover AI tools.
Your primary function is to help users find the right AI tool for their needs based on the provided list.
You can answer questions about the tools, compare them, or recommend tools for a specific task.
Keep your answers concise, helpful, and use markdown for formatting.

Here is a summary of the available tools:
{tool_lines}
"""


class ChatSessionClosedError(Exception):
    pass


class ChatSession:
    def __init__(
        self,
        client: anthropic.Anthropic,
        tools: List[Tool],
        model: str = DEFAULT_MODEL,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.client = client
        self.model = model
        self.system_prompt = build_system_prompt(tools)
        self.history: List[Dict[str, str]] = []
        self.created_at = utc_now()
        self.closed = False

    def send(self, message: str) -> str:
        """Send a user message with the session history and return the assistant reply"""
        if self.closed:
            raise ChatSessionClosedError(f"Chat session {self.session_id} is closed")

        messages = self.history + [{"role": "user", "content": message}]
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=1024,
                temperature=0.7,
                system=self.system_prompt,
                messages=messages,
            )
        except anthropic.APIError as e:
            logger.error(f"💬 [CHAT] Claude request failed for session {self.session_id}: {e}")
            raise ExternalServiceError("Claude", "Chat request failed") from e

        reply = extract_text(response)
        self.history.extend([
            {"role": "user", "content": message},
            {"role": "assistant", "content": reply},
        ])
        # Drop the oldest exchange first so the history keeps starting with a user turn
        while len(self.history) > MAX_HISTORY_MESSAGES:
            del self.history[:2]

        logger.info(f"💬 [CHAT] Session {self.session_id}: {len(self.history)} messages")
        return reply

    def close(self) -> None:
        self.closed = True
        self.history = []


class ChatSessionManager:
    """Owns the live chat sessions; sessions are created per conversation and ended explicitly"""

    def __init__(self, client: Optional[anthropic.Anthropic], model: str = DEFAULT_MODEL, max_sessions: int = 500):
        self.client = client
        self.model = model
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, ChatSession]" = OrderedDict()

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def create(self, tools: List[Tool]) -> ChatSession:
        if not self.enabled:
            raise FeatureDisabledError("Chat assistant")

        session = ChatSession(self.client, tools, model=self.model)
        self._sessions[session.session_id] = session
        while len(self._sessions) > self.max_sessions:
            _, evicted = self._sessions.popitem(last=False)
            evicted.close()

        logger.info(f"💬 [CHAT] Created session {session.session_id} grounded on {len(tools)} tools")
        return session

    def get(self, session_id: str) -> Optional[ChatSession]:
        return self._sessions.get(session_id)

    def end(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
