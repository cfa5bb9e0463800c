"""Chat assistant routes"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from app.dependencies import get_catalog, get_chat_sessions
from config import config
from schemas.api import ChatMessageRequest, ChatMessageResponse, ChatSessionResponse
from services.ai.chatbot import ChatSession, ChatSessionClosedError, ChatSessionManager
from services.tool_catalog import ToolCatalog
from utils.errors import NotFoundError
from utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_session(manager: ChatSessionManager, session_id: str) -> ChatSession:
    session = manager.get(session_id)
    if session is None:
        raise NotFoundError(f"Chat session not found: {session_id}")
    return session


@router.post("/sessions", status_code=201, response_model=ChatSessionResponse)
async def start_chat(
    catalog: ToolCatalog = Depends(get_catalog),
    manager: ChatSessionManager = Depends(get_chat_sessions),
):
    """Start a conversation grounded on the current directory contents"""
    tools = await catalog.context_tools()
    session = manager.create(tools)
    return ChatSessionResponse(session_id=session.session_id)


@router.post("/sessions/{session_id}/messages", response_model=ChatMessageResponse)
@limiter.limit(config.CHAT_RATE_LIMIT)
async def send_message(
    request: Request,
    session_id: str,
    chat_request: ChatMessageRequest,
    manager: ChatSessionManager = Depends(get_chat_sessions),
):
    session = _require_session(manager, session_id)
    try:
        reply = await run_in_threadpool(session.send, chat_request.message.strip())
    except ChatSessionClosedError:
        raise NotFoundError(f"Chat session has ended: {session_id}")

    return ChatMessageResponse(
        session_id=session_id,
        reply=reply,
        conversation_length=len(session.history),
    )


@router.get("/sessions/{session_id}")
async def get_history(session_id: str, manager: ChatSessionManager = Depends(get_chat_sessions)):
    session = _require_session(manager, session_id)
    return {"sessionId": session_id, "messages": list(session.history)}


@router.delete("/sessions/{session_id}")
async def end_chat(session_id: str, manager: ChatSessionManager = Depends(get_chat_sessions)):
    if not manager.end(session_id):
        raise NotFoundError(f"Chat session not found: {session_id}")
    logger.info(f"💬 [CHAT] Ended session {session_id}")
    return {"sessionId": session_id, "ended": True}
