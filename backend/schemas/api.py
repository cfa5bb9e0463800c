"""API request and response schemas"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from schemas.domain import CamelModel, Category


# Browse sessions
class BrowseSessionResponse(CamelModel):
    session_id: str


# Task search
class TaskSearchRequest(BaseModel):
    task: str = Field(..., min_length=1, max_length=500)


class TaskSearchResponse(CamelModel):
    tool_ids: List[str]
    reasoning: str
    method: str
    tools: List[Dict[str, Any]] = Field(default_factory=list)


# Workflows
class WorkflowRequest(BaseModel):
    goal: Optional[str] = Field(default=None, max_length=1000)


# Chat
class ChatSessionResponse(CamelModel):
    session_id: str


class ChatMessageRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)


class ChatMessageResponse(CamelModel):
    session_id: str
    reply: str
    conversation_length: int


# Admin
class AnalyzeRequest(CamelModel):
    url: str = Field(..., min_length=1)
    tool_id: Optional[str] = None
    tool_name: Optional[str] = None
    category: Optional[Category] = None


class AnalyzeResponse(CamelModel):
    job_id: str
    status: str
    message: str
