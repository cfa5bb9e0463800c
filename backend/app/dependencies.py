"""FastAPI dependency helpers: everything is built by create_app and kept on app.state"""

from fastapi import Request

from services.ai.chatbot import ChatSessionManager
from services.ai.task_search import TaskSearchService
from services.ai.workflow_generator import WorkflowGenerator
from services.browse_session import BrowseSessionRegistry
from services.comparison_service import ComparisonService
from services.tool_catalog import ToolCatalog
from services.trust_service import TrustService
from data.tool_repository import ToolRepository
from utils.errors import ExternalServiceError


def get_settings(request: Request):
    return request.app.state.settings


def get_repository(request: Request) -> ToolRepository:
    repository = request.app.state.repository
    if repository is None:
        raise ExternalServiceError("Document store", "Not configured")
    return repository


def get_catalog(request: Request) -> ToolCatalog:
    return request.app.state.catalog


def get_browse_sessions(request: Request) -> BrowseSessionRegistry:
    return request.app.state.browse_sessions


def get_trust_service(request: Request) -> TrustService:
    return request.app.state.trust_service


def get_comparison_service(request: Request) -> ComparisonService:
    return request.app.state.comparison_service


def get_chat_sessions(request: Request) -> ChatSessionManager:
    return request.app.state.chat_sessions


def get_task_search(request: Request) -> TaskSearchService:
    return request.app.state.task_search


def get_workflow_generator(request: Request) -> WorkflowGenerator:
    return request.app.state.workflow_generator
