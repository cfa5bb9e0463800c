"""
Findora API - Application Factory
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import config
from data.db_wrapper import create_store
from data.document_store import DocumentStore, StoreError
from data.fallback_tools import load_fallback_tools, load_fallback_trust_scores
from data.tool_repository import ToolRepository
from integrations.anthropic_client import create_anthropic_client
from middleware.error_handler import ErrorHandlerMiddleware
from schemas.domain import Tool
from services.ai.chatbot import ChatSessionManager
from services.ai.task_search import TaskSearchService
from services.ai.workflow_generator import WorkflowGenerator
from services.browse_session import BrowseSessionRegistry
from services.comparison_service import ComparisonService
from services.tool_catalog import ToolCatalog
from services.trust_service import TrustService
from utils.rate_limit import limiter
from app.api.routes import admin, categories, chat, health, search, tools, workflows


# Configure logging
def setup_logging(settings=None):
    """Setup structured logging for production"""
    settings = settings or config
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # Clear any existing handlers
    logging.root.handlers = []

    if settings.STRUCTURED_LOGGING:
        # JSON-like structured logging for production
        formatter = logging.Formatter(
            '{"time":"%(asctime)s", "level":"%(levelname)s", "name":"%(name)s", "message":"%(message)s"}'
        )
    else:
        # Human-readable logging for development
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logging.root.setLevel(log_level)
    logging.root.addHandler(console_handler)

    # Set specific levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


def create_app(
    settings=None,
    store: Optional[DocumentStore] = None,
    llm_client=None,
    fallback_tools: Optional[List[Tool]] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    `store` and `llm_client` override the instances built from configuration
    (tests pass a temporary SQLite store and a mocked Claude client).
    """
    settings = settings or config

    setup_logging(settings)
    logger = logging.getLogger(__name__)

    config_errors = settings.validate()
    if config_errors:
        logger.error(f"❌ Configuration errors: {', '.join(config_errors)}")
        if settings.IS_PRODUCTION:
            raise ValueError(f"Production configuration invalid: {', '.join(config_errors)}")
        else:
            logger.warning("⚠️  Configuration warnings (development mode - proceeding anyway)")

    logger.info(f"🚀 Starting application with config: {settings.get_summary()}")

    if store is None:
        try:
            store = create_store(settings)
        except (StoreError, ValueError) as e:
            # Listings keep working from the static dataset
            logger.error(f"❌ Document store unavailable, serving static dataset only: {e}")
            store = None

    if llm_client is None:
        llm_client = create_anthropic_client(settings.ANTHROPIC_API_KEY)

    repository = ToolRepository(store) if store is not None else None
    catalog = ToolCatalog(
        repository,
        fallback_tools=fallback_tools if fallback_tools is not None else load_fallback_tools(),
        timeout=settings.STORE_TIMEOUT_SECONDS,
        max_scan=settings.MAX_SCAN,
    )
    trust_service = TrustService(catalog, load_fallback_trust_scores())
    browse_sessions = BrowseSessionRegistry(catalog)
    chat_sessions = ChatSessionManager(llm_client, model=settings.ANTHROPIC_MODEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        browse_sessions.close_all()
        chat_sessions.close_all()
        if store is not None:
            store.close()
        logger.info("👋 Findora API shut down")

    app = FastAPI(
        title="Findora API",
        description="Directory of AI tools with transparent pricing and trust scores",
        version=health.API_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.repository = repository
    app.state.catalog = catalog
    app.state.browse_sessions = browse_sessions
    app.state.trust_service = trust_service
    app.state.comparison_service = ComparisonService(catalog, trust_service)
    app.state.chat_sessions = chat_sessions
    app.state.task_search = TaskSearchService(llm_client, model=settings.ANTHROPIC_MODEL)
    app.state.workflow_generator = WorkflowGenerator(llm_client, model=settings.ANTHROPIC_MODEL)

    # Add error handling middleware (first, to catch all errors)
    app.add_middleware(ErrorHandlerMiddleware)

    if settings.ALLOWED_ORIGINS:
        allowed_origins = settings.ALLOWED_ORIGINS
        logger.info(f"✅ CORS configured with {len(allowed_origins)} allowed origins")
    else:
        allowed_origins = ["*"]
        logger.warning("⚠️  WARNING: ALLOWED_ORIGINS not set - using permissive CORS policy!")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Browse-Session", "X-Admin-Key"],
    )

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request, exc):
        return JSONResponse(
            status_code=429,
            content={"error": f"Rate limit exceeded: {exc.detail}"}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    app.include_router(health.router, tags=["health"])
    app.include_router(tools.router, prefix="/api/tools", tags=["tools"])
    app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
    app.include_router(search.router, prefix="/api/search", tags=["search"])
    app.include_router(workflows.router, prefix="/api/workflows", tags=["workflows"])
    app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

    return app
