"""Tool listing, lookup, comparison and browse session routes"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from app.dependencies import get_browse_sessions, get_catalog, get_comparison_service, get_trust_service
from schemas.api import BrowseSessionResponse
from schemas.domain import Category, Freshness, PricingModel, ToolFilters, ToolQuery
from services.browse_session import BrowseSessionRegistry, SessionClosedError
from services.comparison_service import ComparisonService
from services.tool_catalog import ToolCatalog
from services.tool_filters import normalize_sort
from services.trust_service import TrustService
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_PAGE_SIZE = 100


def _parse_enum_list(enum_cls, values: List[str], name: str):
    parsed = []
    for raw in values:
        for value in raw.split(","):
            value = value.strip()
            if not value:
                continue
            try:
                parsed.append(enum_cls(value))
            except ValueError:
                allowed = ", ".join(member.value for member in enum_cls)
                raise ValidationError(f"Invalid {name} '{value}'. Allowed: {allowed}")
    return list(dict.fromkeys(parsed))


def build_tool_query(
    sort: str = "rising",
    category: List[str] = (),
    pricing: List[str] = (),
    truly_free: bool = False,
    no_signup: bool = False,
    commercial_use: bool = False,
    freshness: str = "all",
    limit: int = 20,
    offset: int = 0,
) -> ToolQuery:
    """Translate listing query parameters into a ToolQuery; raises ValidationError on bad values"""
    try:
        sort_option = normalize_sort(sort)
    except ValueError as e:
        raise ValidationError(str(e))
    try:
        freshness_window = Freshness(freshness)
    except ValueError:
        raise ValidationError(f"Invalid freshness '{freshness}'. Allowed: 24h, 7d, 30d, all")
    if offset < 0:
        raise ValidationError("offset must be >= 0")

    filters = ToolFilters(
        truly_free=truly_free,
        no_signup=no_signup,
        commercial_use=commercial_use,
        pricing_models=_parse_enum_list(PricingModel, list(pricing), "pricing model"),
        categories=_parse_enum_list(Category, list(category), "category"),
        freshness=freshness_window,
    )
    return ToolQuery(filters=filters, sort=sort_option, limit=min(limit, MAX_PAGE_SIZE), offset=offset)


@router.get("")
async def list_tools(
    sort: str = "rising",
    category: List[str] = Query(default=[]),
    pricing: List[str] = Query(default=[]),
    truly_free: bool = False,
    no_signup: bool = False,
    commercial_use: bool = False,
    freshness: str = "all",
    limit: int = 20,
    offset: int = 0,
    x_browse_session: Optional[str] = Header(default=None),
    catalog: ToolCatalog = Depends(get_catalog),
    sessions: BrowseSessionRegistry = Depends(get_browse_sessions),
):
    """List tools with filters, sorting and pagination"""
    query = build_tool_query(
        sort, category, pricing, truly_free, no_signup, commercial_use, freshness, limit, offset
    )

    superseded = False
    if x_browse_session:
        session = sessions.get(x_browse_session)
        if session is None:
            raise NotFoundError(f"Browse session not found: {x_browse_session}")
        try:
            page = await session.load(query)
        except SessionClosedError:
            raise NotFoundError(f"Browse session has ended: {x_browse_session}")
        if page is None:
            # A newer request won; answer with its page, flagged
            superseded = True
            page = session.current
        if page is None:
            raise HTTPException(status_code=409, detail="Request superseded by a newer listing request")
    else:
        # Stateless requests fall back on empty results only when the store has no tools
        page = await catalog.list_tools(query)

    body = page.model_dump(mode="json", by_alias=True)
    body["superseded"] = superseded
    return body


@router.post("/sessions", status_code=201, response_model=BrowseSessionResponse)
async def create_browse_session(sessions: BrowseSessionRegistry = Depends(get_browse_sessions)):
    session = sessions.create()
    return BrowseSessionResponse(session_id=session.session_id)


@router.delete("/sessions/{session_id}")
async def end_browse_session(session_id: str, sessions: BrowseSessionRegistry = Depends(get_browse_sessions)):
    if not sessions.end(session_id):
        raise NotFoundError(f"Browse session not found: {session_id}")
    return {"sessionId": session_id, "ended": True}


@router.get("/compare")
async def compare_tools(
    ids: List[str] = Query(default=[]),
    comparison: ComparisonService = Depends(get_comparison_service),
):
    """Compare 2-4 tools side by side (ids may repeat or be comma-separated)"""
    tool_ids = [tid for raw in ids for tid in raw.split(",")]
    return await comparison.compare(tool_ids)


@router.get("/{tool_id}")
async def get_tool(tool_id: str, catalog: ToolCatalog = Depends(get_catalog)):
    tool = await catalog.get_tool(tool_id)
    return tool.model_dump(mode="json", by_alias=True)


@router.get("/{tool_id}/trust")
async def get_tool_trust(
    tool_id: str,
    catalog: ToolCatalog = Depends(get_catalog),
    trust_service: TrustService = Depends(get_trust_service),
):
    await catalog.get_tool(tool_id)
    trust = await trust_service.get_trust_score(tool_id)
    if trust is None:
        raise NotFoundError(f"Trust score not available for {tool_id}")
    return {"toolId": tool_id, **TrustService.describe(trust)}
