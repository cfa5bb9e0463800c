"""Task-based tool search routes"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from app.dependencies import get_catalog, get_task_search
from config import config
from schemas.api import TaskSearchRequest, TaskSearchResponse
from services.ai.task_search import TASK_SUGGESTIONS, TaskSearchService
from services.tool_catalog import ToolCatalog
from utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/tasks", response_model=TaskSearchResponse)
@limiter.limit(config.SEARCH_RATE_LIMIT)
async def search_by_task(
    request: Request,
    search_request: TaskSearchRequest,
    catalog: ToolCatalog = Depends(get_catalog),
    task_search: TaskSearchService = Depends(get_task_search),
):
    """Match a plain-language task description to tools in the directory"""
    task = search_request.task.strip()
    tools = await catalog.context_tools()
    result = await run_in_threadpool(task_search.search, task, tools)

    by_id = {tool.id: tool for tool in tools}
    matched = [by_id[tid] for tid in result["toolIds"] if tid in by_id]
    logger.info(f"🔍 [TASK SEARCH] '{task[:60]}' matched {len(matched)} tools via {result['method']}")

    return TaskSearchResponse(
        tool_ids=result["toolIds"],
        reasoning=result["reasoning"],
        method=result["method"],
        tools=[tool.model_dump(mode="json", by_alias=True) for tool in matched],
    )


@router.get("/suggestions")
async def task_suggestions():
    """Example tasks shown in the search box"""
    return {"suggestions": TASK_SUGGESTIONS}
