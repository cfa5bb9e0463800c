"""Workflow generation routes"""

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from app.dependencies import get_catalog, get_workflow_generator
from config import config
from schemas.api import WorkflowRequest
from services.ai.workflow_generator import WorkflowGenerator
from services.tool_catalog import ToolCatalog
from utils.errors import FeatureDisabledError, ValidationError
from utils.rate_limit import limiter

router = APIRouter()


@router.post("/generate")
@limiter.limit(config.WORKFLOW_RATE_LIMIT)
async def generate_workflow(
    request: Request,
    workflow_request: WorkflowRequest,
    catalog: ToolCatalog = Depends(get_catalog),
    generator: WorkflowGenerator = Depends(get_workflow_generator),
):
    goal = (workflow_request.goal or "").strip()
    if not goal:
        raise ValidationError("Goal is required")
    if not generator.enabled:
        raise FeatureDisabledError("Workflow generator")

    tools = await catalog.context_tools()
    workflow = await run_in_threadpool(generator.generate, goal, tools)
    return {"goal": goal, "workflow": workflow}
