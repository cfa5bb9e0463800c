"""Admin routes: queue tool analysis and inspect analysis jobs"""

import hmac
import logging
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Header
from fastapi.concurrency import run_in_threadpool

from app.dependencies import get_repository, get_settings
from data.document_store import StoreError
from data.tool_repository import ToolRepository
from schemas.api import AnalyzeRequest, AnalyzeResponse
from utils.errors import AuthenticationError, ExternalServiceError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


def require_admin(
    x_admin_key: str = Header(None, alias="X-Admin-Key"),
    settings=Depends(get_settings),
) -> None:
    """Check X-Admin-Key against ADMIN_API_KEY; open access when no key is configured"""
    expected = settings.ADMIN_API_KEY
    if not expected:
        logger.warning("⚠️  ADMIN_API_KEY not set - admin endpoints are unprotected")
        return
    if not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise AuthenticationError("Invalid or missing admin key")


def validate_tool_url(url: str) -> str:
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("url must be an absolute http(s) URL")
    return url


@router.post("/analyze", status_code=202, response_model=AnalyzeResponse, dependencies=[Depends(require_admin)])
async def queue_analysis(
    analyze_request: AnalyzeRequest,
    repository: ToolRepository = Depends(get_repository),
):
    """Queue a tool website for the enrichment pipeline"""
    url = validate_tool_url(analyze_request.url)
    try:
        job = await run_in_threadpool(
            repository.create_job,
            url,
            analyze_request.tool_id,
            analyze_request.tool_name,
            analyze_request.category,
        )
    except StoreError as e:
        logger.error(f"📋 [JOBS] Could not queue analysis for {url}: {e}")
        raise ExternalServiceError("Document store", "Could not queue analysis job")

    return AnalyzeResponse(
        job_id=job.id,
        status="queued",
        message=f"Analysis queued for {url}",
    )


@router.get("/jobs/{job_id}", dependencies=[Depends(require_admin)])
async def get_job(job_id: str, repository: ToolRepository = Depends(get_repository)):
    try:
        job = await run_in_threadpool(repository.get_job, job_id)
    except StoreError as e:
        logger.error(f"📋 [JOBS] Could not read job {job_id}: {e}")
        raise ExternalServiceError("Document store", "Could not read analysis job")
    if job is None:
        raise NotFoundError(f"Analysis job not found: {job_id}")
    return job.model_dump(mode="json", by_alias=True)
