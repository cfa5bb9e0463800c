"""Health check routes"""

from fastapi import APIRouter

from schemas.domain import format_timestamp, utc_now

router = APIRouter()

API_VERSION = "1.0.0"


@router.get("/")
async def root():
    return {"message": "Welcome to Findora API", "status": "running"}


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "Findora API",
        "version": API_VERSION,
        "timestamp": format_timestamp(utc_now()),
    }
