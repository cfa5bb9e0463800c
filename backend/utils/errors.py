"""Common error classes and utilities"""

from fastapi import HTTPException


class ToolNotFoundError(HTTPException):
    """Tool identifier unknown to both the store and the fallback dataset"""
    def __init__(self, tool_id: str):
        self.tool_id = tool_id
        super().__init__(status_code=404, detail=f"Tool not found: {tool_id}")


class NotFoundError(HTTPException):
    """Generic missing resource (sessions, jobs)"""
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class ExternalServiceError(HTTPException):
    """External service integration errors"""
    def __init__(self, service: str, detail: str = "External service unavailable"):
        super().__init__(status_code=503, detail=f"{service}: {detail}")


class FeatureDisabledError(HTTPException):
    """Optional feature unavailable because its credentials are not configured"""
    def __init__(self, feature: str):
        super().__init__(status_code=503, detail=f"{feature} is disabled: ANTHROPIC_API_KEY not configured")


class ValidationError(HTTPException):
    """Request validation errors"""
    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=400, detail=detail)


class AuthenticationError(HTTPException):
    """Admin key missing or wrong"""
    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(status_code=401, detail=detail)
