"""Global error handling middleware for production"""

import logging
import traceback
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Catch unhandled exceptions and return {error, details} bodies"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
            return response

        except ValidationError as e:
            # Model validation inside the app is a server bug, not bad input
            logger.error(
                f"Model validation failed in {request.url.path}: {str(e)}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "details": str(e),
                }
            )

        except ValueError as e:
            # Bad request errors
            logger.warning(f"ValueError in {request.url.path}: {str(e)}")
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Invalid request",
                    "details": str(e),
                }
            )

        except ConnectionError as e:
            # External API failures
            logger.error(f"Connection error in {request.url.path}: {str(e)}")
            return JSONResponse(
                status_code=503,
                content={
                    "error": "External service temporarily unavailable",
                    "details": str(e),
                }
            )

        except Exception as e:
            logger.error(
                f"Unhandled exception in {request.url.path}: {type(e).__name__}: {str(e)}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )

            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "details": str(e),
                }
            )
