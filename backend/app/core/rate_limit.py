"""
Rate limiting for the analysis endpoints (slowapi).
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import get_settings
from app.core.errors import ErrorCodes, get_error_response

limiter = Limiter(key_func=get_remote_address)


def analysis_rate_limit() -> str:
    """Limit string read from settings on every request, so reloads apply."""
    return f"{get_settings().rate_limit_per_minute}/minute"


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded with a structured error response."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    return JSONResponse(
        status_code=429,
        content=get_error_response(ErrorCodes.RATE_LIMIT_EXCEEDED, correlation_id=correlation_id),
        headers={
            "Retry-After": str(getattr(exc, 'retry_after', None) or 60),
            "X-Correlation-ID": correlation_id
        }
    )
