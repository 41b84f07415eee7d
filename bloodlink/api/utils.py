"""
Utility functions for API endpoints
"""
from fastapi import HTTPException, Request

from bloodlink.core.errors import RateLimitedError
from bloodlink.core.rate_limit import RateLimiter
from bloodlink.database.storage import Repository


def get_repository(request: Request) -> Repository:
    """
    Repository the application was built with (see main.create_app)
    """
    return request.app.state.repository


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_user_id(request: Request) -> str:
    """
    Extract the caller's user ID from request headers

    Identity is established by the external provider in front of this API.
    Raises HTTPException with 400 status if the header is missing.
    """
    user_id = request.headers.get('X-User-ID')
    if not user_id:
        raise HTTPException(
            status_code=400,
            detail="Missing X-User-ID header. This header is required for this request."
        )
    return user_id


def enforce_rate_limit(request: Request, action: str) -> str:
    """
    Count an attempt of `action` for the calling user, raise RateLimitedError over the limit

    Returns the user id.
    """
    user_id = get_user_id(request)
    key = f"{action}:{user_id}"
    if get_rate_limiter(request).is_rate_limited(key):
        raise RateLimitedError(key)
    return user_id
