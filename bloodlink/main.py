"""
FastAPI app

- create_app builds an application around an explicit repository and rate
  limiter (tests pass an in-memory repository)
- CORS configured for the browser front end
- Domain errors mapped to HTTP status codes in one place
- Basic health check
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from bloodlink.api import router
from bloodlink.api.middleware import TimingMiddleware
from bloodlink.core.config import (
    CACHE_TTL_SECONDS,
    CORS_ORIGINS,
    DATA_DIR,
    LOG_LEVEL,
    RATE_LIMIT_MAX_ATTEMPTS,
    RATE_LIMIT_WINDOW_SECONDS,
    SEED_DEMO_DATA,
)
from bloodlink.core.errors import (
    BloodLinkError,
    ConflictError,
    DuplicateProfileError,
    IncompatibilityError,
    InvalidTransitionError,
    NotFoundError,
    RateLimitedError,
)
from bloodlink.core.rate_limit import RateLimiter
from bloodlink.database.seed import seed_demo_data
from bloodlink.database.storage import Repository

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    NotFoundError: 404,
    IncompatibilityError: 422,
    InvalidTransitionError: 409,
    ConflictError: 409,
    DuplicateProfileError: 409,
    RateLimitedError: 429,
}


async def handle_domain_error(request: Request, exc: BloodLinkError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        400,
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "error": exc.kind})


async def handle_validation_error(request: Request, exc: ValidationError):
    # Raised when merged entity data fails the schema inside a service call
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(include_url=False, include_context=False), "error": "validation"},
    )


def create_app(repository: Optional[Repository] = None,
               rate_limiter: Optional[RateLimiter] = None) -> FastAPI:
    """
    Application factory

    Without arguments, uses the JSON-file repository under DATA_DIR and the
    configured rate limits.
    """
    if repository is None:
        repository = Repository.json_files(DATA_DIR, cache_ttl_seconds=CACHE_TTL_SECONDS)
        if SEED_DEMO_DATA:
            seed_demo_data(repository)

    app = FastAPI(title="BloodLink")
    app.state.repository = repository
    app.state.rate_limiter = rate_limiter or RateLimiter(
        max_attempts=RATE_LIMIT_MAX_ATTEMPTS,
        window_seconds=RATE_LIMIT_WINDOW_SECONDS,
    )

    # Logs request duration and user id for all requests
    app.add_middleware(TimingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    app.add_exception_handler(BloodLinkError, handle_domain_error)
    app.add_exception_handler(ValidationError, handle_validation_error)

    app.include_router(router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """
        Basic health check
        """
        return {"status": "ok"}

    return app


app = create_app()
