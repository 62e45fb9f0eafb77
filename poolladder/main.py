import logging
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.trustedhost import TrustedHostMiddleware

from poolladder.core.config import settings
from poolladder.api.router import router
from poolladder.services.errors import LadderError, PersistenceError, PublishError
from poolladder.services.publish import GitHubPublisher
from poolladder.services.rate_limit import LoginRateLimiter
from poolladder.storage.repository import LadderRepository, build_repository

logger = logging.getLogger(__name__)


def create_app(
    repository: LadderRepository | None = None,
    publisher_factory: Callable[[], GitHubPublisher] | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repo = repository or build_repository(settings)
        app.state.repository = repo
        app.state.store = repo.load()
        app.state.login_limiter = LoginRateLimiter(
            settings.LOGIN_MAX_ATTEMPTS, settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS
        )
        app.state.publisher_factory = publisher_factory or (lambda: GitHubPublisher.from_settings(settings))
        yield

    app = FastAPI(
        title="Pool Ladder",
        version="0.1.0",
        lifespan=lifespan,
    )

    allowed_hosts = [h.strip() for h in settings.ALLOWED_HOSTS.split(",") if h.strip()]
    if not allowed_hosts:
        allowed_hosts = ["*"]
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response: Response = await call_next(request)
        if settings.SECURITY_HEADERS_ENABLED:
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Content-Security-Policy"] = "frame-ancestors 'none'; base-uri 'self'"
            if settings.ENV != "dev":
                response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    @app.exception_handler(LadderError)
    async def ladder_error_handler(request: Request, exc: LadderError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Failed to save ladder data", "code": "persistence_error"})

    @app.exception_handler(PublishError)
    async def publish_error_handler(request: Request, exc: PublishError):
        logger.error("Publish failure: %s", exc)
        return JSONResponse(
            status_code=502,
            content={"detail": "Failed to publish changes", "reason": str(exc), "code": "publish_error"},
        )

    app.include_router(router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()
