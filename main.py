import uvicorn
from starlette.middleware.base import BaseHTTPMiddleware

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import InterfaceError, OperationalError

from app.core.config import settings
from app.core.errors import AppError, StoreUnavailable, Unauthenticated
from app.core.logging_config import configure_logging, get_logger
from app.core.redis_client import close_redis, init_redis
from app.api.v1.api import api_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    # Note: Database tables are managed by Alembic migrations
    configure_logging()
    await init_redis()
    logger.info("Workspace Notes API started")
    yield
    # Shutdown
    await close_redis()


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """Keep redirects on HTTPS when running behind a TLS-terminating proxy"""
    async def dispatch(self, request: Request, call_next):
        is_https = (
            request.headers.get("x-forwarded-proto") == "https" or
            request.headers.get("x-forwarded-ssl") == "on" or
            request.headers.get("x-forwarded-port") == "443"
        )
        if is_https:
            request.scope["scheme"] = "https"

        response = await call_next(request)

        # FastAPI's trailing-slash redirects would otherwise point at http://
        if is_https and response.status_code in (301, 302, 303, 307, 308):
            location = response.headers.get("location")
            if location and location.startswith("http://"):
                response.headers["location"] = location.replace("http://", "https://", 1)

        return response


app = FastAPI(
    title="Workspace Notes API",
    description="Workspaces, team members and selectively shared notes",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
async def store_unavailable_handler(request: Request, exc: Exception):
    logger.error(f"Store unavailable while serving {request.url.path}: {exc}")
    error = StoreUnavailable()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


app.add_middleware(HTTPSRedirectMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add trusted host middleware for production
if not settings.DEBUG:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.get_allowed_hosts_list()
    )

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {"message": "Workspace Notes API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        proxy_headers=True,
        forwarded_allow_ips="*"
    )
