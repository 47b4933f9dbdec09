"""FastAPI 애플리케이션 진입점."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from thereyet.api import location
from thereyet.core.config import get_settings
from thereyet.core.logger import get_logger
from thereyet.core.logging_config import configure_logging
from thereyet.core.readiness import collect_readiness_status
from thereyet.services.location_client import release_location_client

configure_logging()
logger = get_logger(__name__)
settings = get_settings()


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _resolve_docs_mode(mode: str) -> str:
    normalized = (mode or "").strip().lower()
    if normalized in {"disabled", "public"}:
        return normalized
    logger.warning("Invalid DOCS_MODE value, falling back to disabled: %s", mode)
    return "disabled"


def _configure_proxy_headers(app_: FastAPI) -> None:
    if not settings.PROXY_HEADERS_ENABLED:
        return

    trusted_hosts = _split_csv(settings.PROXY_TRUSTED_HOSTS) or ["127.0.0.1"]
    app_.add_middleware(ProxyHeadersMiddleware, trusted_hosts=trusted_hosts)


def _configure_cors(app_: FastAPI) -> None:
    origins = _split_csv(settings.CORS_ALLOW_ORIGINS)
    if not origins:
        return

    allow_methods = _split_csv(settings.CORS_ALLOW_METHODS) or ["GET"]
    allow_headers = _split_csv(settings.CORS_ALLOW_HEADERS) or ["Content-Type"]

    app_.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=allow_methods,
        allow_headers=allow_headers,
    )


@asynccontextmanager
async def lifespan(app_: FastAPI) -> AsyncIterator[None]:
    """종료 시 공유 `LocationClient`를 정리합니다."""
    yield
    release_location_client()


docs_mode = _resolve_docs_mode(settings.DOCS_MODE)

app = FastAPI(
    title="thereyet",
    docs_url="/docs" if docs_mode == "public" else None,
    redoc_url="/redoc" if docs_mode == "public" else None,
    openapi_url="/openapi.json" if docs_mode == "public" else None,
    lifespan=lifespan,
)

_configure_proxy_headers(app)
_configure_cors(app)

app.include_router(location.router)


@app.middleware("http")
async def add_security_headers(request: Request, call_next) -> Response:
    """기본 보안 헤더를 응답에 추가합니다."""
    response = await call_next(request)
    if not settings.SECURITY_HEADERS_ENABLED:
        return response

    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Cache-Control", "no-store")
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """예상하지 못한 예외를 표준 형식으로 처리합니다."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    message = str(exc) if settings.EXPOSE_INTERNAL_ERRORS else "Internal server error"
    return JSONResponse(status_code=500, content={"detail": message})


@app.get("/")
def health_check() -> dict:
    """헬스 체크 엔드포인트."""
    return {"status": "ok", "message": "thereyet location service is running"}


@app.get("/health/ready")
async def readiness_check() -> JSONResponse:
    """외부 공급자 연결 가능 여부를 반환합니다."""
    result = await collect_readiness_status(settings)
    status_code = 200 if result["status"] == "ready" else 503
    return JSONResponse(status_code=status_code, content=result)
