from __future__ import annotations

import logging
import os
import time

from dotenv import load_dotenv
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from contribution_analyzer.routers import github_proxy, health, stats
from contribution_analyzer.services.contribution_stats_service import ContributionStatsService
from contribution_analyzer.services.github_client import GitHubClient
from contribution_analyzer.services.scoring_config import env_flag

load_dotenv()

app = FastAPI(title="Contribution Analyzer API", version=health.HEALTH_VERSION)
logger = logging.getLogger("contribution_analyzer.api")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
logger.propagate = False
logger.setLevel(logging.INFO)


def _slow_request_ms_threshold() -> float:
    raw = os.getenv("API_SLOW_REQUEST_MS", "1500").strip()
    try:
        return max(25.0, float(raw))
    except ValueError:
        return 1500.0


def _build_route_signature(request: Request) -> tuple[str, str, str]:
    route = request.scope.get("route")
    route_path = ""
    route_name = ""
    if route is not None:
        route_path = str(getattr(route, "path", "") or "")
        route_name = str(getattr(route, "name", "") or "")
    raw_path = request.url.path
    request_path = route_path if route_path else raw_path
    return request_path, route_name, raw_path


def _client_identity(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",", 1)[0].strip()
    remote = request.client.host if request.client and request.client.host else ""
    if remote:
        return remote
    return "unknown"


def _correlation_id(request: Request) -> str:
    for key in ("x-request-id", "x-amzn-trace-id", "cf-ray"):
        value = request.headers.get(key)
        if value:
            return value
    return "none"


def _apply_runtime_response_headers(response: Response, request: Request, elapsed_ms: float) -> None:
    response.headers["x-contribution-runtime-ms"] = f"{max(0.1, float(elapsed_ms)):.4f}"
    correlation_id = _correlation_id(request)
    if correlation_id != "none":
        response.headers["x-contribution-request-id"] = correlation_id


def _log_request(
    *,
    request: Request,
    method: str,
    request_path: str,
    route_label: str,
    status_code: int,
    elapsed_ms: float,
    exc_name: str | None,
    exc_message: str | None,
) -> None:
    logger.warning(
        "slow_api_request method=%s path=%s route=%s raw_path=%s query=%s status=%s elapsed_ms=%.2f "
        "correlation=%s client=%s exception=%s",
        method,
        request_path,
        route_label,
        request.url.path,
        str(request.query_params) or "-",
        status_code,
        elapsed_ms,
        _correlation_id(request),
        _client_identity(request),
        f"{exc_name or 'none'}{':' + exc_message if exc_message else ''}",
    )


# Configure CORS
allowed_origins_str = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.github_client = GitHubClient()
app.state.stats_service = ContributionStatsService.from_env(source=app.state.github_client)
scoring_config = app.state.stats_service.config
logger.info(
    "api_configured github_token=%s since_days=%s max_commits=%s cache_ttl_s=%s",
    "loaded" if app.state.github_client.has_token else "missing",
    scoring_config.since_days,
    scoring_config.max_commits,
    scoring_config.cache_ttl_seconds,
)


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation."""
    return RedirectResponse(url="/docs")


app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(stats.router, prefix="/api", tags=["stats"])
app.include_router(github_proxy.router, prefix="/api", tags=["github"])


@app.middleware("http")
async def log_request_timing(request: Request, call_next):
    start = time.perf_counter()
    status_code: int | None = None
    exc_name: str | None = None
    exc_message: str | None = None
    method = request.method
    response = None
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    except Exception as exc:
        status_code = 500
        exc_name = exc.__class__.__name__
        exc_message = str(exc)
        raise
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if status_code is None:
            status_code = 500
        if response is not None:
            _apply_runtime_response_headers(response, request, elapsed_ms)
        if elapsed_ms >= _slow_request_ms_threshold() or env_flag("API_LOG_ALL_REQUESTS") or status_code >= 500:
            request_path, route_name, _ = _build_route_signature(request)
            _log_request(
                request=request,
                method=method,
                request_path=request_path,
                route_label=route_name or "unknown",
                status_code=status_code,
                elapsed_ms=elapsed_ms,
                exc_name=exc_name,
                exc_message=exc_message,
            )
