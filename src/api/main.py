import logging
import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from src.adapters.drip_runner import DripRunner
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import SQLiteAnalyticsRepo, SQLiteLeadRepo
from src.api.deps import (
    build_drip_config,
    get_client_ip,
    get_clock,
    get_mailer,
    get_settings,
    limit_posts,
)
from src.app_shell.config import validate_ops_rules
from src.components import analytics
from src.components.analytics import TrackPageViewInput
from src.components.drip import DripService
from src.rules.loader import load_rules

# Logging setup
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules, validate, migrate and build the drip service on startup (fail-fast)
    runner: DripRunner | None = None
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
        logger.info("Rules loaded from %s", settings.rules_path)
        if rules.drip.enabled:
            service = DripService(
                SQLiteLeadRepo(settings.db_path),
                get_mailer(),
                get_clock(),
                build_drip_config(rules, settings.base_url or rules.site.base_url),
            )
            runner = DripRunner(
                service,
                interval_seconds=rules.drip.interval_seconds,
                start_delay_seconds=rules.drip.start_delay_seconds,
            )
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    app.state.analytics_repo = SQLiteAnalyticsRepo(settings.db_path)

    if runner is not None:
        runner.start()
        app.state.drip_runner = runner

    yield

    if runner is not None:
        runner.stop()


app = FastAPI(
    title="Finsite API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import admin, calculators, public_leads  # noqa: E402

app.include_router(
    calculators.router,
    prefix="/api/calculate",
    tags=["Calculators"],
    dependencies=[Depends(limit_posts)],
)
app.include_router(public_leads.router, tags=["Leads"], dependencies=[Depends(limit_posts)])
app.include_router(
    admin.router,
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(limit_posts)],
)


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "https://autolytiqs.com",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def track_page_views(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Record successful public GETs; tracking errors never affect the response."""
    response = await call_next(request)

    repo = getattr(request.app.state, "analytics_repo", None)
    if repo is None or response.status_code >= 400:
        return response

    inp = TrackPageViewInput(
        path=request.url.path,
        method=request.method,
        referrer=request.headers.get("referer", ""),
        user_agent=request.headers.get("user-agent", ""),
        ip=get_client_ip(request),
    )
    try:
        await run_in_threadpool(analytics.run, inp, repo=repo)
    except Exception:
        logger.exception("Failed to record page view for %s", request.url.path)
    return response


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
