"""
Admin endpoints.

Endpoints:
- POST /api/admin/login                 - Exchange ADMIN_PASSWORD for a token
- POST /api/admin/logout                - Clear the auth cookie
- GET /api/admin/leads                  - Paginated lead search
- GET /api/admin/leads/stats            - Lead counts
- GET /api/admin/leads/recent           - Newest leads
- GET /api/admin/leads/export           - CSV download
- POST /api/admin/leads/{id}/toggle     - Flip subscription
- DELETE /api/admin/leads/{id}          - Hard delete
- POST /api/admin/drip/trigger          - Run one drip tick now
- GET /api/admin/drip/stats             - Drip progress counts
- GET /api/admin/analytics              - Page-view and affiliate stats

Every endpoint except login requires the admin token (cookie or bearer).
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel

from src.adapters.clock import SystemClock
from src.adapters.drip_runner import DripRunner
from src.adapters.sqlite_db import SQLiteAnalyticsRepo, SQLiteLeadRepo
from src.api.auth_utils import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_SUBJECT,
    create_access_token,
    verify_admin_password,
)
from src.api.deps import (
    Settings,
    get_analytics_config,
    get_analytics_repo,
    get_client_ip,
    get_clock,
    get_drip_runner,
    get_drip_service,
    get_lead_repo,
    get_leads_config,
    get_rate_limiter,
    get_settings,
    require_admin,
)
from src.app_shell.rate_limit import RateLimiter
from src.components import analytics, leads
from src.components.analytics import AnalyticsConfig, AnalyticsStatsInput
from src.components.drip import DripService, DripStatsInput
from src.components.drip import run as run_drip
from src.components.leads import (
    DeleteLeadInput,
    ExportLeadsInput,
    Lead,
    LeadsConfig,
    ListLeadsInput,
    ToggleSubscriptionInput,
)

router = APIRouter()
protected = APIRouter(dependencies=[Depends(require_admin)])


class Token(BaseModel):
    access_token: str
    token_type: str


class LoginRequest(BaseModel):
    password: str


def _lead_dict(lead: Lead) -> dict[str, Any]:
    return {
        "id": lead.id,
        "email": lead.email,
        "name": lead.name,
        "income_range": lead.income_range,
        "source": lead.source,
        "subscribed": lead.subscribed,
        "last_email_sent": lead.last_email_sent,
        "created_at": lead.created_at.isoformat() if lead.created_at else None,
    }


# --- Auth ---


@router.post("/login", response_model=Token)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> Token:
    if not rate_limiter.check_login(get_client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts",
        )
    if not settings.admin_password:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin login is disabled (ADMIN_PASSWORD not set)",
        )
    if not verify_admin_password(body.password, settings.admin_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"sub": ADMIN_SUBJECT},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
        secure=settings.cookie_secure,
    )
    return Token(access_token=access_token, token_type="bearer")


@router.post("/logout")
def logout(response: Response) -> dict[str, str]:
    response.delete_cookie(key="access_token")
    return {"status": "success"}


# --- Leads ---


@protected.get("/leads")
def list_leads(
    search: str = "",
    page: int = 1,
    page_size: int | None = None,
    repo: SQLiteLeadRepo = Depends(get_lead_repo),
    config: LeadsConfig = Depends(get_leads_config),
) -> dict[str, Any]:
    result = leads.run(
        ListLeadsInput(search=search, page=page, page_size=page_size),
        repo=repo,
        config=config,
    )
    lead_page = result.page
    if not result.success or lead_page is None:
        message = result.errors[0].message if result.errors else "Invalid lead search"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
    return {
        "leads": [_lead_dict(lead) for lead in lead_page.leads],
        "total": lead_page.total,
        "page": lead_page.page,
        "page_size": lead_page.page_size,
        "total_pages": lead_page.total_pages,
    }


@protected.get("/leads/stats")
def lead_stats(
    repo: SQLiteLeadRepo = Depends(get_lead_repo),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    return asdict(leads.get_stats(repo, time_port=clock))


@protected.get("/leads/recent")
def recent_leads(
    repo: SQLiteLeadRepo = Depends(get_lead_repo),
    config: LeadsConfig = Depends(get_leads_config),
) -> list[dict[str, Any]]:
    return [_lead_dict(lead) for lead in leads.get_recent(repo, config=config)]


@protected.get("/leads/export")
def export_leads(repo: SQLiteLeadRepo = Depends(get_lead_repo)) -> Response:
    result = leads.run(ExportLeadsInput(), repo=repo)
    return Response(
        content=result.csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="leads.csv"'},
    )


@protected.post("/leads/{lead_id}/toggle")
def toggle_lead(
    lead_id: int,
    repo: SQLiteLeadRepo = Depends(get_lead_repo),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = leads.run(ToggleSubscriptionInput(lead_id=lead_id), repo=repo, time_port=clock)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")
    return {"id": lead_id, "subscribed": result.subscribed}


@protected.delete("/leads/{lead_id}")
def delete_lead(
    lead_id: int,
    repo: SQLiteLeadRepo = Depends(get_lead_repo),
) -> dict[str, Any]:
    result = leads.run(DeleteLeadInput(lead_id=lead_id), repo=repo)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")
    return {"id": lead_id, "deleted": True}


# --- Drip ---


@protected.post("/drip/trigger")
def trigger_drip(runner: DripRunner = Depends(get_drip_runner)) -> dict[str, Any]:
    batch = runner.trigger_now()
    if batch.error:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Drip scan failed: {batch.error}",
        )
    return {"scanned": batch.scanned, "sent": batch.sent, "failed": batch.failed}


@protected.get("/drip/stats")
def drip_stats(service: DripService = Depends(get_drip_service)) -> dict[str, Any]:
    result = run_drip(DripStatsInput(), service=service)
    return asdict(result.stats)  # type: ignore[union-attr]


# --- Analytics ---


@protected.get("/analytics")
def analytics_stats(
    repo: SQLiteAnalyticsRepo = Depends(get_analytics_repo),
    config: AnalyticsConfig = Depends(get_analytics_config),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = analytics.run(AnalyticsStatsInput(), repo=repo, config=config, time_port=clock)
    return {
        "page_views": asdict(result.page_views),  # type: ignore[union-attr]
        "affiliates": asdict(result.affiliates),  # type: ignore[union-attr]
    }


router.include_router(protected)
