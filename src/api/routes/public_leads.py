"""
Public lead and tracking endpoints.

Endpoints:
- POST /api/subscribe          - Capture a lead (starts the drip sequence)
- GET /unsubscribe/{token}     - One-click unsubscribe from email footer
- GET /api/track-affiliate     - Record an outbound affiliate click
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from src.adapters.clock import SystemClock
from src.adapters.sqlite_db import SQLiteAnalyticsRepo, SQLiteLeadRepo
from src.api.deps import (
    get_analytics_config,
    get_analytics_repo,
    get_client_ip,
    get_clock,
    get_lead_repo,
    get_leads_config,
    get_rate_limiter,
)
from src.app_shell.rate_limit import RateLimiter
from src.components import analytics, leads
from src.components.analytics import AnalyticsConfig, TrackAffiliateClickInput
from src.components.leads import CaptureLeadInput, LeadsConfig, UnsubscribeInput

router = APIRouter()


# --- Request/Response Models ---


class SubscribeRequest(BaseModel):
    email: str = Field(..., max_length=320)
    name: str | None = Field(None, max_length=200)
    income_range: str | None = Field(None, max_length=100)
    source: str | None = Field(None, max_length=100)


class SubscribeResponse(BaseModel):
    success: bool
    message: str


class UnsubscribeResponse(BaseModel):
    success: bool
    email: str
    message: str


# --- Endpoints ---


@router.post("/api/subscribe", response_model=SubscribeResponse)
def subscribe(
    body: SubscribeRequest,
    request: Request,
    repo: SQLiteLeadRepo = Depends(get_lead_repo),
    config: LeadsConfig = Depends(get_leads_config),
    clock: SystemClock = Depends(get_clock),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> SubscribeResponse:
    """
    Capture a lead.

    Repeat signups merge non-empty fields into the existing lead and get the
    same response, so the endpoint does not reveal who is on the list.
    """
    if not rate_limiter.check_subscribe(get_client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many signups from this address, try again later",
        )

    result = leads.run(
        CaptureLeadInput(
            email=body.email,
            name=body.name,
            income_range=body.income_range,
            source=body.source,
        ),
        repo=repo,
        config=config,
        time_port=clock,
    )
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.errors[0].message,
        )

    return SubscribeResponse(success=True, message="You're subscribed. Check your inbox soon!")


@router.get("/unsubscribe/{token}", response_model=UnsubscribeResponse)
def unsubscribe(
    token: str,
    repo: SQLiteLeadRepo = Depends(get_lead_repo),
    clock: SystemClock = Depends(get_clock),
) -> UnsubscribeResponse:
    result = leads.run(UnsubscribeInput(token=token), repo=repo, time_port=clock)

    if not result.success:
        code = result.errors[0].code
        if code == "NOT_FOUND":
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid link")

    message = (
        "You were already unsubscribed"
        if result.already_unsubscribed
        else "You have been unsubscribed"
    )
    return UnsubscribeResponse(success=True, email=result.email or "", message=message)


@router.get("/api/track-affiliate", status_code=status.HTTP_204_NO_CONTENT)
def track_affiliate(
    request: Request,
    affiliate: str = "",
    page: str = "",
    repo: SQLiteAnalyticsRepo = Depends(get_analytics_repo),
    config: AnalyticsConfig = Depends(get_analytics_config),
    clock: SystemClock = Depends(get_clock),
) -> Response:
    result = analytics.run(
        TrackAffiliateClickInput(affiliate=affiliate, page=page, ip=get_client_ip(request)),
        repo=repo,
        config=config,
        time_port=clock,
    )
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.errors[0].message,
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
