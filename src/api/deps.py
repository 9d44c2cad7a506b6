import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.clock import SystemClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.drip_runner import DripRunner
from src.adapters.smtp_email import SMTPEmailAdapter
from src.adapters.sqlite_db import SQLiteAnalyticsRepo, SQLiteLeadRepo
from src.api.auth_utils import ADMIN_SUBJECT, decode_access_token
from src.app_shell.rate_limit import RateLimiter
from src.components.analytics import AnalyticsConfig
from src.components.calculator import (
    AllocationRule,
    TaxYearConfig,
    get_allocation_rule,
    get_tax_year,
)
from src.components.drip import DripConfig, DripService
from src.components.leads import LeadsConfig
from src.core.ports.email import EmailPort
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("FINSITE_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "finsite.db")
        self.rules_path = Path(os.environ.get("FINSITE_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = Path(__file__).resolve().parents[2] / "migrations"
        self.admin_password = os.environ.get("ADMIN_PASSWORD", "")
        self.base_url = os.environ.get("BASE_URL", "").rstrip("/")
        self.cookie_secure = os.environ.get("FINSITE_COOKIE_SECURE", "false").lower() == "true"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_base_url(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> str:
    """BASE_URL env wins over the site section of the rules file."""
    return settings.base_url or rules.site.base_url


def get_tax_year_config(rules: Rules = Depends(get_rules)) -> TaxYearConfig:
    return get_tax_year(rules.calculators.tax_year)


def get_allocation_rule_config(rules: Rules = Depends(get_rules)) -> AllocationRule:
    return get_allocation_rule(rules.calculators.allocation_rule)


# --- Repos ---
def get_lead_repo(settings: Settings = Depends(get_settings)) -> SQLiteLeadRepo:
    return SQLiteLeadRepo(settings.db_path)


def get_analytics_repo(settings: Settings = Depends(get_settings)) -> SQLiteAnalyticsRepo:
    return SQLiteAnalyticsRepo(settings.db_path)


# --- Component Config ---
def get_leads_config(base_url: str = Depends(get_base_url)) -> LeadsConfig:
    return LeadsConfig(base_url=base_url)


def get_analytics_config() -> AnalyticsConfig:
    return AnalyticsConfig()


def build_drip_config(rules: Rules, base_url: str) -> DripConfig:
    return DripConfig(
        delay_days=tuple(rules.drip.delay_days),
        batch_limit=rules.drip.batch_limit,
        site_name=rules.site.name,
        base_url=base_url,
    )


# --- Adapters ---
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


_mailer_instance: EmailPort | None = None


def get_mailer() -> EmailPort:
    """SMTP when SMTP_HOST is set, otherwise the log-only dev adapter."""
    global _mailer_instance
    if _mailer_instance is None:
        smtp = SMTPEmailAdapter()
        _mailer_instance = smtp if smtp.is_configured() else DevEmailAdapter()
    return _mailer_instance


_rate_limiter_instance: RateLimiter | None = None


def get_rate_limiter(rules: Rules = Depends(get_rules)) -> RateLimiter:
    """Get rate limiter singleton."""
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        _rate_limiter_instance = RateLimiter(rules.rate_limits, get_clock())
    return _rate_limiter_instance


# --- Services ---
def get_drip_service(
    repo: SQLiteLeadRepo = Depends(get_lead_repo),
    mailer: EmailPort = Depends(get_mailer),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    base_url: str = Depends(get_base_url),
) -> DripService:
    return DripService(repo, mailer, clock, build_drip_config(rules, base_url))


def get_drip_runner(
    request: Request,
    service: DripService = Depends(get_drip_service),
) -> DripRunner:
    """The background runner started at startup, or an unstarted one for manual ticks."""
    runner: DripRunner | None = getattr(request.app.state, "drip_runner", None)
    return runner if runner is not None else DripRunner(service)


# --- Request helpers ---
def get_client_ip(request: Request) -> str:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def limit_posts(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    """Per-IP sliding-window limit on POST requests."""
    if request.method == "POST" and not limiter.check_post(get_client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests",
        )


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/admin/login", auto_error=False)


async def require_admin(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> str:
    # Cookie first (HttpOnly), then Authorization header
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        token = cookie_token.split(" ", 1)[1]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(token)
    if not payload or payload.get("sub") != ADMIN_SUBJECT:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return ADMIN_SUBJECT
