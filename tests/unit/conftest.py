"""
HTTP-level fixtures.

The app is driven through TestClient without entering its lifespan, so no
migrations run against ./data and no drip thread starts. Every adapter the
routes touch is overridden with a temp-file SQLite repo or an in-memory fake.
"""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite_db import SQLiteAnalyticsRepo, SQLiteLeadRepo
from src.api.deps import (
    Settings,
    get_analytics_repo,
    get_clock,
    get_lead_repo,
    get_mailer,
    get_rate_limiter,
    get_rules,
    get_settings,
)
from src.api.main import app
from src.app_shell.rate_limit import RateLimiter
from src.rules.models import Rules

ADMIN_PASSWORD = "correct horse battery staple"


@pytest.fixture
def settings() -> Settings:
    s = Settings()
    s.admin_password = ADMIN_PASSWORD
    s.base_url = "https://example.com"
    s.cookie_secure = False
    return s


@pytest.fixture
def mailer() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def limiter(rules: Rules, clock) -> RateLimiter:
    return RateLimiter(rules.rate_limits, clock)


@pytest.fixture
def client(
    settings: Settings,
    rules: Rules,
    limiter: RateLimiter,
    lead_repo: SQLiteLeadRepo,
    analytics_repo: SQLiteAnalyticsRepo,
    mailer: DevEmailAdapter,
    clock,
) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_lead_repo] = lambda: lead_repo
    app.dependency_overrides[get_analytics_repo] = lambda: analytics_repo
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_clock] = lambda: clock

    yield TestClient(app)

    app.dependency_overrides.clear()
    for attr in ("analytics_repo", "drip_runner"):
        if hasattr(app.state, attr):
            delattr(app.state, attr)


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    """Client carrying the auth cookie from a successful login."""
    response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client
