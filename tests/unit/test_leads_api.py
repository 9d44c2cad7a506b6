"""
Public lead endpoints: subscribe, unsubscribe link, affiliate tracking,
plus the page-view middleware.
"""

from datetime import UTC, datetime

from fastapi.testclient import TestClient

from src.adapters.sqlite_db import SQLiteAnalyticsRepo, SQLiteLeadRepo
from src.api.main import app


def _subscribe(client: TestClient, **fields) -> int:
    payload = {"email": "reader@example.com", **fields}
    return client.post("/api/subscribe", json=payload).status_code


class TestSubscribe:
    def test_subscribe_creates_lead(self, client: TestClient, lead_repo: SQLiteLeadRepo) -> None:
        response = client.post(
            "/api/subscribe",
            json={"email": " Reader@Example.com ", "name": "Ray", "source": "exit_intent"},
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

        lead = lead_repo.get_by_email("reader@example.com")
        assert lead is not None
        assert lead.name == "Ray"
        assert lead.source == "exit_intent"
        assert lead.subscribed is True

    def test_repeat_signup_same_response(self, client: TestClient, lead_repo: SQLiteLeadRepo) -> None:
        first = client.post("/api/subscribe", json={"email": "reader@example.com"})
        second = client.post("/api/subscribe", json={"email": "reader@example.com"})
        assert first.json() == second.json()
        assert len(lead_repo.list_all()) == 1

    def test_invalid_email(self, client: TestClient) -> None:
        response = client.post("/api/subscribe", json={"email": "not-an-email"})
        assert response.status_code == 400

    def test_subscribe_rate_limited(self, client: TestClient, rules) -> None:
        limit = rules.rate_limits.subscribe.max_requests
        codes = [_subscribe(client, email=f"r{i}@example.com") for i in range(limit + 1)]
        assert codes[:limit] == [200] * limit
        assert codes[-1] == 429


class TestUnsubscribe:
    def test_unsubscribe_link(self, client: TestClient, lead_repo: SQLiteLeadRepo) -> None:
        _subscribe(client)
        token = lead_repo.get_by_email("reader@example.com").unsubscribe_token  # type: ignore[union-attr]

        response = client.get(f"/unsubscribe/{token}")
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "email": "reader@example.com",
            "message": "You have been unsubscribed",
        }
        assert lead_repo.get_by_email("reader@example.com").subscribed is False  # type: ignore[union-attr]

        again = client.get(f"/unsubscribe/{token}")
        assert again.status_code == 200
        assert again.json()["message"] == "You were already unsubscribed"

    def test_unknown_token(self, client: TestClient) -> None:
        assert client.get(f"/unsubscribe/{'a' * 64}").status_code == 404

    def test_malformed_token(self, client: TestClient) -> None:
        assert client.get("/unsubscribe/nope").status_code == 400


class TestTrackAffiliate:
    def test_click_recorded(self, client: TestClient, analytics_repo: SQLiteAnalyticsRepo, clock) -> None:
        response = client.get("/api/track-affiliate", params={"affiliate": "nerdwallet", "page": "/auto"})
        assert response.status_code == 204

        stats = analytics_repo.affiliate_stats(clock.now_utc(), page_limit=10)
        assert stats.by_affiliate == [("nerdwallet", 1)]
        assert stats.by_page == [("/auto", 1)]

    def test_missing_affiliate(self, client: TestClient) -> None:
        assert client.get("/api/track-affiliate").status_code == 400

    def test_bad_affiliate_name(self, client: TestClient) -> None:
        response = client.get("/api/track-affiliate", params={"affiliate": "<script>"})
        assert response.status_code == 400


class TestPageViewMiddleware:
    def _total(self, repo: SQLiteAnalyticsRepo) -> int:
        return repo.page_view_stats(datetime.now(UTC), top_limit=20, top_days=30, daily_days=14).total

    def test_successful_public_get_recorded(
        self, client: TestClient, lead_repo: SQLiteLeadRepo, analytics_repo: SQLiteAnalyticsRepo
    ) -> None:
        app.state.analytics_repo = analytics_repo
        _subscribe(client)
        token = lead_repo.get_by_email("reader@example.com").unsubscribe_token  # type: ignore[union-attr]

        client.get(f"/unsubscribe/{token}", headers={"referer": "https://mail.example"})
        assert self._total(analytics_repo) == 1

    def test_excluded_and_failed_requests_skipped(
        self, client: TestClient, analytics_repo: SQLiteAnalyticsRepo
    ) -> None:
        app.state.analytics_repo = analytics_repo
        client.get("/health")
        client.get("/api/track-affiliate", params={"affiliate": "x"})
        client.get(f"/unsubscribe/{'a' * 64}")
        assert self._total(analytics_repo) == 0

    def test_no_repo_no_tracking(self, client: TestClient, analytics_repo: SQLiteAnalyticsRepo) -> None:
        assert client.get("/health").status_code == 200
        assert self._total(analytics_repo) == 0
