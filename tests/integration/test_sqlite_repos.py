"""
SQLite repository tests against the real migrations.
"""

import sqlite3
from datetime import UTC, date, datetime, timedelta

import pytest

from src.adapters.sqlite_db import SQLiteAnalyticsRepo, SQLiteLeadRepo
from src.components.analytics import AffiliateClick, PageView
from src.components.drip import DEFAULT_DELAY_DAYS
from src.components.leads import generate_unsubscribe_token

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


def _add(
    repo: SQLiteLeadRepo,
    email: str,
    created_at: datetime = NOW,
    name: str | None = None,
    source: str = "calculator",
    income_range: str | None = None,
) -> int:
    lead_id, _ = repo.upsert_lead(
        email, name, income_range, source, generate_unsubscribe_token(), created_at
    )
    return lead_id


class TestLeadUpsert:
    def test_insert_new(self, lead_repo: SQLiteLeadRepo) -> None:
        lead_id, is_new = lead_repo.upsert_lead(
            "a@example.com", "Ann", "50-75k", "calculator", "f" * 64, NOW
        )
        assert is_new is True

        lead = lead_repo.get_by_id(lead_id)
        assert lead is not None
        assert lead.email == "a@example.com"
        assert lead.subscribed is True
        assert lead.last_email_sent == 0
        assert lead.unsubscribe_token == "f" * 64
        assert lead.created_at == NOW

    def test_repeat_merges_non_empty_fields(self, lead_repo: SQLiteLeadRepo) -> None:
        first = _add(lead_repo, "a@example.com", name="Ann", income_range="50-75k")
        second, is_new = lead_repo.upsert_lead(
            "a@example.com", "", "100k+", "exit_intent", "0" * 64, NOW + timedelta(days=1)
        )

        assert second == first
        assert is_new is False
        lead = lead_repo.get_by_email("a@example.com")
        assert lead is not None
        assert lead.name == "Ann"  # empty value does not overwrite
        assert lead.income_range == "100k+"
        assert lead.source == "exit_intent"
        assert lead.unsubscribe_token != "0" * 64  # token kept from first capture
        assert lead.created_at == NOW

    def test_missing(self, lead_repo: SQLiteLeadRepo) -> None:
        assert lead_repo.get_by_id(999) is None
        assert lead_repo.get_by_email("nobody@example.com") is None


class TestLeadAdmin:
    def test_unsubscribe_idempotent(self, lead_repo: SQLiteLeadRepo) -> None:
        lead_id = _add(lead_repo, "a@example.com")
        token = lead_repo.get_by_id(lead_id).unsubscribe_token  # type: ignore[union-attr]

        assert lead_repo.unsubscribe(token, NOW) == ("a@example.com", True)
        assert lead_repo.unsubscribe(token, NOW) == ("a@example.com", False)
        assert lead_repo.unsubscribe("0" * 64, NOW) is None

    def test_search_and_pagination(self, lead_repo: SQLiteLeadRepo) -> None:
        for i in range(5):
            _add(lead_repo, f"user{i}@example.com", NOW + timedelta(minutes=i))
        _add(lead_repo, "other@test.org", NOW + timedelta(minutes=10), name="Bob Example")

        leads, total = lead_repo.search("", limit=2, offset=0)
        assert total == 6
        assert [lead.email for lead in leads] == ["other@test.org", "user4@example.com"]

        leads, total = lead_repo.search("example", limit=10, offset=0)
        assert total == 6  # name match counts too

        leads, total = lead_repo.search("user1", limit=10, offset=0)
        assert total == 1

    def test_search_treats_wildcards_literally(self, lead_repo: SQLiteLeadRepo) -> None:
        _add(lead_repo, "a@example.com")
        _, total = lead_repo.search("%", limit=10, offset=0)
        assert total == 0

    def test_toggle_and_delete(self, lead_repo: SQLiteLeadRepo) -> None:
        lead_id = _add(lead_repo, "a@example.com")
        assert lead_repo.set_subscribed(lead_id, False, NOW) is True
        assert lead_repo.get_by_id(lead_id).subscribed is False  # type: ignore[union-attr]
        assert lead_repo.set_subscribed(999, False, NOW) is False

        assert lead_repo.delete(lead_id) is True
        assert lead_repo.delete(lead_id) is False

    def test_stats(self, lead_repo: SQLiteLeadRepo) -> None:
        _add(lead_repo, "today@example.com", NOW, source="calculator", income_range="50-75k")
        _add(lead_repo, "week@example.com", NOW - timedelta(days=3), source="newsletter")
        _add(lead_repo, "month@example.com", NOW - timedelta(days=20), income_range="50-75k")
        old = _add(lead_repo, "old@example.com", NOW - timedelta(days=90))
        lead_repo.set_subscribed(old, False, NOW)

        stats = lead_repo.stats(NOW)
        assert stats.total == 4
        assert stats.subscribed == 3
        assert stats.unsubscribed == 1
        assert stats.today == 1
        assert stats.this_week == 2
        assert stats.this_month == 3
        assert stats.by_source[0] == ("calculator", 3)
        assert ("newsletter", 1) in stats.by_source
        assert stats.by_income == [("50-75k", 2)]

    def test_recent_and_list_all(self, lead_repo: SQLiteLeadRepo) -> None:
        for i in range(3):
            _add(lead_repo, f"u{i}@example.com", NOW + timedelta(hours=i))
        assert [lead.email for lead in lead_repo.recent(2)] == [
            "u2@example.com",
            "u1@example.com",
        ]
        assert len(lead_repo.list_all()) == 3


class TestDripStore:
    def test_candidates_exclude_unsubscribed_and_complete(
        self, lead_repo: SQLiteLeadRepo
    ) -> None:
        a = _add(lead_repo, "a@example.com", NOW - timedelta(days=2))
        b = _add(lead_repo, "b@example.com", NOW - timedelta(days=3))
        c = _add(lead_repo, "c@example.com", NOW - timedelta(days=1))
        lead_repo.set_subscribed(b, False, NOW)
        for step in range(1, 9):
            lead_repo.record_drip_send(c, step, NOW)

        candidates = lead_repo.list_drip_candidates(DEFAULT_DELAY_DAYS, NOW, limit=50)
        assert [x.lead_id for x in candidates] == [a]
        assert candidates[0].created_at == NOW - timedelta(days=2)

    def test_candidates_oldest_first_and_limited(self, lead_repo: SQLiteLeadRepo) -> None:
        ids = [_add(lead_repo, f"u{i}@example.com", NOW - timedelta(days=10 - i)) for i in range(4)]
        candidates = lead_repo.list_drip_candidates(DEFAULT_DELAY_DAYS, NOW, limit=2)
        assert [x.lead_id for x in candidates] == ids[:2]

    def test_candidates_only_due_rows_count_toward_limit(
        self, lead_repo: SQLiteLeadRepo
    ) -> None:
        waiting = [_add(lead_repo, f"w{i}@example.com", NOW - timedelta(days=1)) for i in range(3)]
        for lead_id in waiting:
            lead_repo.record_drip_send(lead_id, 1, NOW - timedelta(days=1))
        fresh = _add(lead_repo, "new@example.com", NOW)

        candidates = lead_repo.list_drip_candidates(DEFAULT_DELAY_DAYS, NOW, limit=2)
        assert [x.lead_id for x in candidates] == [fresh]

    def test_candidates_respect_step_delay(self, lead_repo: SQLiteLeadRepo) -> None:
        lead_id = _add(lead_repo, "a@example.com", NOW - timedelta(days=3))
        lead_repo.record_drip_send(lead_id, 1, NOW - timedelta(days=3))

        just_before = NOW - timedelta(seconds=1)
        assert lead_repo.list_drip_candidates(DEFAULT_DELAY_DAYS, just_before, limit=50) == []
        due = lead_repo.list_drip_candidates(DEFAULT_DELAY_DAYS, NOW, limit=50)
        assert [x.last_email_sent for x in due] == [1]

    def test_record_is_idempotent(self, lead_repo: SQLiteLeadRepo, db_path: str) -> None:
        lead_id = _add(lead_repo, "a@example.com")
        lead_repo.record_drip_send(lead_id, 1, NOW)
        lead_repo.record_drip_send(lead_id, 1, NOW)

        conn = sqlite3.connect(db_path)
        count = conn.execute(
            "SELECT COUNT(*) FROM drip_sends WHERE lead_id = ? AND step = 1", (lead_id,)
        ).fetchone()[0]
        conn.close()
        assert count == 1
        assert lead_repo.get_by_id(lead_id).last_email_sent == 1  # type: ignore[union-attr]

    def test_counter_never_moves_backwards(self, lead_repo: SQLiteLeadRepo) -> None:
        lead_id = _add(lead_repo, "a@example.com")
        lead_repo.record_drip_send(lead_id, 3, NOW)
        lead_repo.record_drip_send(lead_id, 2, NOW)
        assert lead_repo.get_by_id(lead_id).last_email_sent == 3  # type: ignore[union-attr]

    def test_record_failure_raises(self, db_path: str) -> None:
        conn = sqlite3.connect(db_path)
        conn.execute("DROP TABLE drip_sends")
        conn.commit()
        conn.close()

        with pytest.raises(sqlite3.Error):
            SQLiteLeadRepo(db_path).record_drip_send(1, 1, NOW)

    def test_delete_cascades_sends(self, lead_repo: SQLiteLeadRepo) -> None:
        lead_id = _add(lead_repo, "a@example.com")
        lead_repo.record_drip_send(lead_id, 1, NOW)
        lead_repo.delete(lead_id)
        assert lead_repo.drip_stats(8).total_sends == 0

    def test_drip_stats(self, lead_repo: SQLiteLeadRepo) -> None:
        a = _add(lead_repo, "a@example.com")
        b = _add(lead_repo, "b@example.com")
        _add(lead_repo, "c@example.com")
        for step in range(1, 9):
            lead_repo.record_drip_send(a, step, NOW)
        lead_repo.record_drip_send(b, 1, NOW)

        stats = lead_repo.drip_stats(8)
        assert stats.total_sends == 9
        assert stats.first_step_sends == 2
        assert stats.completed == 1
        assert stats.pending == 2


class TestAnalyticsStore:
    def _view(self, path: str, at: datetime) -> PageView:
        return PageView(path=path, referrer="", user_agent="ua", ip="1.1.1.1", created_at=at)

    def test_page_view_stats(self, analytics_repo: SQLiteAnalyticsRepo) -> None:
        analytics_repo.record_page_view(self._view("/", NOW))
        analytics_repo.record_page_view(self._view("/", NOW - timedelta(days=1)))
        analytics_repo.record_page_view(self._view("/taxes", NOW - timedelta(days=5)))
        analytics_repo.record_page_view(self._view("/auto", NOW - timedelta(days=20)))
        analytics_repo.record_page_view(self._view("/old", NOW - timedelta(days=60)))

        stats = analytics_repo.page_view_stats(NOW, top_limit=20, top_days=30, daily_days=14)
        assert stats.total == 5
        assert stats.today == 1
        assert stats.week == 3
        assert stats.month == 4
        assert stats.top_pages[0] == ("/", 2)
        assert ("/old", 1) not in stats.top_pages
        assert stats.daily == [
            (date(2024, 6, 10), 1),
            (date(2024, 6, 14), 1),
            (date(2024, 6, 15), 1),
        ]

    def test_top_pages_limit(self, analytics_repo: SQLiteAnalyticsRepo) -> None:
        for i in range(5):
            analytics_repo.record_page_view(self._view(f"/p{i}", NOW))
        stats = analytics_repo.page_view_stats(NOW, top_limit=3, top_days=30, daily_days=14)
        assert len(stats.top_pages) == 3

    def test_affiliate_stats(self, analytics_repo: SQLiteAnalyticsRepo) -> None:
        clicks = [
            ("nerdwallet", "/auto", NOW),
            ("nerdwallet", "/housing", NOW - timedelta(days=2)),
            ("creditkarma", "", NOW - timedelta(days=10)),
        ]
        for affiliate, page, at in clicks:
            analytics_repo.record_affiliate_click(AffiliateClick(affiliate, page, "ip", at))

        stats = analytics_repo.affiliate_stats(NOW, page_limit=10)
        assert stats.total == 3
        assert stats.today == 1
        assert stats.week == 2
        assert stats.by_affiliate == [("nerdwallet", 2), ("creditkarma", 1)]
        assert stats.by_page == [("/auto", 1), ("/housing", 1)]
