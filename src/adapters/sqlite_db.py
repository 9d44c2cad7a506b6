"""
SQLite Database Adapter.

Implements the lead, drip and analytics repository ports on one SQLite file.
Schema lives in migrations/ and is applied by SQLiteMigrator.

Timestamps are stored as UTC ISO-8601 strings, so range filters are plain
string comparisons.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta
from typing import Any

from src.components.analytics.models import (
    AffiliateClick,
    AffiliateStats,
    PageView,
    PageViewStats,
)
from src.components.drip.models import DripCandidate, DripStats
from src.components.leads.models import Lead, LeadStats

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def to_db_dt(dt: datetime) -> str:
    """Format a datetime for storage (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def day_start(now: datetime) -> datetime:
    """Midnight UTC of the day containing now."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _count(self, conn: sqlite3.Connection, sql: str, params: tuple[Any, ...] = ()) -> int:
        row = conn.execute(sql, params).fetchone()
        return int(row["n"] or 0) if row else 0


# -----------------------------------------------------------------------------
# Lead Repository (LeadRepoPort + DripRepoPort)
# -----------------------------------------------------------------------------


class SQLiteLeadRepo(SQLiteRepoBase):
    """
    SQLite implementation of LeadRepoPort and DripRepoPort.

    The drip step counter lives on the lead row; drip_sends holds one row
    per completed (lead, step).
    """

    def upsert_lead(
        self,
        email: str,
        name: str | None,
        income_range: str | None,
        source: str | None,
        unsubscribe_token: str,
        now: datetime,
        default_source: str = "calculator",
    ) -> tuple[int, bool]:
        conn = self._get_conn()
        try:
            ts = to_db_dt(now)
            existing = conn.execute("SELECT id FROM leads WHERE email = ?", (email,)).fetchone()
            if existing:
                conn.execute(
                    """
                    UPDATE leads SET
                        name = COALESCE(NULLIF(?, ''), name),
                        income_range = COALESCE(NULLIF(?, ''), income_range),
                        source = COALESCE(NULLIF(?, ''), source),
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (name or "", income_range or "", source or "", ts, existing["id"]),
                )
                lead_id, is_new = int(existing["id"]), False
            else:
                cursor = conn.execute(
                    """
                    INSERT INTO leads (
                        email, name, income_range, source, subscribed,
                        unsubscribe_token, last_email_sent, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, 1, ?, 0, ?, ?)
                    """,
                    (email, name, income_range, source or default_source, unsubscribe_token, ts, ts),
                )
                lead_id, is_new = int(cursor.lastrowid or 0), True

            if self._should_close():
                conn.commit()
            return lead_id, is_new
        finally:
            if self._should_close():
                conn.close()

    def get_by_id(self, lead_id: int) -> Lead | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM leads WHERE id = ?", (lead_id,)).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def get_by_email(self, email: str) -> Lead | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM leads WHERE email = ?", (email,)).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def unsubscribe(self, token: str, now: datetime) -> tuple[str, bool] | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT email, subscribed FROM leads WHERE unsubscribe_token = ?", (token,)
            ).fetchone()
            if not row:
                return None

            was_subscribed = bool(row["subscribed"])
            if was_subscribed:
                conn.execute(
                    "UPDATE leads SET subscribed = 0, updated_at = ? WHERE unsubscribe_token = ?",
                    (to_db_dt(now), token),
                )
                if self._should_close():
                    conn.commit()
            return row["email"], was_subscribed
        finally:
            if self._should_close():
                conn.close()

    def search(self, search: str, limit: int, offset: int) -> tuple[list[Lead], int]:
        conn = self._get_conn()
        try:
            where = ""
            params: list[Any] = []
            if search:
                pattern = f"%{escape_like(search)}%"
                where = "WHERE email LIKE ? ESCAPE '\\' OR name LIKE ? ESCAPE '\\'"
                params = [pattern, pattern]

            total = self._count(conn, f"SELECT COUNT(*) AS n FROM leads {where}", tuple(params))
            rows = conn.execute(
                f"SELECT * FROM leads {where} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                (*params, limit, offset),
            ).fetchall()
            return [self._map_row(r) for r in rows], total
        finally:
            if self._should_close():
                conn.close()

    def set_subscribed(self, lead_id: int, subscribed: bool, now: datetime) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "UPDATE leads SET subscribed = ?, updated_at = ? WHERE id = ?",
                (1 if subscribed else 0, to_db_dt(now), lead_id),
            )
            if self._should_close():
                conn.commit()
            return cursor.rowcount > 0
        finally:
            if self._should_close():
                conn.close()

    def delete(self, lead_id: int) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute("DELETE FROM leads WHERE id = ?", (lead_id,))
            if self._should_close():
                conn.commit()
            return cursor.rowcount > 0
        finally:
            if self._should_close():
                conn.close()

    def list_all(self) -> list[Lead]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM leads ORDER BY created_at DESC, id DESC").fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def recent(self, limit: int) -> list[Lead]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM leads ORDER BY created_at DESC, id DESC LIMIT ?", (limit,)
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def stats(self, now: datetime) -> LeadStats:
        conn = self._get_conn()
        try:
            today = day_start(now)
            total = self._count(conn, "SELECT COUNT(*) AS n FROM leads")
            subscribed = self._count(conn, "SELECT COUNT(*) AS n FROM leads WHERE subscribed = 1")
            since = "SELECT COUNT(*) AS n FROM leads WHERE created_at >= ?"

            by_source = conn.execute(
                """
                SELECT COALESCE(NULLIF(source, ''), 'unknown') AS k, COUNT(*) AS n
                FROM leads GROUP BY k ORDER BY n DESC, k
                """
            ).fetchall()
            by_income = conn.execute(
                """
                SELECT income_range AS k, COUNT(*) AS n FROM leads
                WHERE income_range IS NOT NULL AND income_range != ''
                GROUP BY income_range ORDER BY n DESC, k
                """
            ).fetchall()

            return LeadStats(
                total=total,
                subscribed=subscribed,
                unsubscribed=total - subscribed,
                today=self._count(conn, since, (to_db_dt(today),)),
                this_week=self._count(conn, since, (to_db_dt(today - timedelta(days=7)),)),
                this_month=self._count(conn, since, (to_db_dt(today - timedelta(days=30)),)),
                by_source=[(r["k"], r["n"]) for r in by_source],
                by_income=[(r["k"], r["n"]) for r in by_income],
            )
        finally:
            if self._should_close():
                conn.close()

    # --- Drip ---

    def list_drip_candidates(
        self,
        delay_days: Sequence[int],
        now: datetime,
        limit: int,
    ) -> list[DripCandidate]:
        if not delay_days:
            return []
        # One (step, cutoff) row per step; a lead is due when it signed up
        # on or before the cutoff of its next step.
        cutoffs = [
            (step, to_db_dt(now - timedelta(days=days)))
            for step, days in enumerate(delay_days, start=1)
        ]
        values = ", ".join("(?, ?)" for _ in cutoffs)
        params: list[Any] = [p for pair in cutoffs for p in pair]
        params.append(limit)

        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"""
                WITH steps(step, cutoff) AS (VALUES {values})
                SELECT l.id, l.email, l.name, l.unsubscribe_token,
                       l.last_email_sent, l.created_at
                FROM leads l
                JOIN steps s ON s.step = l.last_email_sent + 1
                WHERE l.subscribed = 1 AND l.created_at <= s.cutoff
                ORDER BY l.created_at ASC, l.id ASC
                LIMIT ?
                """,
                params,
            ).fetchall()
            return [
                DripCandidate(
                    lead_id=r["id"],
                    email=r["email"],
                    name=r["name"],
                    unsubscribe_token=r["unsubscribe_token"],
                    last_email_sent=r["last_email_sent"],
                    created_at=parse_dt(r["created_at"]) or datetime.now(UTC),
                )
                for r in rows
            ]
        finally:
            if self._should_close():
                conn.close()

    def record_drip_send(self, lead_id: int, step: int, now: datetime) -> None:
        conn = self._get_conn()
        try:
            ts = to_db_dt(now)
            conn.execute(
                "INSERT OR IGNORE INTO drip_sends (lead_id, step, sent_at) VALUES (?, ?, ?)",
                (lead_id, step, ts),
            )
            conn.execute(
                """
                UPDATE leads SET last_email_sent = MAX(last_email_sent, ?), updated_at = ?
                WHERE id = ?
                """,
                (step, ts, lead_id),
            )
            if self._should_close():
                conn.commit()
        except sqlite3.Error:
            if self._should_close():
                conn.rollback()
            raise
        finally:
            if self._should_close():
                conn.close()

    def drip_stats(self, total_steps: int) -> DripStats:
        conn = self._get_conn()
        try:
            return DripStats(
                total_sends=self._count(conn, "SELECT COUNT(*) AS n FROM drip_sends"),
                first_step_sends=self._count(
                    conn, "SELECT COUNT(*) AS n FROM drip_sends WHERE step = 1"
                ),
                completed=self._count(
                    conn, "SELECT COUNT(*) AS n FROM drip_sends WHERE step = ?", (total_steps,)
                ),
                pending=self._count(
                    conn,
                    "SELECT COUNT(*) AS n FROM leads WHERE subscribed = 1 AND last_email_sent < ?",
                    (total_steps,),
                ),
            )
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> Lead:
        return Lead(
            id=row["id"],
            email=row["email"],
            unsubscribe_token=row["unsubscribe_token"],
            name=row["name"],
            income_range=row["income_range"],
            source=row["source"],
            subscribed=bool(row["subscribed"]),
            last_email_sent=row["last_email_sent"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )


# -----------------------------------------------------------------------------
# Analytics Repository
# -----------------------------------------------------------------------------


class SQLiteAnalyticsRepo(SQLiteRepoBase):
    """SQLite implementation of AnalyticsRepoPort."""

    def record_page_view(self, view: PageView) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO page_views (path, referrer, user_agent, ip, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (view.path, view.referrer, view.user_agent, view.ip, to_db_dt(view.created_at)),
            )
            if self._should_close():
                conn.commit()
        finally:
            if self._should_close():
                conn.close()

    def record_affiliate_click(self, click: AffiliateClick) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO affiliate_clicks (affiliate, page, ip, created_at) VALUES (?, ?, ?, ?)",
                (click.affiliate, click.page, click.ip, to_db_dt(click.created_at)),
            )
            if self._should_close():
                conn.commit()
        finally:
            if self._should_close():
                conn.close()

    def page_view_stats(
        self,
        now: datetime,
        top_limit: int,
        top_days: int,
        daily_days: int,
    ) -> PageViewStats:
        conn = self._get_conn()
        try:
            today = day_start(now)
            since = "SELECT COUNT(*) AS n FROM page_views WHERE created_at >= ?"

            top = conn.execute(
                """
                SELECT path, COUNT(*) AS n FROM page_views
                WHERE created_at >= ?
                GROUP BY path ORDER BY n DESC, path LIMIT ?
                """,
                (to_db_dt(today - timedelta(days=top_days)), top_limit),
            ).fetchall()
            daily = conn.execute(
                """
                SELECT substr(created_at, 1, 10) AS d, COUNT(*) AS n FROM page_views
                WHERE created_at >= ?
                GROUP BY d ORDER BY d ASC
                """,
                (to_db_dt(today - timedelta(days=daily_days)),),
            ).fetchall()

            return PageViewStats(
                total=self._count(conn, "SELECT COUNT(*) AS n FROM page_views"),
                today=self._count(conn, since, (to_db_dt(today),)),
                week=self._count(conn, since, (to_db_dt(today - timedelta(days=7)),)),
                month=self._count(conn, since, (to_db_dt(today - timedelta(days=30)),)),
                top_pages=[(r["path"], r["n"]) for r in top],
                daily=[(date.fromisoformat(r["d"]), r["n"]) for r in daily],
            )
        finally:
            if self._should_close():
                conn.close()

    def affiliate_stats(self, now: datetime, page_limit: int) -> AffiliateStats:
        conn = self._get_conn()
        try:
            today = day_start(now)
            since = "SELECT COUNT(*) AS n FROM affiliate_clicks WHERE created_at >= ?"

            by_affiliate = conn.execute(
                """
                SELECT affiliate, COUNT(*) AS n FROM affiliate_clicks
                GROUP BY affiliate ORDER BY n DESC, affiliate
                """
            ).fetchall()
            by_page = conn.execute(
                """
                SELECT page, COUNT(*) AS n FROM affiliate_clicks
                WHERE page IS NOT NULL AND page != ''
                GROUP BY page ORDER BY n DESC, page LIMIT ?
                """,
                (page_limit,),
            ).fetchall()

            return AffiliateStats(
                total=self._count(conn, "SELECT COUNT(*) AS n FROM affiliate_clicks"),
                today=self._count(conn, since, (to_db_dt(today),)),
                week=self._count(conn, since, (to_db_dt(today - timedelta(days=7)),)),
                by_affiliate=[(r["affiliate"], r["n"]) for r in by_affiliate],
                by_page=[(r["page"], r["n"]) for r in by_page],
            )
        finally:
            if self._should_close():
                conn.close()
