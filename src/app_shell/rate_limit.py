from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import Protocol

from src.rules.models import RateLimitRules, RateLimitWindow


class TimePort(Protocol):
    """Protocol for time operations (enables testing with deterministic time)."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...


class SystemTimeAdapter:
    """Production time adapter using system clock."""

    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class RateLimiter:
    """In-memory sliding-window limiter keyed by '<bucket>:<client>'."""

    def __init__(
        self,
        rules: RateLimitRules,
        time_port: TimePort | None = None,
    ):
        self.rules = rules
        self._time = time_port if time_port is not None else SystemTimeAdapter()
        self._history: dict[str, list[datetime]] = {}
        self._lock = Lock()

    def _cleanup(self, key: str, window: int) -> None:
        cutoff = self._time.now_utc() - timedelta(seconds=window)
        if key in self._history:
            self._history[key] = [t for t in self._history[key] if t > cutoff]
            if not self._history[key]:
                del self._history[key]

    def allow_request(self, key: str, window: int, limit: int) -> bool:
        """
        Check if request is allowed.
        If allowed, records the attempt and returns True.
        If denied, returns False.
        """
        if limit <= 0:
            return False

        with self._lock:
            self._cleanup(key, window)
            if len(self._history.get(key, [])) >= limit:
                return False

            self._history.setdefault(key, []).append(self._time.now_utc())
            return True

    def _check(self, bucket: str, cfg: RateLimitWindow, client: str) -> bool:
        return self.allow_request(f"{bucket}:{client}", cfg.window_seconds, cfg.max_requests)

    def check_post(self, ip: str) -> bool:
        return self._check("post", self.rules.post, ip)

    def check_subscribe(self, ip: str) -> bool:
        return self._check("subscribe", self.rules.subscribe, ip)

    def check_login(self, ip: str) -> bool:
        return self._check("login", self.rules.login, ip)

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
