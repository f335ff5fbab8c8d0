"""
Rate Limiter Service
Fixed-window request counting per (identity, endpoint class)
"""
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple
from fastapi import Depends, HTTPException, Request, status
from knowledge_base.config import settings, parse_rate_limit
from knowledge_base.models.user import User
from knowledge_base.services.auth import get_optional_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    limit: int
    window: int  # seconds


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds
    retry_after: int  # seconds, 0 when allowed

    def headers(self) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(self.reset_at)),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


@dataclass
class _Window:
    count: int
    window_start: float


def default_rules() -> Dict[str, RateLimitRule]:
    """Preset rules, with search/mutations/auth taken from settings"""
    rules = {
        "strict": RateLimitRule(5, 60),
        "moderate": RateLimitRule(20, 60),
        "generous": RateLimitRule(60, 60),
    }
    for endpoint_class, value in (
        ("search", settings.rate_limit_search),
        ("mutations", settings.rate_limit_mutations),
        ("auth", settings.rate_limit_auth),
    ):
        rules[endpoint_class] = RateLimitRule(*parse_rate_limit(value))
    return rules


class RateLimiter:
    """
    Fixed-window rate limiter

    Each (identity, endpoint class) pair gets a counter that resets once
    the rule's window has elapsed since the first request in it. State is
    kept in process memory and is not shared between workers. Elapsed
    windows are swept from check() at most once per sweep interval.

    Usage:
        limiter = RateLimiter()
        result = limiter.check("user:42", "search")
        if not result.allowed:
            ...
    """

    def __init__(
        self,
        rules: Optional[Dict[str, RateLimitRule]] = None,
        clock: Callable[[], float] = time.time,
        sweep_interval: Optional[float] = None,
    ):
        """
        Initialize rate limiter

        Args:
            rules: endpoint class -> rule (defaults to default_rules())
            clock: Returns the current time in seconds
            sweep_interval: Seconds between sweeps of elapsed windows
                (defaults to the longest rule window)
        """
        self.rules = rules if rules is not None else default_rules()
        self.clock = clock
        if sweep_interval is None:
            sweep_interval = max((rule.window for rule in self.rules.values()), default=60)
        self.sweep_interval = sweep_interval
        self._last_sweep = clock()
        self._windows: Dict[Tuple[str, str], _Window] = {}
        self._lock = threading.Lock()

    def _rule(self, endpoint_class: str) -> RateLimitRule:
        try:
            return self.rules[endpoint_class]
        except KeyError:
            raise ValueError(f"Unknown rate limit class: {endpoint_class}")

    def check(self, identity: str, endpoint_class: str) -> RateLimitResult:
        """
        Count a request and decide whether it is allowed

        Rejected requests do not extend or increment the window.
        """
        rule = self._rule(endpoint_class)
        now = self.clock()
        key = (identity, endpoint_class)

        with self._lock:
            if now - self._last_sweep >= self.sweep_interval:
                self._purge_locked(now)

            window = self._windows.get(key)
            if window is None or now - window.window_start >= rule.window:
                window = _Window(count=0, window_start=now)
                self._windows[key] = window

            reset_at = window.window_start + rule.window
            if window.count >= rule.limit:
                return RateLimitResult(
                    allowed=False,
                    limit=rule.limit,
                    remaining=0,
                    reset_at=reset_at,
                    retry_after=max(1, math.ceil(reset_at - now)),
                )

            window.count += 1
            return RateLimitResult(
                allowed=True,
                limit=rule.limit,
                remaining=rule.limit - window.count,
                reset_at=reset_at,
                retry_after=0,
            )

    def get_remaining(self, identity: str, endpoint_class: str) -> int:
        """Requests left in the current window without counting one"""
        rule = self._rule(endpoint_class)
        with self._lock:
            window = self._windows.get((identity, endpoint_class))
            if window is None or self.clock() - window.window_start >= rule.window:
                return rule.limit
            return max(0, rule.limit - window.count)

    def _purge_locked(self, now: float) -> int:
        expired = [
            key for key, window in self._windows.items()
            if now - window.window_start >= self._rule(key[1]).window
        ]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        if expired:
            logger.debug(f"Dropped {len(expired)} elapsed rate limit windows")
        return len(expired)

    def purge_expired(self) -> int:
        """Drop windows that have already elapsed; returns how many were removed"""
        with self._lock:
            return self._purge_locked(self.clock())

    def reset(self):
        """Clear all counters"""
        with self._lock:
            self._windows.clear()


def client_identity(request: Request, user: Optional[User] = None) -> str:
    """user:<id> for authenticated callers, otherwise ip:<address>"""
    if user is not None:
        return f"user:{user.id}"

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return f"ip:{first_hop}"
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return f"ip:{real_ip.strip()}"
    if request.client and request.client.host:
        return f"ip:{request.client.host}"
    return "ip:anonymous"


RATE_LIMIT_MESSAGES = {
    "search": "Too many search requests. Please try again later.",
    "auth": "Too many authentication attempts. Please try again later.",
}

rate_limiter = RateLimiter()


def get_rate_limiter() -> RateLimiter:
    """Dependency returning the process-wide limiter"""
    return rate_limiter


def rate_limit(endpoint_class: str):
    """
    Build a dependency that enforces the rule for endpoint_class

    Raises HTTP 429 with Retry-After and X-RateLimit-* headers when the
    caller's window is exhausted.
    """

    async def dependency(
        request: Request,
        user: Optional[User] = Depends(get_optional_user),
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> RateLimitResult:
        identity = client_identity(request, user)
        result = limiter.check(identity, endpoint_class)
        if not result.allowed:
            logger.warning(f"Rate limit exceeded for {identity} on {endpoint_class}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=RATE_LIMIT_MESSAGES.get(endpoint_class, "Too many requests. Please try again later."),
                headers=result.headers(),
            )
        return result

    return dependency
