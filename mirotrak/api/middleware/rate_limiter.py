"""Rate limiting dependencies to prevent abuse."""

import os
import time
from collections import defaultdict

from fastapi import HTTPException, Request, status

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class RateLimiter:
    """Simple in-memory rate limiter.

    Implements token bucket algorithm for rate limiting API requests.
    Buckets are keyed by client address and live in process memory only.
    """

    def __init__(
        self,
        name: str,
        requests_per_minute: int = 100,
        burst_size: int | None = None,
        cleanup_interval: int = 60,
    ):
        """Initialize rate limiter.

        Args:
            name: Profile name, used in logs and error bodies
            requests_per_minute: Maximum requests per minute per client
            burst_size: Maximum burst requests allowed (defaults to the per-minute limit)
            cleanup_interval: Interval (seconds) to cleanup old entries
        """
        self.name = name
        self.requests_per_minute = requests_per_minute
        self.burst_size = burst_size or requests_per_minute
        self.cleanup_interval = cleanup_interval
        self.reset()

    def reset(self) -> None:
        """Forget every bucket."""
        # Store: client_key -> (tokens, last_update, request_count)
        self.buckets: dict[str, tuple[float, float, int]] = defaultdict(
            lambda: (float(self.burst_size), time.time(), 0)
        )
        self.last_cleanup = time.time()

    @property
    def retry_after(self) -> int:
        """Seconds until one token is available again."""
        return max(1, int(60 / self.requests_per_minute))

    def _refill_tokens(self, client_key: str) -> float:
        tokens, last_update, count = self.buckets[client_key]
        current_time = time.time()

        tokens_to_add = (current_time - last_update) * (self.requests_per_minute / 60.0)
        new_tokens = min(tokens + tokens_to_add, self.burst_size)

        self.buckets[client_key] = (new_tokens, current_time, count)
        return new_tokens

    def consume(self, client_key: str) -> None:
        """Take one token from the client's bucket.

        Args:
            client_key: Client identifier (usually the remote address)

        Raises:
            HTTPException: 429 if the bucket is empty
        """
        current_time = time.time()
        if current_time - self.last_cleanup > self.cleanup_interval:
            self._cleanup_old_entries()
            self.last_cleanup = current_time

        tokens = self._refill_tokens(client_key)

        if tokens < 1.0:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={
                    "message": "Trop de requêtes, veuillez réessayer plus tard",
                    "limit": self.name,
                    "retryAfter": self.retry_after,
                },
                headers={"Retry-After": str(self.retry_after)},
            )

        tokens, last_update, count = self.buckets[client_key]
        self.buckets[client_key] = (tokens - 1.0, last_update, count + 1)

    def _cleanup_old_entries(self) -> None:
        """Clean up old entries to prevent memory growth."""
        cutoff_time = time.time() - (self.cleanup_interval * 2)

        to_remove = [
            client_key
            for client_key, (_, last_update, _) in self.buckets.items()
            if last_update < cutoff_time
        ]

        for client_key in to_remove:
            del self.buckets[client_key]

    def get_client_stats(self, client_key: str) -> dict:
        """Get rate limit statistics for a client.

        Args:
            client_key: Client identifier

        Returns:
            Dict with tokens available, total requests, etc.
        """
        if client_key not in self.buckets:
            return {
                "tokens_available": self.burst_size,
                "total_requests": 0,
                "limit_per_minute": self.requests_per_minute,
            }

        tokens = self._refill_tokens(client_key)
        _, _, count = self.buckets[client_key]

        return {
            "tokens_available": int(tokens),
            "total_requests": count,
            "limit_per_minute": self.requests_per_minute,
        }


# Global rate limiter profiles
global_limiter = RateLimiter("global", requests_per_minute=100)
write_limiter = RateLimiter("write", requests_per_minute=30)
heavy_limiter = RateLimiter("heavy", requests_per_minute=5)

RATE_LIMITERS = (global_limiter, write_limiter, heavy_limiter)


def rate_limiting_enabled() -> bool:
    return os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes")


def reset_rate_limits() -> None:
    """Empty every profile's buckets."""
    for limiter in RATE_LIMITERS:
        limiter.reset()


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def check_rate_limit(request: Request) -> None:
    """FastAPI dependency applying the global and write profiles.

    Args:
        request: FastAPI request

    Example:
        app.include_router(clients.router, dependencies=[Depends(check_rate_limit)])
    """
    if not rate_limiting_enabled():
        return

    client_key = _client_key(request)
    global_limiter.consume(client_key)
    if request.method in WRITE_METHODS:
        write_limiter.consume(client_key)


async def check_heavy_rate_limit(request: Request) -> None:
    """FastAPI dependency for expensive export/import endpoints."""
    if not rate_limiting_enabled():
        return

    heavy_limiter.consume(_client_key(request))
