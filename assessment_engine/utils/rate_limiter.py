"""
Rate limiting middleware for API endpoints
"""
import time
from collections import defaultdict
from fastapi import Request, HTTPException
from typing import Dict
import logging

from assessment_engine.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding window rate limiter
    Production: Use Redis for distributed rate limiting
    """

    def __init__(self, requests_per_minute: int = 60, requests_per_hour: int = 1000):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour

        # Storage: {client_id: [(timestamp, count)]}
        self.minute_tracker: Dict[str, list] = defaultdict(list)
        self.hour_tracker: Dict[str, list] = defaultdict(list)

    def _get_client_id(self, request: Request) -> str:
        """
        Extract client identifier from request

        Path parameters such as the respondent id are client-chosen and
        never used as the key.
        """
        if hasattr(request.state, "user_id"):
            return f"user:{request.state.user_id}"

        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"

    def _cleanup_old_entries(self, tracker: Dict[str, list], window_seconds: int):
        """Remove entries older than window"""
        cutoff_time = time.time() - window_seconds

        for client_id in list(tracker.keys()):
            tracker[client_id] = [
                (ts, count) for ts, count in tracker[client_id]
                if ts > cutoff_time
            ]

            if not tracker[client_id]:
                del tracker[client_id]

    def _reject(self, client_id: str, limit: int, window: str, retry_after: int):
        logger.warning(f"Rate limit exceeded ({window}): {client_id}")
        raise HTTPException(
            status_code=429,
            detail=f"Too many requests. Limit: {limit} requests per {window}. Retry after {retry_after}s"
        )

    async def check_rate_limit(self, request: Request) -> None:
        """
        Check if request exceeds rate limits

        Raises:
            HTTPException: 429 if rate limit exceeded
        """
        client_id = self._get_client_id(request)
        current_time = time.time()

        self._cleanup_old_entries(self.minute_tracker, 60)
        self._cleanup_old_entries(self.hour_tracker, 3600)

        minute_requests = sum(count for _, count in self.minute_tracker[client_id])
        if minute_requests >= self.requests_per_minute:
            self._reject(client_id, self.requests_per_minute, "minute", 60)

        hour_requests = sum(count for _, count in self.hour_tracker[client_id])
        if hour_requests >= self.requests_per_hour:
            self._reject(client_id, self.requests_per_hour, "hour", 3600)

        self.minute_tracker[client_id].append((current_time, 1))
        self.hour_tracker[client_id].append((current_time, 1))

        logger.debug(f"Rate limit check passed: {client_id} (minute: {minute_requests+1}, hour: {hour_requests+1})")


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)
