# core/rate_limiter.py

from typing import Dict, Tuple, Optional
from fastapi import HTTPException, Request
from collections import defaultdict
import time


# Simple in-memory sliding window, per process
_rate_limit_store: Dict[str, list] = defaultdict(list)


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Check if a request should be rate limited.

    Args:
        identifier: Unique identifier (IP address, email, etc.)
        max_requests: Maximum number of requests allowed
        window_seconds: Time window in seconds

    Returns:
        Tuple of (allowed: bool, remaining: int)
    """
    now = time.time()
    window_start = now - window_seconds

    requests = [ts for ts in _rate_limit_store[identifier] if ts > window_start]

    if len(requests) >= max_requests:
        _rate_limit_store[identifier] = requests
        return False, 0

    requests.append(now)
    _rate_limit_store[identifier] = requests

    return True, max_requests - len(requests)


def reset_rate_limits() -> None:
    _rate_limit_store.clear()


def get_client_ip(request: Request) -> str:
    client_ip = request.client.host if request.client else "unknown"

    # Behind a proxy the first forwarded address is the original client
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()

    return client_ip


def get_rate_limit_identifier(request: Request, user_id: Optional[str] = None) -> str:
    """
    Get a unique identifier for rate limiting.
    Prefers user_id if available, otherwise uses IP address.
    """
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_client_ip(request)}"


def require_rate_limit(
    request: Request,
    identifier: Optional[str] = None,
    max_requests: int = 10,
    window_seconds: int = 60
):
    """
    Raise HTTPException 429 if the identifier exceeded its limit.
    """
    if identifier is None:
        identifier = get_rate_limit_identifier(request)

    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Window": str(window_seconds),
                "Retry-After": str(window_seconds),
            }
        )

    return remaining
