# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""In-memory fixed-window rate limiting for auth endpoints (brute-force protection)."""

import time

from fastapi import HTTPException, Request

from smartnote_server.config import settings

# (client_key, path) -> (window start, request count)
_windows: dict[tuple[str, str], tuple[float, int]] = {}
# Max requests per window per endpoint
LIMITS: dict[str, int] = {
    "/api/auth/login": 5,
    "/api/auth/register": 5,
    "/api/auth/forget-password": 3,
    "/api/auth/reset-password": 5,
}


def _client_key(request: Request) -> str:
    """Prefer X-Forwarded-For when behind a proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host or "unknown"
    return "unknown"


def reset_limits() -> None:
    _windows.clear()


def check_rate_limit(request: Request, path: str) -> None:
    """
    Raise 429 if the client has used up this path's quota for the current window.
    Windows are fixed: the count resets once the window that began with the
    first request has elapsed.
    """
    limit = LIMITS.get(path)
    if limit is None:
        return
    now = time.monotonic()
    window = settings.rate_limit_window_seconds
    key = (_client_key(request), path)
    start, count = _windows.get(key, (now, 0))
    if now - start >= window:
        start, count = now, 0
    if count >= limit:
        retry_after = int(window - (now - start)) + 1
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please try again later.",
            headers={"Retry-After": str(retry_after)},
        )
    _windows[key] = (start, count + 1)


async def rate_limit_auth_dep(request: Request) -> None:
    """FastAPI dependency: rate limit auth endpoints. Add Depends(rate_limit_auth_dep) to routes."""
    path = request.url.path.rstrip("/")
    if path in LIMITS:
        check_rate_limit(request, path)
