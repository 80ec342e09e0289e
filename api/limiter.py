"""
api/limiter.py -- Shared slowapi rate limiter and the process-wide request limit.

The limit is process-wide: every request counts against one budget no matter
which client sent it. _global_key returns a constant, so the in-memory
counter store holds a single fixed-window counter. Admission is immediate
accept or reject (429); requests are never queued.

Enforcement is a FastAPI dependency (ProcessRateLimit) attached to every
router in api/main.py via include_router(dependencies=...). It is resolved
before the routers' own dependencies, so a request is counted before token
verification or body validation. Routes outside those routers (the health
check) are never counted.

The dependency hits the slowapi limiter's strategy directly instead of
relying on SlowAPIMiddleware, whose endpoint lookup cannot see routes mounted
through include_router on current FastAPI releases.

Using a single shared instance keeps every router on the same counter store.
"""

import time

from fastapi import HTTPException, Request
from limits import parse
from slowapi import Limiter

from core.config import get_settings

GLOBAL_KEY = "global"


def _global_key(request) -> str:
    return GLOBAL_KEY


def build_limiter() -> Limiter:
    """Return a Limiter with its own in-memory fixed-window counter store."""
    return Limiter(key_func=_global_key, storage_uri="memory://", strategy="fixed-window")


class ProcessRateLimit:
    """Dependency that admits a request or rejects it with 429.

    Usage:
        rate_limit = ProcessRateLimit("60/minute", limiter)
        app.include_router(router, dependencies=[Depends(rate_limit)])
    """

    def __init__(self, limit: str, limiter: Limiter | None = None) -> None:
        self.item = parse(limit)
        self.limiter = limiter if limiter is not None else build_limiter()

    def __call__(self, request: Request) -> None:
        strategy = self.limiter.limiter
        if strategy.hit(self.item, GLOBAL_KEY):
            return
        reset_at, _remaining = strategy.get_window_stats(self.item, GLOBAL_KEY)
        retry_after = max(1, int(reset_at - time.time()))
        raise HTTPException(
            status_code=429,
            detail={
                "code": "rate_limited",
                "message": "Rate limit exceeded.",
                "detail": str(self.item),
            },
            headers={"Retry-After": str(retry_after)},
        )

    def reset(self) -> None:
        self.limiter.reset()


limiter = build_limiter()
rate_limit = ProcessRateLimit(get_settings().rate_limit, limiter)
