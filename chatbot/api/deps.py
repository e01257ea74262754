import logging
from typing import Optional

from fastapi import Depends, Request

from chatbot.core import config
from chatbot.core.errors import RateLimitExceeded
from chatbot.services.chat_service import ChatPipeline
from chatbot.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


def get_pipeline(request: Request) -> ChatPipeline:
    return request.app.state.pipeline


def get_rate_limiter(request: Request) -> Optional[RateLimiter]:
    # None when rate limiting is switched off
    return request.app.state.rate_limiter


def client_key(request: Request) -> str:
    if config.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


async def enforce_rate_limit(
    request: Request,
    limiter: Optional[RateLimiter] = Depends(get_rate_limiter),
) -> None:
    if limiter is None:
        return
    key = client_key(request)
    decision = await limiter.hit(key)
    if not decision.allowed:
        logger.warning("rate limit exceeded for %s", key)
        raise RateLimitExceeded(decision.retry_after)
