from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Tuple, Type

logger = logging.getLogger(__name__)


async def async_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    retries: int = 2,
    backoff: float = 0.5,
    max_backoff: float = 4.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    **kwargs: Any,
) -> Any:
    """Async retry with exponential backoff.

    Backoff doubles each attempt up to max_backoff; the last failure is re-raised.
    """
    attempt = 0
    delay = backoff
    while True:
        try:
            return await fn(*args, **kwargs)
        except exceptions as e:
            if attempt >= retries:
                raise
            logger.debug("retrying", extra={"status": f"attempt {attempt + 1}", "error": str(e)})
            await asyncio.sleep(delay)
            delay = min(delay * 2, max_backoff)
            attempt += 1
