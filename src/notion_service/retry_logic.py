"""Rate-limit handling for Notion API calls.

Notion answers bursts with HTTP 429 (code ``rate_limited``) and usually a
``Retry-After`` header. Calls are retried up to three times, waiting for
the server's hint when it sends one and 1s/2s/4s otherwise. Every other
error propagates immediately.
"""

import time
import logging
from typing import Callable, Optional, TypeVar

from notion_client.errors import APIErrorCode, APIResponseError

from .errors import APIAccessError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3
MAX_RETRY_AFTER_SECONDS = 30


def retry_on_rate_limit(func: Callable[..., T], *args, **kwargs) -> T:
    """Call func, retrying while Notion reports a rate limit.

    Raises:
        APIAccessError: If the limit is still hit after 3 retries
    """
    for attempt in range(MAX_RETRIES + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not _is_rate_limit_error(e):
                raise

            if attempt == MAX_RETRIES:
                logger.error(f"Still rate limited after {MAX_RETRIES} retries, giving up")
                raise APIAccessError("Notion API failure (after 3 retries)") from e

            delay = _retry_after(e)
            if delay is None:
                delay = 2 ** attempt
            logger.info(f"Rate limited by Notion, waiting {delay}s ({attempt + 1}/{MAX_RETRIES})")
            time.sleep(delay)

    raise APIAccessError("Notion API failure (after 3 retries)")


def _retry_after(exception: Exception) -> Optional[int]:
    """Seconds from the response's Retry-After header, if usable."""
    headers = getattr(exception, 'headers', None)
    if not headers:
        return None
    try:
        value = headers.get('retry-after') or headers.get('Retry-After')
    except AttributeError:
        return None
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return None
    if seconds < 0:
        return None
    return min(seconds, MAX_RETRY_AFTER_SECONDS)


def _is_rate_limit_error(exception: Exception) -> bool:
    if isinstance(exception, APIResponseError):
        return exception.code == APIErrorCode.RateLimited or exception.status == 429

    # "rate limit" on its own also shows up in unrelated validation messages
    message = str(exception).lower()
    if any(marker in message for marker in ('429', 'too many requests', 'rate_limited', 'rate limited')):
        return True

    return 429 in (getattr(exception, 'status', None), getattr(exception, 'status_code', None))
