import functools
import logging
import time

from eventhub.core import config
from eventhub.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def retry_store_unavailable(func=None, *, attempts: int | None = None, backoff: float | None = None):
    """
    Retry a call that raised StoreUnavailable, with linear backoff.

    Only wrap reads or steps that run in a single transaction: a failed
    attempt must have left nothing behind.
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            max_attempts = attempts if attempts is not None else config.STORE_RETRY_ATTEMPTS
            delay = backoff if backoff is not None else config.STORE_RETRY_BACKOFF
            for attempt in range(1, max_attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except StoreUnavailable as exc:
                    if attempt >= max_attempts:
                        raise
                    logger.warning(
                        "%s failed (attempt %d/%d): %s", fn.__name__, attempt, max_attempts, exc.message
                    )
                    time.sleep(attempt * delay)

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
