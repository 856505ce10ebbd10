# media_resolver/retry.py
import logging
import time
from typing import Callable, TypeVar

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, stop_never, wait_fixed

log = logging.getLogger(__name__)

T = TypeVar('T')

def retry(max_attempts: int, wait_millis: int, operation: Callable[[], T], sleep: Callable[[float], None] = time.sleep) -> T:
    """
    Calls `operation` until it returns normally.

    A failed call is followed by a fixed, blocking wait of `wait_millis` and another call,
    for at most `max_attempts` retries after the initial call (-1 retries forever).
    Once the budget is spent the last exception is re-raised unchanged.
    """
    stop = stop_never if max_attempts < 0 else stop_after_attempt(max_attempts + 1)

    def _log_retry(retry_state):
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        log.debug(f"Attempt {retry_state.attempt_number} failed ({type(exc).__name__}: {exc}). Retrying in {wait_millis} ms.")

    retryer = Retrying(
        stop=stop,
        wait=wait_fixed(max(0, wait_millis) / 1000.0),
        retry=retry_if_exception_type(Exception),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    )
    return retryer(operation)
