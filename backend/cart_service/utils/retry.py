from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from cart_service.core.config import settings
from cart_service.core.exceptions import ConstraintViolation

MAX_WAIT_SECONDS = 0.5


def stop_before_deadline(deadline):
    """Stop retrying once the time left could not cover the longest backoff."""
    def stop(retry_state) -> bool:
        left = deadline.seconds_left()
        return left is not None and left <= MAX_WAIT_SECONDS
    return stop


def merge_retry(deadline=None):
    """Retry a cart write that lost a uniqueness race; other errors propagate at once."""
    stop = stop_after_attempt(settings.MERGE_RETRY_ATTEMPTS)
    if deadline is not None:
        stop = stop | stop_before_deadline(deadline)
    return retry(
        reraise=True,
        stop=stop,
        wait=wait_exponential(multiplier=0.05, min=0.05, max=MAX_WAIT_SECONDS),
        retry=retry_if_exception_type(ConstraintViolation),
    )
