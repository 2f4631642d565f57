# appstore_charts/retry.py
import logging
from typing import Callable, TypeVar

from tenacity import Retrying, before_sleep_log, stop_after_attempt, wait_fixed

from appstore_charts import config

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = config.MAX_RETRIES,
    delay: float = config.RETRY_DELAY,
) -> T:
    """
    Run ``operation`` up to ``max_attempts`` times with a fixed ``delay``
    (seconds) between failures. The last exception is re-raised unchanged.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay),
        reraise=True,
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    return retrying(operation)
