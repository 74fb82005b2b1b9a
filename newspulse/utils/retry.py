import logging
import random
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float = 1.0, max_jitter: float = 1.0) -> float:
    """Delay before retrying after ``attempt`` (1-based): base * 2^(attempt-1) plus jitter."""
    return base_delay * (2 ** (attempt - 1)) + random.uniform(0, max_jitter)


def with_retries(fn: Callable[[], T], *, max_attempts: int = 3, base_delay: float = 1.0,
                 max_jitter: float = 1.0, description: str = "operation",
                 sleep: Callable[[float], None] = time.sleep) -> T:
    """Call ``fn`` up to ``max_attempts`` times, re-raising the last error."""
    for attempt in range(1, max_attempts + 1):
        try:
            return fn()
        except Exception as e:
            logger.warning(f"Attempt {attempt}/{max_attempts} failed for {description}: {e}")
            if attempt >= max_attempts:
                raise
            delay = backoff_delay(attempt, base_delay, max_jitter)
            logger.info(f"Retrying {description} in {delay:.1f}s")
            sleep(delay)
    raise ValueError("max_attempts must be at least 1")
