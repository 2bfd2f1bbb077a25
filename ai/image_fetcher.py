# ai/image_fetcher.py
import random
import time

from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from ai.errors import is_rate_limit_error
from infra.logging import get_logger

log = get_logger("ImageFetcher")

BACKOFF_BASE_SECONDS = 1.0
JITTER_SECONDS = 1.0


class ImageFetcher:
    """
    Retrying wrapper around ChatEngine.generate_image.

    Only rate-limit class failures are retried, with exponential backoff plus
    jitter. Any other failure, or running out of attempts, yields "" so the
    caller can show a placeholder instead of failing the whole stage.
    """

    def __init__(self, engine, sleep=time.sleep, jitter=random.random):
        self.engine = engine
        self._sleep = sleep
        self._jitter = jitter

    def _jitter_wait(self, retry_state) -> float:
        return self._jitter() * JITTER_SECONDS

    def fetch(self, prompt: str, aspect_ratio: str = "wide", max_retries: int = 3) -> str:
        label = prompt[:80]

        def log_attempt(retry_state):
            log.warning(
                f"[Attempt {retry_state.attempt_number}/{max_retries}] "
                f"image generation failed for '{label}': {retry_state.outcome.exception()}"
            )

        def log_wait(retry_state):
            log.info(f"[RateLimit] retrying in {retry_state.next_action.sleep:.1f}s")

        def give_up(retry_state):
            log.warning(f"[GiveUp] no image for '{label}' after {retry_state.attempt_number} attempts")
            return ""

        # waits 2s, 4s, 8s ... plus up to JITTER_SECONDS
        retrying = Retrying(
            stop=stop_after_attempt(max_retries),
            wait=wait_exponential(multiplier=2 * BACKOFF_BASE_SECONDS) + self._jitter_wait,
            retry=retry_if_exception(is_rate_limit_error),
            sleep=self._sleep,
            after=log_attempt,
            before_sleep=log_wait,
            retry_error_callback=give_up,
        )
        try:
            return retrying(self.engine.generate_image, prompt, aspect_ratio)
        except Exception as e:
            log.warning(f"[GiveUp] image generation failed for '{label}', not retrying: {e}")
            return ""
