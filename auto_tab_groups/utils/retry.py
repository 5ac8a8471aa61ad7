"""Retry logic with structured logging using tenacity."""

from __future__ import annotations

from typing import TYPE_CHECKING, ParamSpec, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from auto_tab_groups.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)

# Browsers reject group edits while a tab is being dragged or is mid-transition.
TRANSIENT_ERROR_MARKER = "cannot be edited right now"

DEFAULT_MAX_RETRIES = 5
DEFAULT_BASE_DELAY_SECONDS = 0.025


def is_transient_group_error(exc: BaseException) -> bool:
    """Return True when the provider rejected a mutation only temporarily."""
    return TRANSIENT_ERROR_MARKER in str(exc).lower()


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempt with structured context."""
    logger.warning(
        "retrying_operation",
        attempt=retry_state.attempt_number,
        function=getattr(retry_state.fn, "__name__", "unknown"),
        error=str(retry_state.outcome.exception()) if retry_state.outcome else "unknown",
        next_delay=retry_state.next_action.sleep if retry_state.next_action else None,
    )


def call_with_retry(
    func: Callable[P, T],
    *args: P.args,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
    is_retryable: Callable[[BaseException], bool] = is_transient_group_error,
    **kwargs: P.kwargs,
) -> T:
    """Call ``func`` and retry it with exponential backoff on retryable errors.

    Delays start at ``base_delay`` and double on every attempt. With the
    defaults (5 retries, 25ms) the retry window is 25+50+100+200+400ms.
    Non-retryable errors, and the last retryable one, are re-raised.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=base_delay, exp_base=2),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_retry,
        reraise=True,
    )
    return retrying(func, *args, **kwargs)
