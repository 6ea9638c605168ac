"""Bounded poll-until-state helpers for eventually consistent AWS APIs."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Collection, Iterable, Optional, Union

from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class PollError(RuntimeError):
    """Base class for polling failures."""


class PollFailedError(PollError):
    """The resource reached a terminal failure state."""

    def __init__(self, label: str, status: Any, attempts: int) -> None:
        super().__init__(f"{label} entered failure state {status!r} after {attempts} attempt(s)")
        self.label = label
        self.status = status
        self.attempts = attempts


class PollTimeoutError(PollError):
    """The resource did not reach the target state within the attempt budget."""

    def __init__(self, label: str, last_status: Any, attempts: int) -> None:
        super().__init__(f"{label} did not converge after {attempts} attempt(s); last status {last_status!r}")
        self.label = label
        self.last_status = last_status
        self.attempts = attempts


def error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def _as_set(value: Union[str, Iterable[str], None]) -> Collection[Any]:
    if value is None:
        return frozenset()
    if isinstance(value, (str, bool)):
        return frozenset([value])
    return frozenset(value)


def _identity(response: Any) -> Any:
    return response


def wait_for_state(
    describe: Callable[[], Any],
    *,
    target: Union[Any, Iterable[Any]],
    status_of: Callable[[Any], Any] = _identity,
    failure_states: Iterable[Any] = (),
    interval: float = 5.0,
    max_attempts: int = 120,
    retry_codes: Iterable[str] = (),
    tolerate_errors: bool = False,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "resource",
) -> Any:
    """
    Call ``describe`` until ``status_of(response)`` is in ``target``.

    Raises PollFailedError on a failure state and PollTimeoutError once
    ``max_attempts`` calls have been made without reaching the target.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    targets = _as_set(target)
    failures = _as_set(failure_states)
    retryable = _as_set(retry_codes)
    status: Any = None

    for attempt in range(1, max_attempts + 1):
        try:
            response = describe()
        except ClientError as exc:
            code = error_code(exc)
            if code in retryable:
                logger.debug("%s not ready yet (%s), attempt %s/%s", label, code, attempt, max_attempts)
                status = code
            elif tolerate_errors:
                logger.warning("Error while polling %s: %s", label, exc)
                status = code
            else:
                raise
        else:
            status = status_of(response)
            if status in targets:
                logger.debug("%s reached %s after %s attempt(s)", label, status, attempt)
                return response
            if status in failures:
                raise PollFailedError(label, status, attempt)
            logger.info("Waiting for %s: status %s (%s/%s)", label, status, attempt, max_attempts)
        if attempt < max_attempts:
            sleep(interval)

    raise PollTimeoutError(label, status, max_attempts)


def wait_until_gone(
    describe: Callable[[], Any],
    *,
    gone_codes: Iterable[str],
    status_of: Optional[Callable[[Any], Any]] = None,
    gone_states: Iterable[Any] = (),
    interval: float = 5.0,
    max_attempts: int = 120,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "resource",
) -> None:
    """Poll until ``describe`` reports the resource missing or in a gone state."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    codes = _as_set(gone_codes)
    states = _as_set(gone_states)
    status: Any = None

    for attempt in range(1, max_attempts + 1):
        try:
            response = describe()
        except ClientError as exc:
            if error_code(exc) in codes:
                logger.debug("%s is gone after %s attempt(s)", label, attempt)
                return
            raise
        status = status_of(response) if status_of else None
        if status_of and status in states:
            logger.debug("%s reached %s after %s attempt(s)", label, status, attempt)
            return
        logger.info("Waiting for %s deletion: status %s (%s/%s)", label, status, attempt, max_attempts)
        if attempt < max_attempts:
            sleep(interval)

    raise PollTimeoutError(label, status, max_attempts)
