"""Statement timeouts and cancellation checked during execution."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum
from typing import Optional, Union

from lsmdb.errors import StatementCanceledError, StatementTimedOutError


class CancellationReason(Enum):
    """Why a statement was canceled; the value is its description."""

    USER_REQUESTED = "user requested cancellation"


class StatementCancellation:
    """A thread-safe, one-shot cancellation flag shared by its holders."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reason: Optional[CancellationReason] = None

    def cancel(self) -> bool:
        """Request cancellation; True only for the call that set it."""
        with self._lock:
            if self._reason is not None:
                return False
            self._reason = CancellationReason.USER_REQUESTED
            return True

    def reason(self) -> Optional[CancellationReason]:
        """The cancellation reason, or None if not canceled."""
        with self._lock:
            return self._reason


def _as_timedelta(timeout: Union[timedelta, float]) -> timedelta:
    if isinstance(timeout, timedelta):
        return timeout
    return timedelta(seconds=timeout)


@dataclass(frozen=True)
class StatementDeadline:
    """A point on the monotonic clock after which a statement times out."""

    deadline: float
    timeout: timedelta

    @classmethod
    def after(cls, timeout: Union[timedelta, float]) -> "StatementDeadline":
        """A deadline that falls ``timeout`` (seconds or timedelta) from now."""
        span = _as_timedelta(timeout)
        return cls(deadline=time.monotonic() + span.total_seconds(), timeout=span)

    def is_elapsed(self) -> bool:
        return time.monotonic() >= self.deadline

    def timeout_ms(self) -> int:
        """The configured timeout in whole milliseconds."""
        return self.timeout // timedelta(milliseconds=1)


@dataclass(frozen=True)
class ExecutionGovernance:
    """Optional deadline and cancellation consulted at execution checkpoints."""

    deadline: Optional[StatementDeadline] = None
    cancellation: Optional[StatementCancellation] = None

    def with_timeout(self, timeout: Union[timedelta, float]) -> "ExecutionGovernance":
        return replace(self, deadline=StatementDeadline.after(timeout))

    def with_deadline(self, deadline: StatementDeadline) -> "ExecutionGovernance":
        return replace(self, deadline=deadline)

    def with_cancellation(self, cancellation: StatementCancellation) -> "ExecutionGovernance":
        return replace(self, cancellation=cancellation)

    def checkpoint(self) -> None:
        """Raise if the statement was canceled or its deadline has passed."""
        if self.cancellation is not None:
            reason = self.cancellation.reason()
            if reason is not None:
                raise StatementCanceledError(reason.value)
        if self.deadline is not None and self.deadline.is_elapsed():
            raise StatementTimedOutError(self.deadline.timeout_ms())