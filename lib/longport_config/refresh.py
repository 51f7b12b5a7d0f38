from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from .errors import InvalidArgument, RefreshFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshOutcome:
    """Result of one token refresh: exactly one of ``token`` / ``error`` is set."""

    token: str | None = None
    expired_at: datetime | None = None
    error: RefreshFailed | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, token: str, expired_at: datetime | None = None) -> "RefreshOutcome":
        return cls(token=token, expired_at=expired_at)

    @classmethod
    def failure(cls, error: RefreshFailed) -> "RefreshOutcome":
        return cls(error=error)


Completion = Callable[[RefreshOutcome], None]


class OneShotCompletion:
    """Wraps a caller's completion so it runs at most once.

    Later invocations are dropped with a warning. Exceptions raised by the
    wrapped callable are logged and do not reach the invoking thread.
    """

    def __init__(self, completion: Completion, *, on_done: Callable[[RefreshOutcome], None] | None = None):
        self._completion = completion
        self._on_done = on_done
        self._lock = threading.Lock()
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self, outcome: RefreshOutcome) -> None:
        with self._lock:
            if self._fired:
                logger.warning("token refresh completion invoked more than once; ignoring")
                return
            self._fired = True
        if self._on_done is not None:
            self._on_done(outcome)
        try:
            self._completion(outcome)
        except Exception:
            logger.exception("token refresh completion raised")


def normalize_expiry(expired_at: datetime | int | float, *, now: datetime | None = None) -> datetime:
    """Return ``expired_at`` as an aware UTC datetime strictly in the future."""
    if isinstance(expired_at, bool):
        raise InvalidArgument("expired_at must be a datetime or a Unix timestamp")
    if isinstance(expired_at, (int, float)):
        try:
            value = datetime.fromtimestamp(expired_at, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidArgument(f"expired_at {expired_at!r} is not a valid Unix timestamp") from e
    elif isinstance(expired_at, datetime):
        if expired_at.tzinfo is None:
            raise InvalidArgument("expired_at must be timezone-aware")
        value = expired_at.astimezone(timezone.utc)
    else:
        raise InvalidArgument("expired_at must be a datetime or a Unix timestamp")

    now = now or datetime.now(timezone.utc)
    if value <= now:
        raise InvalidArgument(f"expired_at {value.isoformat()} is not in the future")
    return value
