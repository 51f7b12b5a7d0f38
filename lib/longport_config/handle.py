from __future__ import annotations

import logging
from datetime import datetime

from .errors import ConfigError, HandleClosedError, InvalidArgument, RefreshFailed, ResourceCreationFailed
from .params import ValidatedParameterSet
from .refresh import Completion, OneShotCompletion, RefreshOutcome, normalize_expiry
from .resolver import Status, resolve, resolve_from_env
from .transport import ResourceToken, Transport
from .types import RefreshState

logger = logging.getLogger(__name__)


class _RefreshTracker:
    """State of the most recent refresh; travels with the resource on move."""

    def __init__(self) -> None:
        self.state = RefreshState.IDLE
        self.last_error: RefreshFailed | None = None

    def submitted(self) -> None:
        self.state = RefreshState.SUBMITTED
        self.last_error = None

    def finished(self, outcome: RefreshOutcome) -> None:
        self.state = RefreshState.SUCCEEDED if outcome.ok else RefreshState.FAILED
        self.last_error = outcome.error


class ResourceView:
    """Non-owning, read-only borrow of a handle's resource.

    Valid only while the owning handle is live; it never releases anything.
    """

    __slots__ = ("_owner",)

    def __init__(self, owner: "ConfigHandle"):
        self._owner = owner

    @property
    def alive(self) -> bool:
        return self._owner.is_live

    @property
    def token(self) -> ResourceToken:
        return self._owner._require_live()

    @property
    def params(self) -> ValidatedParameterSet:
        self._owner._require_live()
        return self._owner._params

    def __repr__(self) -> str:
        return f"ResourceView(alive={self.alive})"


class ConfigHandle:
    """Sole owner of one transport resource and its parameter set.

    Handles cannot be copied or pickled. ``move()`` transfers ownership and
    leaves the source inert; ``close()`` (or leaving a ``with`` block)
    releases the resource exactly once.

    Not thread-safe for mutation: concurrent ``view()`` reads are fine as long
    as no refresh, reload or close runs at the same time. Callers must
    serialize ``refresh_access_token`` calls on one handle.
    """

    def __init__(self, params: ValidatedParameterSet, resource: ResourceToken, transport: Transport):
        self._params: ValidatedParameterSet | None = params
        self._resource: ResourceToken | None = resource
        self._transport = transport
        self._tracker = _RefreshTracker()
        self._moved = False

    # --- construction ---
    @classmethod
    def create(cls, params: ValidatedParameterSet, transport: Transport) -> "ConfigHandle":
        return cls(params, _create_resource(transport, params), transport)

    @classmethod
    def from_args(cls, transport: Transport, app_key: str, app_secret: str, access_token: str,
                  **options) -> "ConfigHandle":
        return cls.create(resolve(app_key, app_secret, access_token, **options), transport)

    @classmethod
    def from_env(cls, transport: Transport, **resolver_kwargs) -> "ConfigHandle":
        return cls.create(resolve_from_env(**resolver_kwargs), transport)

    # --- ownership ---
    @property
    def is_live(self) -> bool:
        return self._resource is not None

    @property
    def is_inert(self) -> bool:
        return self._moved

    def _require_live(self) -> ResourceToken:
        if self._resource is None:
            state = "moved from" if self._moved else "closed"
            raise HandleClosedError(f"config handle was {state}")
        return self._resource

    def move(self) -> "ConfigHandle":
        resource = self._require_live()
        other = ConfigHandle.__new__(ConfigHandle)
        other._params = self._params
        other._resource = resource
        other._transport = self._transport
        other._tracker = self._tracker
        other._moved = False

        self._params = None
        self._resource = None
        self._moved = True
        return other

    def close(self) -> None:
        resource = self._resource
        if resource is None:
            return
        self._resource = None
        self._transport.release_resource(resource)

    def __enter__(self) -> "ConfigHandle":
        self._require_live()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __copy__(self):
        raise TypeError("ConfigHandle cannot be copied; use move()")

    def __deepcopy__(self, memo):
        raise TypeError("ConfigHandle cannot be copied; use move()")

    def __reduce_ex__(self, protocol):
        raise TypeError("ConfigHandle cannot be pickled")

    def __repr__(self) -> str:
        if self._moved:
            return "ConfigHandle(<moved>)"
        if self._resource is None:
            return "ConfigHandle(<closed>)"
        return f"ConfigHandle(app_key={self._params.app_key!r}, resource={self._resource.id})"

    # --- exposure ---
    @property
    def params(self) -> ValidatedParameterSet:
        self._require_live()
        return self._params

    def view(self) -> ResourceView:
        self._require_live()
        return ResourceView(self)

    def set_access_token(self, token: str) -> None:
        """Replace the in-memory access token.

        Not called by ``refresh_access_token``; the transport layer decides
        whether the handle's copy should follow a successful refresh.
        """
        self._require_live()
        self._params = self._params.with_access_token(token)

    def reload_from_env(self, **resolver_kwargs) -> Status:
        """Re-resolve from the environment and swap in a fresh resource.

        On any failure the handle keeps its current parameters and resource.
        Once the new resource is in place the reload counts as done; a failure
        to release the old one is logged, not returned.
        """
        self._require_live()
        try:
            params = resolve_from_env(**resolver_kwargs)
            resource = _create_resource(self._transport, params)
        except ConfigError as e:
            logger.warning("config reload failed: %s", e)
            return Status(error=e)
        old = self._resource
        self._params, self._resource = params, resource
        try:
            self._transport.release_resource(old)
        except Exception:
            logger.exception("releasing replaced resource %s failed", old.id)
        return Status()

    # --- refresh ---
    @property
    def refresh_state(self) -> RefreshState:
        return self._tracker.state

    @property
    def last_refresh_error(self) -> RefreshFailed | None:
        return self._tracker.last_error

    def refresh_access_token(self, expired_at: datetime | int | float, completion: Completion) -> None:
        """Ask the transport for a new access token valid until ``expired_at``.

        Returns as soon as the request is submitted. ``completion`` is called
        exactly once, possibly on another thread, with a ``RefreshOutcome``.
        The handle's own token is left as is.

        Raises:
            InvalidArgument: expiry not in the future, or completion not callable.
            HandleClosedError: the handle was closed or moved from.
        """
        resource = self._require_live()
        if not callable(completion):
            raise InvalidArgument("completion must be callable")
        expiry = normalize_expiry(expired_at)

        tracker = self._tracker
        tracker.submitted()
        done = OneShotCompletion(completion, on_done=tracker.finished)
        try:
            self._transport.submit_token_refresh(resource, self._params.access_token, expiry, done)
        except Exception as e:
            logger.warning("token refresh submission failed: %s", e)
            error = e if isinstance(e, RefreshFailed) else RefreshFailed(str(e))
            if error is not e:
                error.__cause__ = e
            done(RefreshOutcome.failure(error))


def _create_resource(transport: Transport, params: ValidatedParameterSet) -> ResourceToken:
    try:
        return transport.create_resource(params)
    except ResourceCreationFailed:
        raise
    except Exception as e:
        raise ResourceCreationFailed(str(e)) from e
