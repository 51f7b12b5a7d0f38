from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

import httpx

from .errors import RefreshFailed, ResourceCreationFailed
from .params import ValidatedParameterSet
from .refresh import Completion, RefreshOutcome

logger = logging.getLogger(__name__)

USER_AGENT = "longport-config/0.1.0"
REFRESH_PATH = "/v1/token/refresh"


@dataclass(frozen=True)
class ResourceToken:
    """Opaque identifier of a transport-side connection configuration."""

    id: int
    kind: str = "config"


class Transport(Protocol):
    def create_resource(self, params: ValidatedParameterSet) -> ResourceToken:
        ...

    def release_resource(self, token: ResourceToken) -> None:
        ...

    def submit_token_refresh(
        self,
        token: ResourceToken,
        access_token: str,
        expired_at: datetime,
        completion: Completion,
    ) -> None:
        """Start a refresh and return; ``completion`` must fire exactly once."""
        ...


class HttpTransport:
    """httpx-backed transport.

    Each resource is an ``httpx.Client`` bound to the parameter set's HTTP
    endpoint. Refreshes run on a worker pool owned by this transport.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 15.0,
        max_workers: int = 1,
        http_transport: httpx.BaseTransport | None = None,
    ):
        self._timeout_s = timeout_s
        self._http_transport = http_transport
        self._clients: dict[ResourceToken, httpx.Client] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="longport-refresh")

    def create_resource(self, params: ValidatedParameterSet) -> ResourceToken:
        headers = {
            "User-Agent": USER_AGENT,
            "x-api-key": params.app_key,
            "authorization": params.access_token,
            "accept-language": params.language.value,
        }
        try:
            client = httpx.Client(
                base_url=params.http_url.rstrip("/"),
                timeout=self._timeout_s,
                headers=headers,
                follow_redirects=True,
                transport=self._http_transport,
            )
        except (ValueError, httpx.InvalidURL) as e:
            raise ResourceCreationFailed(f"invalid http_url {params.http_url!r}: {e}") from e

        with self._lock:
            token = ResourceToken(next(self._ids))
            self._clients[token] = client
        logger.debug("created resource %s for %s", token.id, params.http_url)
        return token

    def release_resource(self, token: ResourceToken) -> None:
        with self._lock:
            client = self._clients.pop(token, None)
        if client is None:
            raise KeyError(f"unknown resource {token!r}")
        client.close()
        logger.debug("released resource %s", token.id)

    def submit_token_refresh(
        self,
        token: ResourceToken,
        access_token: str,
        expired_at: datetime,
        completion: Completion,
    ) -> None:
        with self._lock:
            client = self._clients.get(token)
        if client is None:
            raise KeyError(f"unknown resource {token!r}")
        self._executor.submit(self._run_refresh, client, access_token, expired_at, completion)

    def _run_refresh(
        self,
        client: httpx.Client,
        access_token: str,
        expired_at: datetime,
        completion: Completion,
    ) -> None:
        try:
            outcome = RefreshOutcome.success(self._request_refresh(client, access_token, expired_at), expired_at)
        except RefreshFailed as e:
            outcome = RefreshOutcome.failure(e)
        except Exception as e:
            logger.exception("unexpected error during token refresh")
            outcome = RefreshOutcome.failure(RefreshFailed(str(e)))
        completion(outcome)

    def _request_refresh(self, client: httpx.Client, access_token: str, expired_at: datetime) -> str:
        try:
            r = client.get(
                REFRESH_PATH,
                params={"expired_at": expired_at.isoformat()},
                headers={"authorization": access_token},
            )
        except httpx.RequestError as e:
            raise RefreshFailed(str(e)) from e

        trace_id = r.headers.get("x-trace-id")
        data: Any = None
        try:
            data = r.json()
        except ValueError:
            pass

        if not isinstance(data, dict):
            if r.status_code >= 400:
                raise RefreshFailed(f"GET {REFRESH_PATH} failed with {r.status_code}", trace_id=trace_id)
            raise RefreshFailed("token refresh returned a non-JSON body", trace_id=trace_id)

        code = data.get("code")
        if r.status_code >= 400 or code not in (0, None):
            message = str(data.get("message") or f"GET {REFRESH_PATH} failed with {r.status_code}")
            raise RefreshFailed(message, code=int(code) if code is not None else r.status_code, trace_id=trace_id)

        body = data.get("data") if isinstance(data.get("data"), dict) else data
        new_token = body.get("token")
        if not isinstance(new_token, str) or not new_token:
            raise RefreshFailed("token refresh returned no token", trace_id=trace_id)
        return new_token

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()
