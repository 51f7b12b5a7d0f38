from __future__ import annotations

import itertools

import pytest

from longport_config import RefreshFailed, RefreshOutcome, ResourceToken


class FakeTransport:
    """In-memory transport that counts releases and records refresh submissions."""

    def __init__(self, *, fail_create: Exception | None = None):
        self._ids = itertools.count(1)
        self.fail_create = fail_create
        self.live: set[ResourceToken] = set()
        self.created: list = []
        self.releases: dict[ResourceToken, int] = {}
        self.submissions: list[tuple] = []

    def create_resource(self, params):
        if self.fail_create is not None:
            raise self.fail_create
        token = ResourceToken(next(self._ids))
        self.live.add(token)
        self.created.append(params)
        return token

    def release_resource(self, token):
        self.releases[token] = self.releases.get(token, 0) + 1
        self.live.discard(token)

    def submit_token_refresh(self, token, access_token, expired_at, completion):
        self.submissions.append((token, access_token, expired_at, completion))

    # helpers for driving completions from tests
    def complete(self, index: int = -1, token: str = "new-token") -> None:
        _, _, expired_at, completion = self.submissions[index]
        completion(RefreshOutcome.success(token, expired_at))

    def fail(self, index: int = -1, message: str = "denied", code: int | None = 401004) -> None:
        completion = self.submissions[index][3]
        completion(RefreshOutcome.failure(RefreshFailed(message, code=code, trace_id="trace-1")))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every config variable from the process environment."""
    from longport_config.resolver import ENV_VARS

    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
