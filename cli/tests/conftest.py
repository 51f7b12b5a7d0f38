from __future__ import annotations

import pytest

from longport_config.resolver import ENV_VARS


@pytest.fixture
def clean_env(monkeypatch):
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
        monkeypatch.delenv(f"LONGPORT_{var}", raising=False)
    return monkeypatch


@pytest.fixture
def creds_env(clean_env):
    clean_env.setenv("APP_KEY", "app-key")
    clean_env.setenv("APP_SECRET", "app-secret-value")
    clean_env.setenv("ACCESS_TOKEN", "access-token-value")
    return clean_env
