from __future__ import annotations

import pytest

from longport_config import InvalidArgument, Language, PushCandlestickMode, Source, resolve
from longport_config.params import (
    DEFAULT_HTTP_URL,
    DEFAULT_QUOTE_WS_URL,
    DEFAULT_TRADE_WS_URL,
    BehaviorFlags,
    CredentialSet,
    EndpointSet,
    ValidatedParameterSet,
)


def test_resolve_fills_documented_defaults() -> None:
    params = resolve("key", "secret", "token")

    assert params.endpoints == EndpointSet(
        http_url=DEFAULT_HTTP_URL,
        quote_ws_url=DEFAULT_QUOTE_WS_URL,
        trade_ws_url=DEFAULT_TRADE_WS_URL,
    )
    assert params.flags == BehaviorFlags(
        language=Language.EN,
        enable_overnight=False,
        push_candlestick_mode=PushCandlestickMode.REALTIME,
        enable_print_quote_packages=True,
        log_path=None,
    )
    assert params.http_url == "https://openapi.longportapp.com"
    assert params.quote_ws_url == "wss://openapi-quote.longportapp.com/v2"
    assert params.trade_ws_url == "wss://openapi-trade.longportapp.com/v2"


@pytest.mark.parametrize(
    "creds",
    [
        ("", "secret", "token"),
        ("key", "", "token"),
        ("key", "secret", ""),
        ("", "", ""),
        ("key", "   ", "token"),
    ],
)
def test_resolve_rejects_empty_credentials(creds) -> None:
    with pytest.raises(InvalidArgument):
        resolve(*creds)


def test_resolve_error_names_the_argument() -> None:
    with pytest.raises(InvalidArgument, match="app_secret"):
        resolve("key", "", "token")


def test_resolve_keeps_explicit_values_and_sources() -> None:
    params = resolve(
        "key",
        "secret",
        "token",
        http_url="https://openapi.example.test",
        language="zh-HK",
        enable_overnight=True,
        push_candlestick_mode=PushCandlestickMode.CONFIRMED,
        enable_print_quote_packages=False,
        log_path="/tmp/longport",
    )

    assert params.http_url == "https://openapi.example.test"
    assert params.quote_ws_url == DEFAULT_QUOTE_WS_URL
    assert params.language is Language.ZH_HK
    assert params.enable_overnight is True
    assert params.push_candlestick_mode is PushCandlestickMode.CONFIRMED
    assert params.enable_print_quote_packages is False
    assert params.log_path == "/tmp/longport"
    assert params.source_of("http_url") is Source.EXPLICIT
    assert params.source_of("quote_ws_url") is Source.DEFAULT
    assert params.source_of("app_key") is Source.EXPLICIT


def test_resolve_rejects_unknown_language() -> None:
    with pytest.raises(InvalidArgument):
        resolve("key", "secret", "token", language="fr")


def test_resolve_rejects_non_bool_flag() -> None:
    with pytest.raises(InvalidArgument):
        resolve("key", "secret", "token", enable_overnight="yes")


def test_repr_hides_secret_and_token() -> None:
    params = resolve("key", "very-secret", "very-token")
    text = repr(params)
    assert "very-secret" not in text
    assert "very-token" not in text
    assert "key" in text


def test_redacted_masks_sensitive_fields() -> None:
    data = resolve("key", "abcdefghijkl", "tokentokentoken").redacted()
    assert data["app_key"] == "key"
    assert data["app_secret"] == "abcde**(redacted)"
    assert "tokentokentoken" not in data["access_token"]
    assert data["language"] == "en"


def test_with_access_token_replaces_only_the_token() -> None:
    params = resolve("key", "secret", "token", language=Language.ZH_CN)
    updated = params.with_access_token("token-2")
    assert updated.access_token == "token-2"
    assert updated.app_secret == "secret"
    assert updated.language is Language.ZH_CN
    assert params.access_token == "token"
    with pytest.raises(InvalidArgument):
        params.with_access_token("")


@pytest.mark.parametrize(
    "creds",
    [("", "", ""), ("key", "", "token"), ("key", "secret", "  ")],
)
def test_credential_set_rejects_blank_fields(creds) -> None:
    with pytest.raises(InvalidArgument):
        ValidatedParameterSet(credentials=CredentialSet(*creds))


@pytest.mark.parametrize("field_name", ["http_url", "quote_ws_url", "trade_ws_url"])
def test_endpoint_set_rejects_blank_urls(field_name) -> None:
    with pytest.raises(InvalidArgument, match=field_name):
        EndpointSet(**{field_name: ""})
