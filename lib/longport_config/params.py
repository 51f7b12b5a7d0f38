from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from .errors import InvalidArgument
from .types import Language, PushCandlestickMode, Source

DEFAULT_HTTP_URL = "https://openapi.longportapp.com"
DEFAULT_QUOTE_WS_URL = "wss://openapi-quote.longportapp.com/v2"
DEFAULT_TRADE_WS_URL = "wss://openapi-trade.longportapp.com/v2"


def redact(value: str | None) -> str:
    """Return the first few characters followed by a redacted marker."""
    if not value:
        return "(empty)"
    return value[:min(5, len(value) // 2)] + "**(redacted)"


def _require_text(obj, names: tuple[str, ...]) -> None:
    for name in names:
        value = getattr(obj, name)
        if not isinstance(value, str) or not value.strip():
            raise InvalidArgument(f"{name} must be a non-empty string")


@dataclass(frozen=True)
class CredentialSet:
    app_key: str
    app_secret: str = field(repr=False)
    access_token: str = field(repr=False)

    def __post_init__(self) -> None:
        _require_text(self, ("app_key", "app_secret", "access_token"))


@dataclass(frozen=True)
class EndpointSet:
    http_url: str = DEFAULT_HTTP_URL
    quote_ws_url: str = DEFAULT_QUOTE_WS_URL
    trade_ws_url: str = DEFAULT_TRADE_WS_URL

    def __post_init__(self) -> None:
        _require_text(self, ("http_url", "quote_ws_url", "trade_ws_url"))


@dataclass(frozen=True)
class BehaviorFlags:
    language: Language = Language.EN
    enable_overnight: bool = False
    push_candlestick_mode: PushCandlestickMode = PushCandlestickMode.REALTIME
    enable_print_quote_packages: bool = True
    # None disables file logging
    log_path: str | None = None


@dataclass(frozen=True)
class ValidatedParameterSet:
    """Fully resolved connection parameters.

    Built by the resolver only; every field holds a concrete value. ``sources``
    records where each leaf value came from and is ignored by equality.
    """

    credentials: CredentialSet
    endpoints: EndpointSet = field(default_factory=EndpointSet)
    flags: BehaviorFlags = field(default_factory=BehaviorFlags)
    sources: Mapping[str, Source] = field(default_factory=dict, compare=False, repr=False)

    @property
    def app_key(self) -> str:
        return self.credentials.app_key

    @property
    def app_secret(self) -> str:
        return self.credentials.app_secret

    @property
    def access_token(self) -> str:
        return self.credentials.access_token

    @property
    def http_url(self) -> str:
        return self.endpoints.http_url

    @property
    def quote_ws_url(self) -> str:
        return self.endpoints.quote_ws_url

    @property
    def trade_ws_url(self) -> str:
        return self.endpoints.trade_ws_url

    @property
    def language(self) -> Language:
        return self.flags.language

    @property
    def enable_overnight(self) -> bool:
        return self.flags.enable_overnight

    @property
    def push_candlestick_mode(self) -> PushCandlestickMode:
        return self.flags.push_candlestick_mode

    @property
    def enable_print_quote_packages(self) -> bool:
        return self.flags.enable_print_quote_packages

    @property
    def log_path(self) -> str | None:
        return self.flags.log_path

    def source_of(self, name: str) -> Source:
        return self.sources.get(name, Source.DEFAULT)

    def with_access_token(self, token: str) -> "ValidatedParameterSet":
        if not isinstance(token, str) or not token.strip():
            raise InvalidArgument("access_token must be a non-empty string")
        return replace(self, credentials=replace(self.credentials, access_token=token))

    def redacted(self) -> dict[str, Any]:
        return {
            "app_key": self.app_key,
            "app_secret": redact(self.app_secret),
            "access_token": redact(self.access_token),
            "http_url": self.http_url,
            "quote_ws_url": self.quote_ws_url,
            "trade_ws_url": self.trade_ws_url,
            "language": self.language.value,
            "enable_overnight": self.enable_overnight,
            "push_candlestick_mode": self.push_candlestick_mode.value,
            "enable_print_quote_packages": self.enable_print_quote_packages,
            "log_path": self.log_path,
        }


FIELD_NAMES = (
    "app_key",
    "app_secret",
    "access_token",
    "http_url",
    "quote_ws_url",
    "trade_ws_url",
    "language",
    "enable_overnight",
    "push_candlestick_mode",
    "enable_print_quote_packages",
    "log_path",
)
