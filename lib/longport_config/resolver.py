from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from dotenv import dotenv_values

from .errors import ConfigError, InvalidArgument, InvalidEnumValue, MissingCredentials
from .params import (
    DEFAULT_HTTP_URL,
    DEFAULT_QUOTE_WS_URL,
    DEFAULT_TRADE_WS_URL,
    BehaviorFlags,
    CredentialSet,
    EndpointSet,
    ValidatedParameterSet,
)
from .types import Language, PushCandlestickMode, Source

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"

# field name -> environment variable name (without prefix)
ENV_VARS = {
    "app_key": "APP_KEY",
    "app_secret": "APP_SECRET",
    "access_token": "ACCESS_TOKEN",
    "http_url": "HTTP_URL",
    "quote_ws_url": "QUOTE_WS_URL",
    "trade_ws_url": "TRADE_WS_URL",
    "language": "LANGUAGE",
    "enable_overnight": "ENABLE_OVERNIGHT",
    "push_candlestick_mode": "PUSH_CANDLESTICK_MODE",
    "enable_print_quote_packages": "PRINT_QUOTE_PACKAGES",
    "log_path": "LOG_PATH",
}

_BOOL_LITERALS = {"true": True, "false": False}


def resolve(
    app_key: str,
    app_secret: str,
    access_token: str,
    *,
    http_url: str | None = None,
    quote_ws_url: str | None = None,
    trade_ws_url: str | None = None,
    language: Language | str | None = None,
    enable_overnight: bool = False,
    push_candlestick_mode: PushCandlestickMode | str | None = None,
    enable_print_quote_packages: bool = True,
    log_path: str | None = None,
) -> ValidatedParameterSet:
    """Build a parameter set from explicit arguments.

    Pure: no environment or file access. Optional values left as ``None``
    take the fixed defaults.

    Raises:
        InvalidArgument: a credential is empty, or an optional value has the
            wrong type or an unknown enum literal.
    """
    for name, value in (("app_key", app_key), ("app_secret", app_secret), ("access_token", access_token)):
        if not isinstance(value, str) or not value.strip():
            raise InvalidArgument(f"{name} must be a non-empty string")

    sources: dict[str, Source] = {"app_key": Source.EXPLICIT, "app_secret": Source.EXPLICIT,
                                  "access_token": Source.EXPLICIT}

    def _pick(name: str, value: Any, default: Any) -> Any:
        if value is None:
            sources[name] = Source.DEFAULT
            return default
        sources[name] = Source.EXPLICIT
        return value

    urls = {}
    for name, value, default in (
        ("http_url", http_url, DEFAULT_HTTP_URL),
        ("quote_ws_url", quote_ws_url, DEFAULT_QUOTE_WS_URL),
        ("trade_ws_url", trade_ws_url, DEFAULT_TRADE_WS_URL),
    ):
        if value is not None and (not isinstance(value, str) or not value.strip()):
            raise InvalidArgument(f"{name} must be a non-empty string when given")
        urls[name] = _pick(name, value, default)

    lang = _coerce_enum("language", language, Language)
    mode = _coerce_enum("push_candlestick_mode", push_candlestick_mode, PushCandlestickMode)
    for name, value in (("enable_overnight", enable_overnight),
                        ("enable_print_quote_packages", enable_print_quote_packages)):
        if not isinstance(value, bool):
            raise InvalidArgument(f"{name} must be a bool")
    if log_path is not None and (not isinstance(log_path, str) or not log_path.strip()):
        raise InvalidArgument("log_path must be a non-empty string when given")

    flags = BehaviorFlags(
        language=_pick("language", lang, Language.EN),
        enable_overnight=enable_overnight,
        push_candlestick_mode=_pick("push_candlestick_mode", mode, PushCandlestickMode.REALTIME),
        enable_print_quote_packages=enable_print_quote_packages,
        log_path=_pick("log_path", log_path, None),
    )
    # bools always have a value; only non-default ones count as explicit
    sources["enable_overnight"] = Source.EXPLICIT if enable_overnight else Source.DEFAULT
    sources["enable_print_quote_packages"] = (
        Source.DEFAULT if enable_print_quote_packages else Source.EXPLICIT
    )

    return ValidatedParameterSet(
        credentials=CredentialSet(app_key=app_key, app_secret=app_secret, access_token=access_token),
        endpoints=EndpointSet(**urls),
        flags=flags,
        sources=sources,
    )


def _coerce_enum(name: str, value, enum_cls):
    if value is None or isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls.parse(value)
        except ValueError as e:
            raise InvalidArgument(f"{name}: {e}") from e
    raise InvalidArgument(f"{name} must be a {enum_cls.__name__} or one of {enum_cls.literals()}")


class EnvLookup:
    """Layered variable lookup: process environment, then env file, then absent.

    The process environment is never modified. A variable set to an empty
    string counts as unset, so an env file value still fills it; this differs
    from python-dotenv's ``override=False``, which keeps the empty process value.
    """

    def __init__(self, environ: Mapping[str, str] | None = None, file_values: Mapping[str, str] | None = None):
        self._environ = dict(os.environ if environ is None else environ)
        self._file = dict(file_values or {})

    @classmethod
    def load(cls, env_file: str | os.PathLike | None = DEFAULT_ENV_FILE,
             environ: Mapping[str, str] | None = None) -> "EnvLookup":
        file_values: dict[str, str] = {}
        if env_file:
            path = Path(env_file)
            if path.is_file():
                logger.debug("Loading env file: %s", path)
                try:
                    parsed = dotenv_values(path)
                except (OSError, UnicodeDecodeError) as e:
                    raise InvalidArgument(f"cannot read env file {path}: {e}") from e
                file_values = {k: v for k, v in parsed.items() if v is not None}
            else:
                logger.debug("No env file at %s", path)
        return cls(environ=environ, file_values=file_values)

    def get(self, name: str) -> tuple[str | None, Source]:
        value = self._environ.get(name)
        if value:
            return value, Source.PROCESS_ENV
        value = self._file.get(name)
        if value:
            return value, Source.ENV_FILE
        return None, Source.DEFAULT


def resolve_from_env(
    *,
    lookup: EnvLookup | None = None,
    env_file: str | os.PathLike | None = DEFAULT_ENV_FILE,
    prefix: str = "",
) -> ValidatedParameterSet:
    """Build a parameter set from environment variables.

    Variables are read from the process environment first and from
    ``env_file`` (when present) second. ``prefix`` is prepended to every
    variable name in ``ENV_VARS``.

    Raises:
        MissingCredentials: APP_KEY, APP_SECRET or ACCESS_TOKEN absent or empty.
        InvalidEnumValue: a boolean or enum variable holds an unknown literal.
    """
    if lookup is None:
        lookup = EnvLookup.load(env_file)

    raw: dict[str, str | None] = {}
    sources: dict[str, Source] = {}
    for field_name, var in ENV_VARS.items():
        value, source = lookup.get(prefix + var)
        raw[field_name] = value
        sources[field_name] = source

    for field_name in ("app_key", "app_secret", "access_token"):
        if not raw[field_name] or not raw[field_name].strip():
            raise MissingCredentials(prefix + ENV_VARS[field_name])

    language = _parse_env_enum(prefix + ENV_VARS["language"], raw["language"], Language)
    mode = _parse_env_enum(prefix + ENV_VARS["push_candlestick_mode"], raw["push_candlestick_mode"],
                           PushCandlestickMode)
    overnight = _parse_env_bool(prefix + ENV_VARS["enable_overnight"], raw["enable_overnight"])
    print_packages = _parse_env_bool(prefix + ENV_VARS["enable_print_quote_packages"],
                                     raw["enable_print_quote_packages"])

    params = ValidatedParameterSet(
        credentials=CredentialSet(
            app_key=raw["app_key"],
            app_secret=raw["app_secret"],
            access_token=raw["access_token"],
        ),
        endpoints=EndpointSet(
            http_url=raw["http_url"] or DEFAULT_HTTP_URL,
            quote_ws_url=raw["quote_ws_url"] or DEFAULT_QUOTE_WS_URL,
            trade_ws_url=raw["trade_ws_url"] or DEFAULT_TRADE_WS_URL,
        ),
        flags=BehaviorFlags(
            language=language or Language.EN,
            enable_overnight=False if overnight is None else overnight,
            push_candlestick_mode=mode or PushCandlestickMode.REALTIME,
            enable_print_quote_packages=True if print_packages is None else print_packages,
            log_path=raw["log_path"],
        ),
        sources=sources,
    )
    for field_name, source in sources.items():
        logger.debug("%s resolved from %s", prefix + ENV_VARS[field_name], source.value)
    return params


def _parse_env_bool(variable: str, value: str | None) -> bool | None:
    if value is None:
        return None
    try:
        return _BOOL_LITERALS[value.strip().lower()]
    except KeyError:
        raise InvalidEnumValue(variable, value, list(_BOOL_LITERALS)) from None


def _parse_env_enum(variable: str, value: str | None, enum_cls):
    if value is None:
        return None
    try:
        return enum_cls.parse(value.strip())
    except ValueError:
        raise InvalidEnumValue(variable, value, enum_cls.literals()) from None


@dataclass
class ParameterSlot:
    """Caller-owned output location for ``from_env``."""

    value: ValidatedParameterSet | None = None


@dataclass(frozen=True)
class Status:
    error: ConfigError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> str | None:
        return type(self.error).__name__ if self.error is not None else None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""

    def __bool__(self) -> bool:
        return self.ok


def from_env(out: ParameterSlot, **kwargs) -> Status:
    """Resolve from the environment into ``out``.

    ``out.value`` is replaced only on success; on failure it is left exactly
    as it was and the error is returned in the ``Status``.
    """
    try:
        params = resolve_from_env(**kwargs)
    except ConfigError as e:
        logger.debug("from_env failed: %s", e)
        return Status(error=e)
    out.value = params
    return Status()
