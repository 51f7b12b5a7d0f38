from __future__ import annotations

from enum import Enum


class _LiteralEnum(str, Enum):
    @classmethod
    def parse(cls, raw: str):
        for member in cls:
            if member.value == raw:
                return member
        raise ValueError(f"unknown {cls.__name__}: {raw!r}")

    @classmethod
    def literals(cls) -> list[str]:
        return [m.value for m in cls]

    def __str__(self) -> str:
        return self.value


class Language(_LiteralEnum):
    ZH_CN = "zh-CN"
    ZH_HK = "zh-HK"
    EN = "en"


class PushCandlestickMode(_LiteralEnum):
    REALTIME = "realtime"
    CONFIRMED = "confirmed"


class Source(str, Enum):
    """Where a resolved value came from."""

    EXPLICIT = "explicit"
    PROCESS_ENV = "process_env"
    ENV_FILE = "env_file"
    DEFAULT = "default"


class RefreshState(str, Enum):
    IDLE = "idle"
    SUBMITTED = "submitted"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
