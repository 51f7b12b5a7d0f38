from __future__ import annotations


class ConfigError(Exception):
    """Base configuration error."""


class InvalidArgument(ConfigError, ValueError):
    """Empty or malformed explicit input."""


class MissingCredentials(ConfigError):
    def __init__(self, variable: str):
        super().__init__(f"missing required environment variable: {variable}")
        self.variable = variable


class InvalidEnumValue(ConfigError):
    def __init__(self, variable: str, value: str, allowed: list[str] | None = None):
        msg = f"invalid value for {variable}: {value!r}"
        if allowed:
            msg += f" (expected one of: {', '.join(allowed)})"
        super().__init__(msg)
        self.variable = variable
        self.value = value
        self.allowed = allowed


class ResourceCreationFailed(ConfigError):
    """Transport factory rejected the parameter set."""


class HandleClosedError(ConfigError):
    """Handle was moved from or closed."""


class RefreshFailed(ConfigError):
    def __init__(self, message: str, code: int | None = None, trace_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.trace_id = trace_id

    @property
    def openapi_error_code(self) -> int | None:
        return self.code

    def __str__(self) -> str:
        if self.code is None:
            return f"other error: {self.message}"
        return f"response error: code={self.code} message={self.message}"
