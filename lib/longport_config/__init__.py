from .errors import (
    ConfigError,
    HandleClosedError,
    InvalidArgument,
    InvalidEnumValue,
    MissingCredentials,
    RefreshFailed,
    ResourceCreationFailed,
)
from .handle import ConfigHandle, ResourceView
from .params import BehaviorFlags, CredentialSet, EndpointSet, ValidatedParameterSet
from .refresh import RefreshOutcome
from .resolver import EnvLookup, ParameterSlot, Status, from_env, resolve, resolve_from_env
from .transport import HttpTransport, ResourceToken, Transport
from .types import Language, PushCandlestickMode, RefreshState, Source

__all__ = [
    "ConfigHandle",
    "ResourceView",
    "ValidatedParameterSet",
    "CredentialSet",
    "EndpointSet",
    "BehaviorFlags",
    "resolve",
    "resolve_from_env",
    "from_env",
    "EnvLookup",
    "ParameterSlot",
    "Status",
    "RefreshOutcome",
    "Transport",
    "HttpTransport",
    "ResourceToken",
    "Language",
    "PushCandlestickMode",
    "RefreshState",
    "Source",
    "ConfigError",
    "InvalidArgument",
    "MissingCredentials",
    "InvalidEnumValue",
    "ResourceCreationFailed",
    "RefreshFailed",
    "HandleClosedError",
]
