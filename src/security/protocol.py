from __future__ import annotations

from enum import Enum
from typing import Mapping

from src.security.errors import InvalidProtocolError
from src.security.keys import SECURITY_PROTOCOL


class SecurityProtocol(str, Enum):
    PLAINTEXT = "PLAINTEXT"
    SSL = "SSL"
    SASL_PLAINTEXT = "SASL_PLAINTEXT"
    SASL_SSL = "SASL_SSL"


ALLOWED_SECURITY_PROTOCOLS = frozenset(protocol.value for protocol in SecurityProtocol)


def select_protocol(raw: Mapping[str, str]) -> str | None:
    """Return the requested protocol exactly as supplied, or None if unset."""
    return raw.get(SECURITY_PROTOCOL)


def validate_protocol(value: str) -> SecurityProtocol:
    if value not in ALLOWED_SECURITY_PROTOCOLS:
        raise InvalidProtocolError(value)
    return SecurityProtocol(value)


def is_sasl(value: str | None) -> bool:
    return value is not None and value.startswith("SASL")
