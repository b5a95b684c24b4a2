from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping


class EventValidationError(ValueError):
    pass


def _required_text(payload: Mapping[str, Any], key: str) -> str:
    value = str(payload.get(key) or "").strip()
    if not value:
        raise EventValidationError(f"{key} is required")
    return value


def _optional_text(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_time(value: Any) -> int:
    if value is None:
        raise EventValidationError("time is required")
    if isinstance(value, bool):
        raise EventValidationError(f"time must be epoch milliseconds (got {value!r})")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise EventValidationError(
            f"time must be epoch milliseconds (got {value!r})"
        ) from exc


def _parse_details(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise EventValidationError("details must be an object")
    return {str(key): str(item) for key, item in value.items() if item is not None}


def _drop_none(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True)
class UserEvent:
    type: str
    realm_id: str
    time: int
    id: str | None = None
    client_id: str | None = None
    user_id: str | None = None
    session_id: str | None = None
    ip_address: str | None = None
    error: str | None = None
    details: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UserEvent":
        return cls(
            type=_required_text(payload, "type").upper(),
            realm_id=_required_text(payload, "realmId"),
            time=_parse_time(payload.get("time")),
            id=_optional_text(payload, "id"),
            client_id=_optional_text(payload, "clientId"),
            user_id=_optional_text(payload, "userId"),
            session_id=_optional_text(payload, "sessionId"),
            ip_address=_optional_text(payload, "ipAddress"),
            error=_optional_text(payload, "error"),
            details=_parse_details(payload.get("details")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "time": self.time,
                "type": self.type,
                "realmId": self.realm_id,
                "clientId": self.client_id,
                "userId": self.user_id,
                "sessionId": self.session_id,
                "ipAddress": self.ip_address,
                "error": self.error,
                "details": dict(self.details) or None,
            }
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass(frozen=True)
class AuthDetails:
    realm_id: str | None = None
    client_id: str | None = None
    user_id: str | None = None
    ip_address: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "AuthDetails | None":
        if payload is None:
            return None
        if not isinstance(payload, Mapping):
            raise EventValidationError("authDetails must be an object")
        return cls(
            realm_id=_optional_text(payload, "realmId"),
            client_id=_optional_text(payload, "clientId"),
            user_id=_optional_text(payload, "userId"),
            ip_address=_optional_text(payload, "ipAddress"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "realmId": self.realm_id,
                "clientId": self.client_id,
                "userId": self.user_id,
                "ipAddress": self.ip_address,
            }
        )


@dataclass(frozen=True)
class AdminEvent:
    operation_type: str
    resource_type: str
    realm_id: str
    time: int
    id: str | None = None
    resource_path: str | None = None
    representation: str | None = None
    error: str | None = None
    auth_details: AuthDetails | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AdminEvent":
        return cls(
            operation_type=_required_text(payload, "operationType").upper(),
            resource_type=_required_text(payload, "resourceType").upper(),
            realm_id=_required_text(payload, "realmId"),
            time=_parse_time(payload.get("time")),
            id=_optional_text(payload, "id"),
            resource_path=_optional_text(payload, "resourcePath"),
            representation=_optional_text(payload, "representation"),
            error=_optional_text(payload, "error"),
            auth_details=AuthDetails.from_dict(payload.get("authDetails")),
        )

    def to_dict(self, include_representation: bool = True) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "time": self.time,
                "realmId": self.realm_id,
                "operationType": self.operation_type,
                "resourceType": self.resource_type,
                "resourcePath": self.resource_path,
                "representation": (
                    self.representation if include_representation else None
                ),
                "error": self.error,
                "authDetails": (
                    self.auth_details.to_dict() if self.auth_details else None
                ),
            }
        )

    def to_json(self, include_representation: bool = True) -> str:
        return json.dumps(self.to_dict(include_representation), ensure_ascii=False)
