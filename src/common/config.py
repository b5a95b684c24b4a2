from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from src.security.keys import RECOGNIZED_KEYS

ALLOWED_ENVS = {"local", "dev", "prod"}
KAFKA_ENV_PREFIX = "KAFKA_"
DEFAULT_EVENTS = ("REGISTER",)

# KAFKA_<suffix> -> producer property understood by librdkafka.
PRODUCER_PROPERTIES: dict[str, str] = {
    "ACKS": "acks",
    "COMPRESSION_TYPE": "compression.type",
    "RETRIES": "retries",
    "BATCH_SIZE": "batch.size",
    "CLIENT_DNS_LOOKUP": "client.dns.lookup",
    "CONNECTIONS_MAX_IDLE_MS": "connections.max.idle.ms",
    "DELIVERY_TIMEOUT_MS": "delivery.timeout.ms",
    "LINGER_MS": "linger.ms",
    "REQUEST_TIMEOUT_MS": "request.timeout.ms",
    "ENABLE_IDEMPOTENCE": "enable.idempotence",
    "MAX_IN_FLIGHT_REQUESTS_PER_CONNECTION": "max.in.flight.requests.per.connection",
    "METADATA_MAX_AGE_MS": "metadata.max.age.ms",
    "RECONNECT_BACKOFF_MAX_MS": "reconnect.backoff.max.ms",
    "RECONNECT_BACKOFF_MS": "reconnect.backoff.ms",
    "RETRY_BACKOFF_MS": "retry.backoff.ms",
    "TRANSACTION_TIMEOUT_MS": "transaction.timeout.ms",
    "TRANSACTIONAL_ID": "transactional.id",
}


@dataclass(frozen=True)
class AppConfig:
    app_env: str
    log_level: str
    service_name: str
    bootstrap_servers: str
    client_id: str
    topic_events: str
    topic_admin_events: str | None
    events: tuple[str, ...]
    flush_timeout_ms: int
    truststore_dir: str | None
    appinsights_connection_string: str
    producer_properties: Mapping[str, str] = field(default_factory=dict)
    security_settings: Mapping[str, str] = field(default_factory=dict, repr=False)


def _get_env(env: Mapping[str, str], key: str, default: str) -> str:
    value = env.get(key, default)
    return value.strip() if isinstance(value, str) else default


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    value = env.get(key)
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer (got {value!r})") from exc


def _get_optional_env(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None


def _get_required_env(env: Mapping[str, str], key: str) -> str:
    value = _get_optional_env(env, key)
    if value is None:
        raise ValueError(f"{key} must be set")
    return value


def _parse_events(value: str | None) -> tuple[str, ...]:
    if value is None:
        return DEFAULT_EVENTS
    events = tuple(
        item.strip().upper() for item in value.split(",") if item.strip()
    )
    return events or DEFAULT_EVENTS


def collect_security_settings(env: Mapping[str, str]) -> dict[str, str]:
    """Strip the KAFKA_ prefix from recognised security keys.

    Empty values are kept: an empty endpoint identification algorithm is a
    meaningful setting, distinct from leaving it unset.
    """
    settings: dict[str, str] = {}
    for key, value in env.items():
        if not key.startswith(KAFKA_ENV_PREFIX) or value is None:
            continue
        name = key[len(KAFKA_ENV_PREFIX) :]
        if name in RECOGNIZED_KEYS:
            settings[name] = value
    return settings


def collect_producer_properties(env: Mapping[str, str]) -> dict[str, str]:
    properties: dict[str, str] = {}
    for suffix, property_name in PRODUCER_PROPERTIES.items():
        value = _get_optional_env(env, KAFKA_ENV_PREFIX + suffix)
        if value is not None:
            properties[property_name] = value
    return properties


def load_config(env: Mapping[str, str] | None = None) -> AppConfig:
    source = env if env is not None else os.environ
    app_env = _get_env(source, "APP_ENV", "local")
    if app_env not in ALLOWED_ENVS:
        raise ValueError(
            f"APP_ENV must be one of {sorted(ALLOWED_ENVS)} (got {app_env!r})"
        )

    flush_timeout_ms = _get_int(source, "KAFKA_FLUSH_TIMEOUT_MS", 10000)
    if flush_timeout_ms < 0:
        raise ValueError(
            f"KAFKA_FLUSH_TIMEOUT_MS must be non-negative (got {flush_timeout_ms})"
        )

    return AppConfig(
        app_env=app_env,
        log_level=_get_env(source, "LOG_LEVEL", "INFO"),
        service_name=_get_env(source, "SERVICE_NAME", "auth-event-forwarder"),
        bootstrap_servers=_get_required_env(source, "KAFKA_BOOTSTRAP_HOST"),
        client_id=_get_required_env(source, "KAFKA_CLIENT_ID"),
        topic_events=_get_required_env(source, "KAFKA_TOPIC"),
        topic_admin_events=_get_optional_env(source, "KAFKA_ADMIN_TOPIC"),
        events=_parse_events(_get_optional_env(source, "KAFKA_EVENTS")),
        flush_timeout_ms=flush_timeout_ms,
        truststore_dir=_get_optional_env(source, "KAFKA_TRUSTSTORE_DIR"),
        appinsights_connection_string=_get_env(
            source, "APPLICATIONINSIGHTS_CONNECTION_STRING", ""
        ),
        producer_properties=collect_producer_properties(source),
        security_settings=collect_security_settings(source),
    )
