from __future__ import annotations

import logging
from typing import Any, Callable

from confluent_kafka import KafkaException, Producer

from src.common.config import AppConfig
from src.common.kafka import build_kafka_client_config
from src.common.metrics import record_security_build
from src.security.engine import SecurityConfiguration
from src.security.errors import SecurityConfigurationError
from src.security.keys import SASL_MECHANISM, SECURITY_PROTOCOL

logger = logging.getLogger(__name__)


class ProducerCreationError(RuntimeError):
    pass


def build_security_configuration(config: AppConfig) -> SecurityConfiguration | None:
    """Build and validate the security profile, or None when nothing is set."""
    settings = config.security_settings
    if not settings:
        logger.debug("No Kafka security settings provided, using basic configuration")
        return None

    protocol = settings.get(SECURITY_PROTOCOL)
    mechanism = settings.get(SASL_MECHANISM)
    try:
        security = SecurityConfiguration(settings, truststore_dir=config.truststore_dir)
        security.validate_configuration()
    except SecurityConfigurationError:
        record_security_build(protocol, mechanism, "failure")
        raise

    record_security_build(security.protocol, security.sasl_mechanism, "success")
    if security.protocol is not None:
        logger.info("Kafka producer security protocol: %s", security.protocol)
    if security.sasl_mechanism is not None:
        logger.info("Kafka producer SASL mechanism: %s", security.sasl_mechanism)
    return security


def create_producer(
    config: AppConfig,
    security: SecurityConfiguration | None = None,
    producer_cls: Callable[[dict[str, Any]], Any] = Producer,
) -> Any:
    client_config = build_kafka_client_config(config, security)
    try:
        producer = producer_cls(client_config)
    except KafkaException as exc:
        logger.error("Failed to create Kafka producer: %s", exc)
        raise ProducerCreationError(f"Failed to create Kafka producer: {exc}") from exc
    logger.info("Kafka producer created client_id=%s", config.client_id)
    return producer
