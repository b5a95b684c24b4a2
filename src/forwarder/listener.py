from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from confluent_kafka import Producer

from src.common.config import AppConfig
from src.common.metrics import record_delivery, record_event
from src.common.observability import (
    correlation_context,
    correlation_headers,
    extract_correlation_id_from_event,
)
from src.forwarder.events import AdminEvent, UserEvent
from src.forwarder.producer import (
    ProducerCreationError,
    build_security_configuration,
    create_producer,
)
from src.security.engine import SecurityConfiguration

logger = logging.getLogger(__name__)


class EventForwarder:
    """Publishes auth user events and admin events to Kafka.

    User events are forwarded only when their type is listed in
    ``config.events``. Admin events go to ``config.topic_admin_events`` and
    are dropped when no admin topic is configured.
    """

    def __init__(
        self,
        config: AppConfig,
        producer: Any,
        security: SecurityConfiguration | None = None,
    ) -> None:
        self.config = config
        self.producer = producer
        self.security = security
        self._events = frozenset(config.events)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        producer_cls: Callable[[dict[str, Any]], Any] = Producer,
    ) -> "EventForwarder":
        security = build_security_configuration(config)
        try:
            producer = create_producer(config, security, producer_cls)
        except ProducerCreationError:
            if security is not None:
                security.release()
            raise
        return cls(config, producer, security)

    def on_event(self, event: UserEvent | Mapping[str, Any]) -> bool:
        raw = event.to_dict() if isinstance(event, UserEvent) else event
        parsed = event if isinstance(event, UserEvent) else UserEvent.from_dict(event)
        if parsed.type not in self._events:
            record_event("user", "skipped")
            logger.debug("Skipping event type %s", parsed.type)
            return False

        with correlation_context(extract_correlation_id_from_event(raw)):
            self._produce(self.config.topic_events, parsed.to_json())
        record_event("user", "forwarded")
        return True

    def on_admin_event(
        self,
        event: AdminEvent | Mapping[str, Any],
        include_representation: bool = False,
    ) -> bool:
        """Forward an admin event; the resource representation is opt-in."""
        if self.config.topic_admin_events is None:
            record_event("admin", "skipped")
            return False

        raw = event.to_dict() if isinstance(event, AdminEvent) else event
        parsed = event if isinstance(event, AdminEvent) else AdminEvent.from_dict(event)
        with correlation_context(extract_correlation_id_from_event(raw)):
            self._produce(
                self.config.topic_admin_events,
                parsed.to_json(include_representation),
            )
        record_event("admin", "forwarded")
        return True

    def _produce(self, topic: str, value: str) -> None:
        payload = value.encode("utf-8")
        headers = correlation_headers()
        try:
            self.producer.produce(
                topic, value=payload, headers=headers, on_delivery=self._on_delivery
            )
        except BufferError:
            logger.warning("Producer queue full; waiting for deliveries (topic=%s)", topic)
            self.producer.poll(1.0)
            self.producer.produce(
                topic, value=payload, headers=headers, on_delivery=self._on_delivery
            )
        self.producer.poll(0)

    def _on_delivery(self, err: Any, msg: Any) -> None:
        if err is not None:
            record_delivery(msg.topic(), "error")
            logger.error("Delivery failed for topic %s: %s", msg.topic(), err)
            return
        record_delivery(msg.topic(), "success")
        logger.debug(
            "Delivered to %s [%s] @ %s", msg.topic(), msg.partition(), msg.offset()
        )

    def flush(self) -> int:
        remaining = self.producer.flush(self.config.flush_timeout_ms / 1000.0)
        if remaining:
            logger.warning("%s messages still queued after flush", remaining)
        return remaining

    def close(self, release_truststore: bool = False) -> None:
        self.flush()
        if release_truststore and self.security is not None:
            self.security.release()
