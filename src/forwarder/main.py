from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from confluent_kafka import KafkaException

from src.common.config import AppConfig, load_config
from src.common.logging import configure_logging
from src.common.otel import init_azure_monitor
from src.forwarder.events import EventValidationError
from src.forwarder.listener import EventForwarder
from src.forwarder.producer import (
    ProducerCreationError,
    build_security_configuration,
    create_producer,
)
from src.security.errors import SecurityConfigurationError

logger = logging.getLogger(__name__)


def _iter_lines(path: Path) -> Iterable[tuple[int, str]]:
    with path.open("r", encoding="utf-8") as handle:
        for line_no, line in enumerate(handle, start=1):
            if line.strip():
                yield line_no, line


def _parse_event_line(line: str) -> dict[str, Any]:
    try:
        loaded = json.loads(line)
    except json.JSONDecodeError as exc:
        raise EventValidationError(f"invalid JSON: {exc.msg}") from exc
    if not isinstance(loaded, dict):
        raise EventValidationError("event must be a JSON object")
    return loaded


def run_validate(config: AppConfig) -> dict[str, Any]:
    security = build_security_configuration(config)
    summary: dict[str, Any] = {
        "bootstrap_servers": config.bootstrap_servers,
        "client_id": config.client_id,
        "topic_events": config.topic_events,
        "topic_admin_events": config.topic_admin_events,
        "events": list(config.events),
        "security": security.describe() if security is not None else None,
    }
    if security is not None:
        # Validation only; the truststore is not needed afterwards.
        security.release()
    return summary


def run_forward(
    config: AppConfig,
    user_events: Path | None,
    admin_events: Path | None,
    include_representation: bool = False,
) -> dict[str, int]:
    counts = {"forwarded": 0, "skipped": 0, "invalid": 0}
    forwarder = EventForwarder.from_config(config)

    def _replay(path: Path, kind: str, forward: Callable[[dict[str, Any]], bool]) -> None:
        for line_no, line in _iter_lines(path):
            try:
                forwarded = forward(_parse_event_line(line))
            except EventValidationError as exc:
                counts["invalid"] += 1
                logger.warning(
                    "Invalid %s event skipped (%s:%s): %s", kind, path.name, line_no, exc
                )
                continue
            counts["forwarded" if forwarded else "skipped"] += 1

    try:
        if user_events:
            _replay(user_events, "user", forwarder.on_event)
        if admin_events:
            _replay(
                admin_events,
                "admin",
                lambda payload: forwarder.on_admin_event(payload, include_representation),
            )
    finally:
        # The client is handed the CA as PEM, so the truststore file is not read.
        forwarder.close(release_truststore=True)

    logger.info(
        "Forwarding finished forwarded=%s skipped=%s invalid=%s",
        counts["forwarded"],
        counts["skipped"],
        counts["invalid"],
    )
    return counts


def run_list_topics(config: AppConfig, timeout_seconds: float = 10.0) -> list[str]:
    security = build_security_configuration(config)
    try:
        producer = create_producer(config, security)
        metadata = producer.list_topics(timeout=timeout_seconds)
        producer.flush(timeout_seconds)
    finally:
        if security is not None:
            security.release()

    topics = sorted(metadata.topics)
    for name in topics:
        logger.info("Topic: %s", name)
    if config.topic_events not in metadata.topics:
        logger.warning("Configured topic %s does not exist", config.topic_events)
    return topics


def main() -> None:
    configure_logging()

    parser = argparse.ArgumentParser(description="Auth event Kafka forwarder")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser(
        "validate", help="Build and validate the Kafka security configuration"
    )

    forward_parser = subparsers.add_parser(
        "forward", help="Forward auth events from JSONL files"
    )
    forward_parser.add_argument("--user-events", type=Path)
    forward_parser.add_argument("--admin-events", type=Path)
    forward_parser.add_argument("--include-representation", action="store_true")

    topics_parser = subparsers.add_parser("topics", help="List topics on the broker")
    topics_parser.add_argument("--timeout", type=float, default=10.0)

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        return

    config = load_config()
    init_azure_monitor(config.appinsights_connection_string)

    try:
        if args.command == "validate":
            print(json.dumps(run_validate(config), indent=2))
        elif args.command == "forward":
            run_forward(
                config,
                args.user_events,
                args.admin_events,
                args.include_representation,
            )
        elif args.command == "topics":
            run_list_topics(config, args.timeout)
    except SecurityConfigurationError as exc:
        logger.error("Kafka security configuration failed: %s", exc)
        raise SystemExit(1) from exc
    except ProducerCreationError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc
    except KafkaException as exc:
        logger.error("Kafka request failed: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
