from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("auth-event-forwarder")

SECURITY_CONFIG_BUILDS_TOTAL = _meter.create_counter(
    name="security_config_builds_total",
    description="Security profile builds by outcome",
)

FORWARDER_EVENTS_TOTAL = _meter.create_counter(
    name="forwarder_events_total",
    description="Auth events seen by the forwarder",
)

FORWARDER_DELIVERY_TOTAL = _meter.create_counter(
    name="forwarder_delivery_total",
    description="Broker delivery reports",
)


def record_security_build(
    protocol: str | None, mechanism: str | None, result: str
) -> None:
    SECURITY_CONFIG_BUILDS_TOTAL.add(
        1,
        attributes={
            "protocol": protocol or "none",
            "mechanism": mechanism or "none",
            "result": result,
        },
    )


def record_event(kind: str, status: str) -> None:
    FORWARDER_EVENTS_TOTAL.add(1, attributes={"kind": kind, "status": status})


def record_delivery(topic: str, status: str) -> None:
    FORWARDER_DELIVERY_TOTAL.add(1, attributes={"topic": topic, "status": status})
