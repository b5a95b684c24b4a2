from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from src.common.config import load_config
from src.forwarder import listener as listener_module
from src.forwarder import main as forwarder_main
from src.forwarder.producer import ProducerCreationError


class RecordingForwarder:
    def __init__(self) -> None:
        self.user_events: list[dict] = []
        self.admin_events: list[tuple[dict, bool]] = []
        self.closed = False
        self.released = False

    def on_event(self, payload):
        if payload.get("type") == "BROKEN":
            raise forwarder_main.EventValidationError("realmId is required")
        self.user_events.append(payload)
        return payload.get("type") == "REGISTER"

    def on_admin_event(self, payload, include_representation=False):
        self.admin_events.append((payload, include_representation))
        return True

    def close(self, release_truststore=False):
        self.closed = True
        self.released = release_truststore


class FakeProducer:
    def __init__(self) -> None:
        self.produced: list[tuple] = []

    def produce(self, topic, value=None, headers=None, on_delivery=None):
        self.produced.append((topic, value))

    def poll(self, timeout):
        return 0

    def flush(self, timeout):
        return 0


def _config(**overrides: str):
    env = {
        "KAFKA_BOOTSTRAP_HOST": "localhost:9092",
        "KAFKA_CLIENT_ID": "auth-events",
        "KAFKA_TOPIC": "auth.events",
    }
    env.update(overrides)
    return load_config(env=env)


def _write_jsonl(path, rows):
    path.write_text("\n".join(json.dumps(row) for row in rows) + "\n\n", encoding="utf-8")
    return path


def test_run_forward_replays_files(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = RecordingForwarder()
    monkeypatch.setattr(
        forwarder_main.EventForwarder, "from_config", classmethod(lambda cls, config: recorder)
    )
    users = _write_jsonl(
        tmp_path / "users.jsonl",
        [{"type": "REGISTER"}, {"type": "LOGIN"}, {"type": "BROKEN"}],
    )
    admins = _write_jsonl(tmp_path / "admins.jsonl", [{"operationType": "CREATE"}])

    counts = forwarder_main.run_forward(_config(), users, admins, include_representation=True)

    assert counts == {"forwarded": 2, "skipped": 1, "invalid": 1}
    assert recorder.admin_events == [({"operationType": "CREATE"}, True)]
    assert recorder.closed is True
    assert recorder.released is True


def test_run_forward_counts_non_object_line(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    recorder = RecordingForwarder()
    monkeypatch.setattr(
        forwarder_main.EventForwarder, "from_config", classmethod(lambda cls, config: recorder)
    )
    users = tmp_path / "users.jsonl"
    users.write_text(
        '{"type": "REGISTER"}\n[1, 2]\n{"type": "REGISTER"}\n', encoding="utf-8"
    )

    counts = forwarder_main.run_forward(_config(), users, None)

    assert counts == {"forwarded": 2, "skipped": 0, "invalid": 1}
    assert recorder.closed is True


def test_run_forward_counts_malformed_json_line(
    tmp_path, monkeypatch: pytest.MonkeyPatch, caplog
) -> None:
    recorder = RecordingForwarder()
    monkeypatch.setattr(
        forwarder_main.EventForwarder, "from_config", classmethod(lambda cls, config: recorder)
    )
    admins = tmp_path / "admins.jsonl"
    admins.write_text('{"operationType": "CREATE"\n{"operationType": "DELETE"}\n', encoding="utf-8")

    with caplog.at_level("WARNING"):
        counts = forwarder_main.run_forward(_config(), None, admins)

    assert counts == {"forwarded": 1, "skipped": 0, "invalid": 1}
    assert "admins.jsonl:1" in caplog.text


def test_run_forward_releases_truststore(
    tmp_path, monkeypatch: pytest.MonkeyPatch, ca_certificate_pem
) -> None:
    monkeypatch.setattr(
        listener_module,
        "create_producer",
        lambda config, security, producer_cls: FakeProducer(),
    )
    store_dir = tmp_path / "stores"
    store_dir.mkdir()
    users = _write_jsonl(
        tmp_path / "users.jsonl",
        [{"type": "REGISTER", "realmId": "test-realm", "time": 1735689600000}],
    )
    config = _config(
        KAFKA_SECURITY_PROTOCOL="SSL",
        KAFKA_SSL_CA_CERTIFICATE=ca_certificate_pem,
        KAFKA_TRUSTSTORE_DIR=str(store_dir),
    )

    counts = forwarder_main.run_forward(config, users, None)

    assert counts["forwarded"] == 1
    assert list(store_dir.iterdir()) == []


def test_run_validate_summary_is_safe(tmp_path, ca_certificate_pem) -> None:
    config = _config(
        KAFKA_SECURITY_PROTOCOL="SASL_SSL",
        KAFKA_SASL_MECHANISM="PLAIN",
        KAFKA_SASL_USERNAME="u",
        KAFKA_SASL_PASSWORD="secret-pass",
        KAFKA_SSL_CA_CERTIFICATE=ca_certificate_pem,
        KAFKA_TRUSTSTORE_DIR=str(tmp_path),
    )

    summary = forwarder_main.run_validate(config)

    assert summary["security"]["security_protocol"] == "SASL_SSL"
    assert summary["security"]["sasl_mechanism"] == "PLAIN"
    assert "secret-pass" not in json.dumps(summary)
    assert list(tmp_path.iterdir()) == []


def test_run_validate_without_security() -> None:
    summary = forwarder_main.run_validate(_config())

    assert summary["security"] is None
    assert summary["events"] == ["REGISTER"]


def _topics_producer(flushed: list[float]):
    metadata = SimpleNamespace(topics={"b-topic": object(), "auth.events": object()})
    return SimpleNamespace(
        list_topics=lambda timeout: metadata,
        flush=lambda timeout: flushed.append(timeout) or 0,
    )


def test_run_list_topics(monkeypatch: pytest.MonkeyPatch) -> None:
    flushed: list[float] = []
    producer = _topics_producer(flushed)
    monkeypatch.setattr(forwarder_main, "create_producer", lambda config, security: producer)

    assert forwarder_main.run_list_topics(_config(), timeout_seconds=3.0) == [
        "auth.events",
        "b-topic",
    ]
    assert flushed == [3.0]


def test_run_list_topics_releases_truststore(
    tmp_path, monkeypatch: pytest.MonkeyPatch, ca_certificate_pem
) -> None:
    producer = _topics_producer([])
    monkeypatch.setattr(forwarder_main, "create_producer", lambda config, security: producer)
    config = _config(
        KAFKA_SECURITY_PROTOCOL="SSL",
        KAFKA_SSL_CA_CERTIFICATE=ca_certificate_pem,
        KAFKA_TRUSTSTORE_DIR=str(tmp_path),
    )

    forwarder_main.run_list_topics(config)

    assert list(tmp_path.iterdir()) == []


def test_main_exits_when_producer_cannot_be_created(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr("sys.argv", ["auth-event-forwarder", "topics"])
    monkeypatch.setattr(forwarder_main, "configure_logging", lambda: None)
    monkeypatch.setattr(
        forwarder_main, "load_config", lambda: _config(KAFKA_ACKS="bogus-acks")
    )

    with pytest.raises(SystemExit) as excinfo:
        forwarder_main.main()

    assert excinfo.value.code == 1
    assert isinstance(excinfo.value.__cause__, ProducerCreationError)


def test_main_exits_on_security_failure(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr("sys.argv", ["auth-event-forwarder", "validate"])
    monkeypatch.setattr(forwarder_main, "configure_logging", lambda: None)
    monkeypatch.setattr(
        forwarder_main,
        "load_config",
        lambda: _config(KAFKA_SECURITY_PROTOCOL="BOGUS"),
    )

    with pytest.raises(SystemExit) as excinfo:
        forwarder_main.main()

    assert excinfo.value.code == 1


def test_main_validate_prints_summary(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr("sys.argv", ["auth-event-forwarder", "validate"])
    monkeypatch.setattr(forwarder_main, "configure_logging", lambda: None)
    monkeypatch.setattr(
        forwarder_main, "load_config", lambda: _config(KAFKA_SECURITY_PROTOCOL="SSL")
    )

    forwarder_main.main()

    printed = json.loads(capsys.readouterr().out)
    assert printed["security"]["security_protocol"] == "SSL"
