from __future__ import annotations

import sys
import time
import uuid
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from src.common.config import load_config
from src.common.logging import configure_logging
from src.forwarder.listener import EventForwarder


def publish() -> None:
    configure_logging()
    config = load_config()
    forwarder = EventForwarder.from_config(config)

    now_ms = int(time.time() * 1000)
    session_id = str(uuid.uuid4())

    register = {
        "id": str(uuid.uuid4()),
        "type": "REGISTER",
        "realmId": "sample-realm",
        "clientId": "sample-client",
        "userId": "user-001",
        "sessionId": session_id,
        "ipAddress": "127.0.0.1",
        "time": now_ms,
        "details": {"username": "sample-user", "auth_method": "openid-connect"},
    }

    login = dict(register, id=str(uuid.uuid4()), type="LOGIN")

    create_user = {
        "id": str(uuid.uuid4()),
        "time": now_ms,
        "realmId": "sample-realm",
        "operationType": "CREATE",
        "resourceType": "USER",
        "resourcePath": "users/user-001",
        "representation": '{"username":"sample-user","enabled":true}',
        "authDetails": {
            "realmId": "master",
            "clientId": "admin-cli",
            "userId": "admin-001",
            "ipAddress": "127.0.0.1",
        },
    }

    try:
        forwarder.on_event(register)
        forwarder.on_event(login)
        forwarder.on_admin_event(create_user)
    finally:
        forwarder.close(release_truststore=True)


if __name__ == "__main__":
    publish()
