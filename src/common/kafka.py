from __future__ import annotations

import logging
import time
from typing import Any, Callable

from src.common.config import AppConfig
from src.security import keys
from src.security.engine import SecurityConfiguration
from src.security.mechanisms import SaslMechanism

logger = logging.getLogger(__name__)

STATIC_TOKEN_LIFETIME_SECONDS = 3600

# Engine output that librdkafka accepts under the same name.
_PASSTHROUGH_PROPERTIES = (
    keys.PROP_SSL_CIPHER_SUITES,
    keys.PROP_SASL_KERBEROS_SERVICE_NAME,
    keys.PROP_SASL_KERBEROS_KINIT_CMD,
    keys.PROP_SASL_KERBEROS_MIN_TIME_BEFORE_RELOGIN,
)

# Engine output handled below from structured fields rather than by name.
_STRUCTURED_PROPERTIES = frozenset(
    {
        keys.PROP_SECURITY_PROTOCOL,
        keys.PROP_SASL_MECHANISM,
        keys.PROP_SSL_ENDPOINT_IDENTIFICATION_ALGORITHM,
    }
)

_CREDENTIAL_OPTIONS = {
    "username": "sasl.username",
    "password": "sasl.password",
    "principal": "sasl.kerberos.principal",
    "keyTab": "sasl.kerberos.keytab",
}


def oauth_token_callback(token: str) -> Callable[[str], tuple[str, float]]:
    def _callback(_oauthbearer_config: str) -> tuple[str, float]:
        return token, time.time() + STATIC_TOKEN_LIFETIME_SECONDS

    return _callback


def translate_security_properties(security: SecurityConfiguration) -> dict[str, Any]:
    """Map a security profile onto confluent-kafka (librdkafka) settings.

    The profile is expressed in JVM client terms (truststore files, JAAS);
    librdkafka takes the CA as PEM and SASL credentials as discrete keys.
    Properties with no librdkafka counterpart are dropped.
    """
    properties = security.properties
    translated: dict[str, Any] = {}

    if security.protocol is not None:
        translated["security.protocol"] = security.protocol

    if security.trust_material is not None:
        translated["ssl.ca.pem"] = security.trust_material.pem

    if keys.PROP_SSL_ENDPOINT_IDENTIFICATION_ALGORITHM in properties:
        algorithm = properties[keys.PROP_SSL_ENDPOINT_IDENTIFICATION_ALGORITHM]
        translated["ssl.endpoint.identification.algorithm"] = (
            algorithm.lower() if algorithm else "none"
        )

    for name in _PASSTHROUGH_PROPERTIES:
        if name in properties:
            translated[name] = properties[name]

    credential = security.sasl_credential
    if credential is not None:
        translated["sasl.mechanism"] = credential.mechanism.value
        for option, name in _CREDENTIAL_OPTIONS.items():
            if option in credential.options:
                translated[name] = credential.options[option]
        if credential.mechanism is SaslMechanism.OAUTHBEARER:
            token = credential.options.get("oauth.token")
            endpoint = credential.options.get("oauth.token.endpoint")
            if token is not None:
                translated["oauth_cb"] = oauth_token_callback(token)
            elif endpoint is not None:
                translated["sasl.oauthbearer.method"] = "oidc"
                translated["sasl.oauthbearer.token.endpoint.url"] = endpoint
                logger.warning(
                    "OAUTHBEARER token endpoint configured without client credentials; "
                    "producer creation will fail unless sasl.oauthbearer.client.id "
                    "and sasl.oauthbearer.client.secret are supplied"
                )

    skipped = sorted(
        name
        for name in properties
        if name not in _STRUCTURED_PROPERTIES and name not in _PASSTHROUGH_PROPERTIES
    )
    if skipped:
        logger.debug("Properties without a librdkafka equivalent: %s", skipped)
    return translated


def build_kafka_client_config(
    config: AppConfig, security: SecurityConfiguration | None = None
) -> dict[str, Any]:
    client_config: dict[str, Any] = {
        "bootstrap.servers": config.bootstrap_servers,
        "client.id": config.client_id,
    }
    client_config.update(config.producer_properties)

    if security is not None:
        client_config.update(translate_security_properties(security))

    return client_config
