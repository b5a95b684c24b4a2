from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from src.security import keys
from src.security.errors import SecurityConfigurationError
from src.security.mechanisms import SaslCredential, build_sasl_credential
from src.security.protocol import is_sasl, select_protocol, validate_protocol
from src.security.truststore import TrustMaterial, build_trust_material

logger = logging.getLogger(__name__)


class SecurityConfiguration:
    """Broker connection-security profile built from a flat configuration map.

    Construction runs once and either yields the complete profile or raises
    ``SecurityConfigurationError`` chained to the failing step. The engine
    never reads the process environment; callers pass the already collected
    (and de-prefixed) settings.

    The CA truststore, when one is built, stays on disk after construction
    because the broker client opens it at connect time. Call ``release()``
    once the client no longer needs it.
    """

    def __init__(
        self,
        raw: Mapping[str, str],
        *,
        truststore_dir: str | Path | None = None,
    ) -> None:
        self._raw: dict[str, str] = dict(raw)
        self._properties: dict[str, str] = {}
        self.protocol: str | None = None
        self.trust_material: TrustMaterial | None = None
        self.sasl_credential: SaslCredential | None = None

        try:
            self._configure_protocol()
            self._configure_ca_certificate(truststore_dir)
            self._configure_tls_tuning()
            self._configure_sasl()
        except Exception as exc:
            if self.trust_material is not None:
                self.trust_material.release()
                self.trust_material = None
            logger.error(
                "Failed to initialize security configuration: %s: %s",
                type(exc).__name__,
                exc,
            )
            raise SecurityConfigurationError(
                f"Security configuration failed: {exc}"
            ) from exc

        self._view = MappingProxyType(self._properties)
        logger.info("Security configuration initialized")

    def _put(self, key: str, value: str) -> None:
        if key in self._properties:
            raise SecurityConfigurationError(f"Property {key} already configured")
        self._properties[key] = value

    def _text(self, key: str) -> str | None:
        value = self._raw.get(key)
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None

    def _configure_protocol(self) -> None:
        self.protocol = select_protocol(self._raw)
        if self.protocol is not None:
            self._put(keys.PROP_SECURITY_PROTOCOL, self.protocol)

    def _configure_ca_certificate(self, truststore_dir: str | Path | None) -> None:
        certificate = self._raw.get(keys.SSL_CA_CERTIFICATE)
        if certificate is None or not certificate.strip():
            logger.debug("No CA certificate provided")
            return

        self.trust_material = build_trust_material(
            certificate,
            store_type_override=self._raw.get(keys.SSL_KEYSTORE_TYPE_DYNAMIC),
            password_override=self._raw.get(keys.SSL_TRUSTSTORE_PASSWORD_DYNAMIC),
            directory=truststore_dir,
        )
        self._put(keys.PROP_TRUSTSTORE_LOCATION, self.trust_material.location)
        self._put(keys.PROP_TRUSTSTORE_PASSWORD, self.trust_material.password)
        self._put(keys.PROP_TRUSTSTORE_TYPE, self.trust_material.store_type)

    def _configure_tls_tuning(self) -> None:
        enabled_protocols = self._text(keys.SSL_ENABLED_PROTOCOLS)
        if enabled_protocols is not None:
            self._put(keys.PROP_SSL_ENABLED_PROTOCOLS, enabled_protocols)

        cipher_suites = self._text(keys.SSL_CIPHER_SUITES)
        if cipher_suites is not None:
            self._put(keys.PROP_SSL_CIPHER_SUITES, cipher_suites)

        # Present-but-empty disables hostname verification.
        if keys.SSL_ENDPOINT_IDENTIFICATION_ALGORITHM in self._raw:
            algorithm = self._raw[keys.SSL_ENDPOINT_IDENTIFICATION_ALGORITHM]
            self._put(
                keys.PROP_SSL_ENDPOINT_IDENTIFICATION_ALGORITHM,
                algorithm.strip() if algorithm is not None else "",
            )

    def _configure_sasl(self) -> None:
        if not is_sasl(self.protocol):
            logger.debug("SASL not required for security protocol %s", self.protocol)
            return

        mechanism = self._text(keys.SASL_MECHANISM)
        if mechanism is None:
            logger.warning("SASL mechanism not specified, skipping SASL configuration")
            return

        self.sasl_credential = build_sasl_credential(mechanism, self._raw)
        for key, value in self.sasl_credential.as_properties().items():
            self._put(key, value)

    @property
    def properties(self) -> Mapping[str, str]:
        return self._view

    @property
    def sasl_mechanism(self) -> str | None:
        if self.sasl_credential is None:
            return None
        return self.sasl_credential.mechanism.value

    def as_dict(self) -> dict[str, str]:
        return dict(self._properties)

    def validate_configuration(self) -> None:
        if not self._properties:
            logger.debug("No security configuration to validate")
            return

        protocol = self._properties.get(keys.PROP_SECURITY_PROTOCOL)
        if protocol is not None:
            validate_protocol(protocol)
        logger.debug("Security configuration validation completed")

    def describe(self) -> dict[str, Any]:
        """Summary that is safe to log: no passwords, no JAAS text."""
        summary: dict[str, Any] = {
            "security_protocol": self.protocol,
            "sasl_mechanism": self.sasl_mechanism,
            "truststore_type": None,
            "truststore_location": None,
            "properties": sorted(self._properties),
        }
        if self.trust_material is not None:
            summary["truststore_type"] = self.trust_material.store_type
            summary["truststore_location"] = self.trust_material.location
        return summary

    def release(self) -> bool:
        if self.trust_material is None:
            return False
        return self.trust_material.release()
