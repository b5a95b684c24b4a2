from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import jks
from cryptography import x509
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    pkcs12,
)

from src.security.errors import CertificateFormatError, ResourceCreationError

logger = logging.getLogger(__name__)

PEM_BEGIN_MARKER = "-----BEGIN CERTIFICATE-----"
PEM_END_MARKER = "-----END CERTIFICATE-----"
CA_ALIAS = "kafka-ca"
DEFAULT_STORE_PASSWORD = "changeit"
DEFAULT_STORE_TYPE = "JKS"
ALLOWED_STORE_TYPES = {"JKS", "PKCS12"}
TRUSTSTORE_PREFIX = "kafka-truststore"
_STORE_SUFFIXES = {"JKS": ".jks", "PKCS12": ".p12"}


@dataclass(frozen=True)
class TrustMaterial:
    """CA trust store written to disk for the broker client.

    The file outlives the build on purpose: the client reads it when it
    connects. Whoever owns the connection calls ``release()`` once the
    file is no longer needed; nothing deletes it implicitly.
    """

    pem: str
    location: str
    password: str = field(repr=False)
    store_type: str

    def release(self) -> bool:
        try:
            os.unlink(self.location)
        except FileNotFoundError:
            return False
        logger.debug("Removed truststore file %s", self.location)
        return True


def validate_pem_format(certificate: str | None, description: str = "CA certificate") -> None:
    if certificate is None or not certificate.strip():
        raise CertificateFormatError(f"{description} cannot be empty", check="empty")

    if PEM_BEGIN_MARKER not in certificate or PEM_END_MARKER not in certificate:
        raise CertificateFormatError(
            f"Invalid {description} format: missing PEM certificate boundaries",
            check="boundaries",
        )

    if len(certificate.rstrip("\n").split("\n")) < 3:
        raise CertificateFormatError(
            f"Invalid {description} format: certificate appears to be incomplete",
            check="line_count",
        )


def resolve_store_type(override: str | None) -> str:
    if override is None or not override.strip():
        return DEFAULT_STORE_TYPE
    store_type = override.strip().upper()
    if store_type in ALLOWED_STORE_TYPES:
        return store_type
    logger.warning(
        "Invalid keystore type %s, using default %s", store_type, DEFAULT_STORE_TYPE
    )
    return DEFAULT_STORE_TYPE


def resolve_password(override: str | None) -> str:
    if override is not None and override.strip():
        return override.strip()
    return DEFAULT_STORE_PASSWORD


def parse_certificate(certificate: str) -> x509.Certificate:
    try:
        return x509.load_pem_x509_certificate(certificate.encode("utf-8"))
    except ValueError as exc:
        raise CertificateFormatError(
            f"Invalid CA certificate: {exc}", check="parse"
        ) from exc


def serialize_truststore(
    certificate: x509.Certificate, password: str, store_type: str
) -> bytes:
    """Encode a trust store holding ``certificate`` as its only entry."""
    if store_type == "PKCS12":
        return pkcs12.serialize_key_and_certificates(
            name=None,
            key=None,
            cert=None,
            cas=[pkcs12.PKCS12Certificate(certificate, CA_ALIAS.encode("utf-8"))],
            encryption_algorithm=BestAvailableEncryption(password.encode("utf-8")),
        )
    entry = jks.TrustedCertEntry.new(CA_ALIAS, certificate.public_bytes(Encoding.DER))
    entry.type = "X.509"
    keystore = jks.KeyStore.new("jks", [entry])
    return keystore.saves(password)


def write_truststore_file(
    payload: bytes, store_type: str, directory: str | Path | None = None
) -> str:
    suffix = _STORE_SUFFIXES[store_type]
    try:
        fd, path = tempfile.mkstemp(
            prefix=TRUSTSTORE_PREFIX,
            suffix=suffix,
            dir=str(directory) if directory is not None else None,
        )
    except OSError as exc:
        raise ResourceCreationError(f"Failed to create truststore file: {exc}") from exc

    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
    except OSError as exc:
        Path(path).unlink(missing_ok=True)
        raise ResourceCreationError(
            f"Failed to write truststore file {path}: {exc}"
        ) from exc

    logger.debug("Created truststore file %s", path)
    return os.path.abspath(path)


def build_trust_material(
    certificate: str,
    store_type_override: str | None = None,
    password_override: str | None = None,
    directory: str | Path | None = None,
) -> TrustMaterial:
    validate_pem_format(certificate)
    parsed = parse_certificate(certificate)
    store_type = resolve_store_type(store_type_override)
    password = resolve_password(password_override)
    payload = serialize_truststore(parsed, password, store_type)
    location = write_truststore_file(payload, store_type, directory)
    logger.info("CA certificate configured (type=%s)", store_type)
    return TrustMaterial(
        pem=certificate,
        location=location,
        password=password,
        store_type=store_type,
    )
