from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from src.security import keys
from src.security.errors import MissingCredentialError, UnsupportedMechanismError

logger = logging.getLogger(__name__)

PLAIN_LOGIN_MODULE = "org.apache.kafka.common.security.plain.PlainLoginModule"
SCRAM_LOGIN_MODULE = "org.apache.kafka.common.security.scram.ScramLoginModule"
KERBEROS_LOGIN_MODULE = "com.sun.security.auth.module.Krb5LoginModule"
OAUTHBEARER_LOGIN_MODULE = (
    "org.apache.kafka.common.security.oauthbearer.OAuthBearerLoginModule"
)

# JAAS options rendered as bare booleans instead of quoted strings.
_FLAG_OPTIONS = frozenset({"useKeyTab", "storeKey", "useTicketCache"})


class SaslMechanism(str, Enum):
    PLAIN = "PLAIN"
    SCRAM_SHA_256 = "SCRAM-SHA-256"
    SCRAM_SHA_512 = "SCRAM-SHA-512"
    GSSAPI = "GSSAPI"
    OAUTHBEARER = "OAUTHBEARER"

    @classmethod
    def parse(cls, name: str) -> "SaslMechanism":
        normalized = name.strip().upper()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise UnsupportedMechanismError(normalized) from exc


@dataclass(frozen=True)
class SaslCredential:
    mechanism: SaslMechanism
    jaas_config: str = field(repr=False)
    properties: Mapping[str, str]
    options: Mapping[str, str] = field(repr=False)

    def as_properties(self) -> dict[str, str]:
        result = {
            keys.PROP_SASL_MECHANISM: self.mechanism.value,
            keys.PROP_SASL_JAAS_CONFIG: self.jaas_config,
        }
        result.update(self.properties)
        return result


def _text(raw: Mapping[str, str], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None


def render_jaas_config(login_module: str, options: Mapping[str, str]) -> str:
    lines = [f"{login_module} required"]
    for key, value in options.items():
        if key in _FLAG_OPTIONS:
            lines.append(f"  {key}={value}")
        else:
            lines.append(f'  {key}="{value}"')
    return " \n".join(lines) + ";"


def _plain_options(mechanism: SaslMechanism, raw: Mapping[str, str]) -> dict[str, str]:
    username = _text(raw, keys.SASL_USERNAME)
    password = _text(raw, keys.SASL_PASSWORD)
    if username is None:
        raise MissingCredentialError(mechanism.value, keys.SASL_USERNAME)
    if password is None:
        raise MissingCredentialError(mechanism.value, keys.SASL_PASSWORD)
    return {"username": username, "password": password}


def _scram_options(mechanism: SaslMechanism, raw: Mapping[str, str]) -> dict[str, str]:
    username = _text(raw, keys.SASL_SCRAM_USERNAME) or _text(raw, keys.SASL_USERNAME)
    password = _text(raw, keys.SASL_SCRAM_PASSWORD) or _text(raw, keys.SASL_PASSWORD)
    if username is None:
        raise MissingCredentialError(mechanism.value, keys.SASL_SCRAM_USERNAME)
    if password is None:
        raise MissingCredentialError(mechanism.value, keys.SASL_SCRAM_PASSWORD)
    return {"username": username, "password": password}


def _gssapi_options(mechanism: SaslMechanism, raw: Mapping[str, str]) -> dict[str, str]:
    options: dict[str, str] = {}
    principal = _text(raw, keys.SASL_KERBEROS_PRINCIPAL)
    if principal is not None:
        options["principal"] = principal

    keytab = _text(raw, keys.SASL_KERBEROS_KEYTAB)
    if keytab is not None:
        options["useKeyTab"] = "true"
        options["keyTab"] = keytab
        options["storeKey"] = "true"
        options["useTicketCache"] = "false"
    else:
        options["useTicketCache"] = "true"
    return options


def _oauthbearer_options(
    mechanism: SaslMechanism, raw: Mapping[str, str]
) -> dict[str, str]:
    options: dict[str, str] = {}
    token = _text(raw, keys.SASL_OAUTH_TOKEN)
    if token is not None:
        options["oauth.token"] = token
    endpoint = _text(raw, keys.SASL_OAUTH_TOKEN_ENDPOINT)
    if endpoint is not None:
        options["oauth.token.endpoint"] = endpoint
    return options


_OptionsBuilder = Callable[[SaslMechanism, Mapping[str, str]], dict[str, str]]

_STRATEGIES: dict[SaslMechanism, tuple[str, _OptionsBuilder]] = {
    SaslMechanism.PLAIN: (PLAIN_LOGIN_MODULE, _plain_options),
    SaslMechanism.SCRAM_SHA_256: (SCRAM_LOGIN_MODULE, _scram_options),
    SaslMechanism.SCRAM_SHA_512: (SCRAM_LOGIN_MODULE, _scram_options),
    SaslMechanism.GSSAPI: (KERBEROS_LOGIN_MODULE, _gssapi_options),
    SaslMechanism.OAUTHBEARER: (OAUTHBEARER_LOGIN_MODULE, _oauthbearer_options),
}

_MECHANISM_PROPERTIES: dict[SaslMechanism, tuple[tuple[str, str], ...]] = {
    SaslMechanism.GSSAPI: keys.SASL_KERBEROS_PROPERTIES,
}


def _copy_present(
    raw: Mapping[str, str], mapping: tuple[tuple[str, str], ...], into: dict[str, str]
) -> None:
    for raw_key, property_name in mapping:
        value = _text(raw, raw_key)
        if value is not None:
            into[property_name] = value


def build_auxiliary_properties(
    mechanism: SaslMechanism, raw: Mapping[str, str]
) -> dict[str, str]:
    properties: dict[str, str] = {}
    _copy_present(raw, keys.SASL_GENERIC_PROPERTIES, properties)
    _copy_present(raw, _MECHANISM_PROPERTIES.get(mechanism, ()), properties)
    _copy_present(raw, keys.SASL_LOGIN_REFRESH_PROPERTIES, properties)
    return properties


def build_sasl_credential(
    mechanism: SaslMechanism | str, raw: Mapping[str, str]
) -> SaslCredential:
    if not isinstance(mechanism, SaslMechanism):
        mechanism = SaslMechanism.parse(mechanism)

    login_module, options_builder = _STRATEGIES[mechanism]
    options = options_builder(mechanism, raw)
    credential = SaslCredential(
        mechanism=mechanism,
        jaas_config=render_jaas_config(login_module, options),
        properties=MappingProxyType(build_auxiliary_properties(mechanism, raw)),
        options=MappingProxyType(options),
    )
    logger.info("SASL configuration built for mechanism %s", mechanism.value)
    return credential
