from __future__ import annotations

# Raw configuration keys (already stripped of the upstream KAFKA_ prefix).
SECURITY_PROTOCOL = "SECURITY_PROTOCOL"

SSL_CA_CERTIFICATE = "SSL_CA_CERTIFICATE"
SSL_ENABLED_PROTOCOLS = "SSL_ENABLED_PROTOCOLS"
SSL_CIPHER_SUITES = "SSL_CIPHER_SUITES"
SSL_ENDPOINT_IDENTIFICATION_ALGORITHM = "SSL_ENDPOINT_IDENTIFICATION_ALGORITHM"
SSL_KEYSTORE_TYPE_DYNAMIC = "SSL_KEYSTORE_TYPE_DYNAMIC"
SSL_TRUSTSTORE_PASSWORD_DYNAMIC = "SSL_TRUSTSTORE_PASSWORD_DYNAMIC"

SASL_MECHANISM = "SASL_MECHANISM"
SASL_USERNAME = "SASL_USERNAME"
SASL_PASSWORD = "SASL_PASSWORD"
SASL_SCRAM_USERNAME = "SASL_SCRAM_USERNAME"
SASL_SCRAM_PASSWORD = "SASL_SCRAM_PASSWORD"

SASL_KERBEROS_PRINCIPAL = "SASL_KERBEROS_PRINCIPAL"
SASL_KERBEROS_KEYTAB = "SASL_KERBEROS_KEYTAB"
SASL_KERBEROS_SERVICE_NAME = "SASL_KERBEROS_SERVICE_NAME"
SASL_KERBEROS_KINIT_CMD = "SASL_KERBEROS_KINIT_CMD"
SASL_KERBEROS_MIN_TIME_BEFORE_RELOGIN = "SASL_KERBEROS_MIN_TIME_BEFORE_RELOGIN"
SASL_KERBEROS_TICKET_RENEW_JITTER = "SASL_KERBEROS_TICKET_RENEW_JITTER"
SASL_KERBEROS_TICKET_RENEW_WINDOW_FACTOR = "SASL_KERBEROS_TICKET_RENEW_WINDOW_FACTOR"

SASL_OAUTH_TOKEN = "SASL_OAUTH_TOKEN"
SASL_OAUTH_TOKEN_ENDPOINT = "SASL_OAUTH_TOKEN_ENDPOINT"

SASL_CLIENT_CALLBACK_HANDLER_CLASS = "SASL_CLIENT_CALLBACK_HANDLER_CLASS"
SASL_LOGIN_CALLBACK_HANDLER_CLASS = "SASL_LOGIN_CALLBACK_HANDLER_CLASS"
SASL_LOGIN_CLASS = "SASL_LOGIN_CLASS"
SASL_LOGIN_REFRESH_BUFFER_SECONDS = "SASL_LOGIN_REFRESH_BUFFER_SECONDS"
SASL_LOGIN_REFRESH_MIN_PERIOD_SECONDS = "SASL_LOGIN_REFRESH_MIN_PERIOD_SECONDS"
SASL_LOGIN_REFRESH_WINDOW_FACTOR = "SASL_LOGIN_REFRESH_WINDOW_FACTOR"
SASL_LOGIN_REFRESH_WINDOW_JITTER = "SASL_LOGIN_REFRESH_WINDOW_JITTER"

RECOGNIZED_KEYS = frozenset(
    {
        SECURITY_PROTOCOL,
        SSL_CA_CERTIFICATE,
        SSL_ENABLED_PROTOCOLS,
        SSL_CIPHER_SUITES,
        SSL_ENDPOINT_IDENTIFICATION_ALGORITHM,
        SSL_KEYSTORE_TYPE_DYNAMIC,
        SSL_TRUSTSTORE_PASSWORD_DYNAMIC,
        SASL_MECHANISM,
        SASL_USERNAME,
        SASL_PASSWORD,
        SASL_SCRAM_USERNAME,
        SASL_SCRAM_PASSWORD,
        SASL_KERBEROS_PRINCIPAL,
        SASL_KERBEROS_KEYTAB,
        SASL_KERBEROS_SERVICE_NAME,
        SASL_KERBEROS_KINIT_CMD,
        SASL_KERBEROS_MIN_TIME_BEFORE_RELOGIN,
        SASL_KERBEROS_TICKET_RENEW_JITTER,
        SASL_KERBEROS_TICKET_RENEW_WINDOW_FACTOR,
        SASL_OAUTH_TOKEN,
        SASL_OAUTH_TOKEN_ENDPOINT,
        SASL_CLIENT_CALLBACK_HANDLER_CLASS,
        SASL_LOGIN_CALLBACK_HANDLER_CLASS,
        SASL_LOGIN_CLASS,
        SASL_LOGIN_REFRESH_BUFFER_SECONDS,
        SASL_LOGIN_REFRESH_MIN_PERIOD_SECONDS,
        SASL_LOGIN_REFRESH_WINDOW_FACTOR,
        SASL_LOGIN_REFRESH_WINDOW_JITTER,
    }
)

# Broker connection properties produced by the engine.
PROP_SECURITY_PROTOCOL = "security.protocol"
PROP_TRUSTSTORE_LOCATION = "ssl.truststore.location"
PROP_TRUSTSTORE_PASSWORD = "ssl.truststore.password"
PROP_TRUSTSTORE_TYPE = "ssl.truststore.type"
PROP_SSL_ENABLED_PROTOCOLS = "ssl.enabled.protocols"
PROP_SSL_CIPHER_SUITES = "ssl.cipher.suites"
PROP_SSL_ENDPOINT_IDENTIFICATION_ALGORITHM = "ssl.endpoint.identification.algorithm"
PROP_SASL_MECHANISM = "sasl.mechanism"
PROP_SASL_JAAS_CONFIG = "sasl.jaas.config"
PROP_SASL_KERBEROS_SERVICE_NAME = "sasl.kerberos.service.name"
PROP_SASL_KERBEROS_KINIT_CMD = "sasl.kerberos.kinit.cmd"
PROP_SASL_KERBEROS_MIN_TIME_BEFORE_RELOGIN = "sasl.kerberos.min.time.before.relogin"

# Raw key -> broker property, copied through verbatim when present.
SASL_GENERIC_PROPERTIES: tuple[tuple[str, str], ...] = (
    (SASL_CLIENT_CALLBACK_HANDLER_CLASS, "sasl.client.callback.handler.class"),
    (SASL_LOGIN_CALLBACK_HANDLER_CLASS, "sasl.login.callback.handler.class"),
    (SASL_LOGIN_CLASS, "sasl.login.class"),
)

SASL_LOGIN_REFRESH_PROPERTIES: tuple[tuple[str, str], ...] = (
    (SASL_LOGIN_REFRESH_BUFFER_SECONDS, "sasl.login.refresh.buffer.seconds"),
    (SASL_LOGIN_REFRESH_MIN_PERIOD_SECONDS, "sasl.login.refresh.min.period.seconds"),
    (SASL_LOGIN_REFRESH_WINDOW_FACTOR, "sasl.login.refresh.window.factor"),
    (SASL_LOGIN_REFRESH_WINDOW_JITTER, "sasl.login.refresh.window.jitter"),
)

SASL_KERBEROS_PROPERTIES: tuple[tuple[str, str], ...] = (
    (SASL_KERBEROS_SERVICE_NAME, PROP_SASL_KERBEROS_SERVICE_NAME),
    (SASL_KERBEROS_KINIT_CMD, PROP_SASL_KERBEROS_KINIT_CMD),
    (SASL_KERBEROS_MIN_TIME_BEFORE_RELOGIN, PROP_SASL_KERBEROS_MIN_TIME_BEFORE_RELOGIN),
    (SASL_KERBEROS_TICKET_RENEW_JITTER, "sasl.kerberos.ticket.renew.jitter"),
    (
        SASL_KERBEROS_TICKET_RENEW_WINDOW_FACTOR,
        "sasl.kerberos.ticket.renew.window.factor",
    ),
)
