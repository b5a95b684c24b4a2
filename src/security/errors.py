from __future__ import annotations


class SecurityConfigurationError(Exception):
    """Raised when a broker security profile cannot be built or validated."""

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


class InvalidProtocolError(SecurityConfigurationError):
    def __init__(self, protocol: str) -> None:
        super().__init__(f"Invalid security protocol: {protocol!r}")
        self.protocol = protocol


class CertificateFormatError(SecurityConfigurationError):
    def __init__(self, message: str, check: str) -> None:
        super().__init__(message)
        self.check = check


class MissingCredentialError(SecurityConfigurationError):
    def __init__(self, mechanism: str, field: str) -> None:
        super().__init__(f"{field} is required for {mechanism} SASL mechanism")
        self.mechanism = mechanism
        self.field = field


class UnsupportedMechanismError(SecurityConfigurationError):
    def __init__(self, mechanism: str) -> None:
        super().__init__(f"Unsupported SASL mechanism: {mechanism!r}")
        self.mechanism = mechanism


class ResourceCreationError(SecurityConfigurationError):
    pass
