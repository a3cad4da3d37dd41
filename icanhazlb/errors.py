"""Error definitions for icanhazlb provisioning."""

from typing import Optional


class IcanhazlbError(Exception):
    """Base class for all icanhazlb errors."""


class ConfigurationError(IcanhazlbError):
    """Raised when a configuration file cannot be read or is invalid."""


class AddressError(IcanhazlbError):
    """Raised when no usable IPv4 address can be derived from a hostname."""

    def __init__(self, message: str, hostname: str):
        super().__init__(message)
        self.hostname = hostname


class AddressNotFound(AddressError):
    """Raised when the hostname carries no dotted-quad pattern at all."""

    def __init__(self, hostname: str):
        super().__init__(f"No IP address pattern found in hostname: {hostname!r}", hostname)


class AddressInvalid(AddressError):
    """Raised when a matched pattern is not a valid IPv4 address."""

    def __init__(self, hostname: str, candidate: str):
        super().__init__(
            f"Invalid IPv4 address {candidate!r} in hostname: {hostname!r}", hostname
        )
        self.candidate = candidate


class SubmissionFailed(IcanhazlbError):
    """Raised when a document cannot be serialized or the store rejects it."""

    def __init__(self, message: str, resource_name: str, status: Optional[int] = None):
        super().__init__(message)
        self.resource_name = resource_name
        self.status = status
