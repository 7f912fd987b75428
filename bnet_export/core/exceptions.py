"""Custom exception classes for the authenticator exporter."""

from typing import Optional


class BnetExportError(Exception):
    """Base exception class for exporter errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def kind(self) -> str:
        """Stable error kind reported to the output layer."""
        return type(self).__name__


class ConfigurationError(BnetExportError):
    """Raised when there are configuration issues."""
    pass


class InputError(BnetExportError):
    """Raised when a credential string is empty after normalization."""
    pass


class TransportError(BnetExportError):
    """Raised when the vendor service cannot be reached."""
    pass


class AuthRejected(BnetExportError):
    """Raised when the vendor refuses the session or bearer token."""
    pass


class RestoreRejected(BnetExportError):
    """Raised when the serial/restore code pairing is refused."""
    pass


class ProtocolError(BnetExportError):
    """Raised when a response does not have the expected shape."""
    pass


class DecodeError(BnetExportError):
    """Raised when the device secret is not valid in its sub-encoding."""
    pass


class EncodeError(BnetExportError):
    """Raised when the provisioning URI cannot be built."""
    pass
