"""Data models for the authenticator export pipeline."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import BnetExportError, InputError


# These must match what the Battle.net authenticator actually generates.
TOTP_ALGORITHM = "SHA1"
TOTP_DIGITS = 8
TOTP_PERIOD = 30

DEFAULT_ISSUER = "Battle.net"


def require_value(value: Optional[str], field_name: str) -> str:
    """Strip a credential string and reject it if nothing is left.

    Args:
        value: Raw input string
        field_name: Human readable name used in the error message

    Returns:
        The stripped value

    Raises:
        InputError: If the value is missing, blank or not a string
    """
    if value is not None and not isinstance(value, str):
        raise InputError(f"{field_name} must be a string, not {type(value).__name__}")
    if value is None or not value.strip():
        raise InputError(f"{field_name} is required")
    return value.strip()


def normalize_session_token(value: Optional[str]) -> str:
    """Strip whitespace and the ``ST=`` cookie prefix from a session token."""
    token = require_value(value, "session token")
    for prefix in ("ST=", "st="):
        if token.startswith(prefix):
            token = token[len(prefix):]
            break
    return require_value(token, "session token")


def mask_value(value: str, visible: int = 4) -> str:
    """Mask all but the last few characters of a value for logging."""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


class Credentials(BaseModel):
    """The three strings supplied once per run."""
    model_config = ConfigDict(frozen=True)

    session_token: str = Field(..., repr=False, description="Battle.net session token (ST=...)")
    serial: str = Field(..., description="Authenticator serial, e.g. US-1234-5678-9012")
    restore_code: str = Field(..., repr=False, description="Authenticator restore code")

    @field_validator("session_token", mode="before")
    @classmethod
    def _normalize_session_token(cls, value):
        return normalize_session_token(value)

    @field_validator("serial", mode="before")
    @classmethod
    def _normalize_serial(cls, value):
        return require_value(value, "authenticator serial")

    @field_validator("restore_code", mode="before")
    @classmethod
    def _normalize_restore_code(cls, value):
        return require_value(value, "restore code")


class BearerToken(BaseModel):
    """Short-lived access token returned by the SSO exchange."""
    model_config = ConfigDict(frozen=True)

    value: str = Field(..., repr=False)

    def authorization_header(self) -> str:
        return f"Bearer {self.value}"


class ExportResult(BaseModel):
    """Outcome of a successful export."""
    model_config = ConfigDict(frozen=True)

    serial: str
    issuer: str
    label: str
    uri: str
    algorithm: str = TOTP_ALGORITHM
    digits: int = TOTP_DIGITS
    period: int = TOTP_PERIOD


class ErrorDescriptor(BaseModel):
    """Structured error handed to the output layer."""
    kind: str
    message: str
    status_code: Optional[int] = None

    @classmethod
    def from_exception(cls, error: BnetExportError) -> "ErrorDescriptor":
        return cls(kind=error.kind, message=error.message, status_code=error.status_code)
