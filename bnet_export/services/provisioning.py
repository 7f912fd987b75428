"""Provisioning URI encoding for TOTP apps.

See also:
    https://github.com/google/google-authenticator/wiki/Key-Uri-Format
"""

import base64
import binascii
from typing import Optional
from urllib.parse import quote, urlencode

from ..core.exceptions import DecodeError, EncodeError
from ..core.models import DEFAULT_ISSUER, TOTP_ALGORITHM, TOTP_DIGITS, TOTP_PERIOD


def encode_secret(secret: bytes) -> str:
    """Base32 encode a secret without padding.

    The otpauth scheme does not use base32 padding, and several TOTP apps
    reject secrets that carry it.
    """
    return base64.b32encode(bytes(secret)).decode("ascii").rstrip("=")


def decode_secret(encoded: str) -> bytes:
    """Decode an unpadded (or padded) base32 secret back to bytes.

    Raises:
        DecodeError: If the text is not valid base32
    """
    text = encoded.strip().rstrip("=")
    missing_padding = len(text) % 8
    if missing_padding:
        text += "=" * (8 - missing_padding)
    try:
        return base64.b32decode(text, casefold=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"secret is not valid base32: {e}")


def build_provisioning_uri(secret: bytes, label: str, issuer: str = DEFAULT_ISSUER) -> str:
    """Build the ``otpauth://totp`` URI for a raw device secret.

    Args:
        secret: Raw device secret
        label: Account name shown in the TOTP app
        issuer: Organization title of the entry

    Returns:
        Provisioning URI

    Raises:
        EncodeError: If the secret is empty
    """
    if not secret:
        raise EncodeError("device secret is empty; refusing to build a provisioning URI")

    path_label = quote(issuer, safe="") + ":" + quote(label, safe="")
    url_args = {
        "secret": encode_secret(secret),
        "issuer": issuer,
        "algorithm": TOTP_ALGORITHM,
        "digits": TOTP_DIGITS,
        "period": TOTP_PERIOD,
    }
    return "otpauth://totp/{0}?{1}".format(path_label, urlencode(url_args, quote_via=quote))


class ProvisioningEncoder:
    """Turns a device secret into a provisioning URI."""

    def __init__(self, default_issuer: str = DEFAULT_ISSUER):
        self.default_issuer = default_issuer

    def encode(self, device_secret: bytes, label: str, issuer: Optional[str] = None) -> str:
        return build_provisioning_uri(device_secret, label, issuer or self.default_issuer)
