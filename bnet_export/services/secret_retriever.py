"""Device secret retrieval through the authenticator restore endpoint.

The restore endpoint exists to move an authenticator onto a new device. Here
it is only used to read back the device secret, but the vendor may treat the
call as a real restore and invalidate the restore code. Call it at most once
per run.
"""

import binascii
import logging
from typing import Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.config import EndpointConfig
from ..core.exceptions import (
    AuthRejected, BnetExportError, DecodeError, InputError,
    ProtocolError, RestoreRejected, TransportError
)
from ..core.models import BearerToken, mask_value, require_value
from ..utils.http import parse_json_response, session_scope

logger = logging.getLogger(__name__)

ERROR_BODY_LIMIT = 1000


class RestoreRequest(BaseModel):
    """JSON body of the restore call."""
    model_config = ConfigDict(populate_by_name=True)

    serial: str
    restore_code: str = Field(..., alias="restoreCode")


class RestoreResponse(BaseModel):
    """Fields read from the restore response."""
    model_config = ConfigDict(populate_by_name=True)

    device_secret: Optional[str] = Field(None, alias="deviceSecret")


def _restore_status_error(status: int, message: str) -> BnetExportError:
    # 401 means the bearer token itself was refused; anything else is the
    # serial/restore code pairing.
    if status == 401:
        return AuthRejected(message, status_code=status)
    return RestoreRejected(message, status_code=status)


def decode_device_secret(encoded: str) -> bytes:
    """Decode the hex-encoded ``deviceSecret`` field into raw bytes.

    Raises:
        DecodeError: If the value is not valid hex
    """
    try:
        return binascii.unhexlify(encoded.strip())
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"deviceSecret is not valid hex: {e}")


class SecretRetriever:
    """Reads the device secret of an authenticator using its restore code."""

    def __init__(self, endpoints: Optional[EndpointConfig] = None, session: Optional[requests.Session] = None):
        self.endpoints = endpoints or EndpointConfig()
        self.session = session

    def retrieve(self, bearer_token: BearerToken, serial: str, restore_code: str) -> bytes:
        """Retrieve the raw device secret.

        Args:
            bearer_token: Token obtained from the SSO exchange
            serial: Authenticator serial
            restore_code: Authenticator restore code (commonly single-use)

        Returns:
            Raw device secret bytes

        Raises:
            InputError: If any input is missing
            TransportError: If the endpoint cannot be reached
            AuthRejected: If the bearer token is refused
            RestoreRejected: If the serial/restore code pairing is refused
            ProtocolError: If the response carries no usable deviceSecret
            DecodeError: If deviceSecret is not valid hex
        """
        if bearer_token is None or not bearer_token.value:
            raise InputError("bearer token not set; SSO token exchange must run first")
        serial = require_value(serial, "authenticator serial")
        restore_code = require_value(restore_code, "restore code")

        payload = RestoreRequest(serial=serial, restore_code=restore_code)
        url = self.endpoints.restore_url

        logger.warning(
            f"Calling the authenticator restore endpoint for serial {mask_value(serial)}; "
            "the restore code may be consumed by this call"
        )
        with session_scope(self.endpoints, self.session) as session:
            try:
                response = session.post(
                    url,
                    json=payload.model_dump(by_alias=True),
                    headers={"Authorization": bearer_token.authorization_header()},
                    timeout=self.endpoints.request_timeout,
                )
            except requests.RequestException as e:
                raise TransportError(f"request failed for {url}: {e}")

            data = parse_json_response(response, "restore request", ERROR_BODY_LIMIT, _restore_status_error)

        try:
            parsed = RestoreResponse.model_validate(data)
        except ValidationError:
            raise ProtocolError("restore response deviceSecret is not a string")

        encoded = (parsed.device_secret or "").strip()
        if not encoded:
            raise ProtocolError("restore response missing deviceSecret")

        secret = decode_device_secret(encoded)
        logger.info(f"Device secret retrieved ({len(secret)} bytes)")
        return secret
