"""Session token to bearer token exchange against the Battle.net SSO endpoint."""

import logging
from typing import Optional

import requests
from pydantic import BaseModel, ValidationError

from ..core.config import EndpointConfig
from ..core.exceptions import AuthRejected, ProtocolError, TransportError
from ..core.models import BearerToken, require_value
from ..utils.http import parse_json_response, session_scope

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"
ERROR_BODY_LIMIT = 500


class SsoRequest(BaseModel):
    """Form body of the SSO grant."""
    client_id: str
    grant_type: str
    scope: str
    token: str


class SsoResponse(BaseModel):
    """Fields read from the SSO grant response."""
    access_token: Optional[str] = None


def _auth_rejected(status: int, message: str) -> AuthRejected:
    return AuthRejected(message, status_code=status)


class TokenExchanger:
    """Trades a browser session token for a short-lived bearer token."""

    def __init__(self, endpoints: Optional[EndpointConfig] = None, session: Optional[requests.Session] = None):
        """Initialize the exchanger.

        Args:
            endpoints: Vendor endpoint configuration
            session: Optional HTTP session to use instead of a per-call one
        """
        self.endpoints = endpoints or EndpointConfig()
        self.session = session

    def exchange(self, session_token: str) -> BearerToken:
        """Exchange a session token for a bearer token.

        Args:
            session_token: Session token as held by ``Credentials``; the ``ST=``
                cookie prefix is already stripped there and is not stripped again

        Returns:
            Bearer token for the authenticator API

        Raises:
            InputError: If the session token is empty
            TransportError: If the SSO endpoint cannot be reached
            AuthRejected: If the endpoint answers with a non-2xx status
            ProtocolError: If the response carries no usable access token
        """
        token = require_value(session_token, "session token")
        payload = SsoRequest(
            client_id=self.endpoints.client_id,
            grant_type=self.endpoints.grant_type,
            scope=self.endpoints.scope,
            token=token,
        )

        logger.info("Exchanging session token for a bearer token")
        with session_scope(self.endpoints, self.session) as session:
            try:
                response = session.post(
                    self.endpoints.sso_url,
                    data=payload.model_dump(),
                    headers={"Content-Type": FORM_CONTENT_TYPE},
                    timeout=self.endpoints.request_timeout,
                )
            except requests.RequestException as e:
                raise TransportError(f"request failed for Battle.net SSO token exchange: {e}")

            data = parse_json_response(response, "SSO token exchange", ERROR_BODY_LIMIT, _auth_rejected)

        try:
            parsed = SsoResponse.model_validate(data)
        except ValidationError:
            raise ProtocolError("SSO response access_token is not a string")

        access_token = (parsed.access_token or "").strip()
        if not access_token:
            raise ProtocolError("SSO response did not include access_token")

        logger.info("Bearer token obtained")
        return BearerToken(value=access_token)
