"""HTTP helpers shared by the network-facing pipeline stages."""

import json
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

import requests

from ..core.config import EndpointConfig
from ..core.exceptions import BnetExportError, ProtocolError

logger = logging.getLogger(__name__)

StatusErrorFactory = Callable[[int, str], BnetExportError]


def build_session(endpoints: EndpointConfig) -> requests.Session:
    """Create a session carrying the default headers for vendor requests.

    Args:
        endpoints: Endpoint configuration providing the User-Agent

    Returns:
        A new ``requests.Session``; the caller owns and closes it
    """
    session = requests.Session()
    session.headers.update({
        "User-Agent": endpoints.user_agent,
        "Accept": "application/json",
    })
    return session


@contextmanager
def session_scope(endpoints: EndpointConfig, session: Optional[requests.Session] = None) -> Iterator[requests.Session]:
    """Yield the injected session, or a fresh one that is closed afterwards."""
    if session is not None:
        yield session
        return

    owned = build_session(endpoints)
    try:
        yield owned
    finally:
        owned.close()


def truncate(text: str, max_chars: int) -> str:
    return text[:max_chars]


def is_json_content_type(content_type: str) -> bool:
    return "json" in content_type.lower()


def parse_json_response(
    response: requests.Response,
    label: str,
    body_limit: int,
    on_error_status: StatusErrorFactory,
) -> Dict[str, Any]:
    """Validate an HTTP response and decode its JSON object body.

    Args:
        response: Response returned by the vendor service
        label: Name of the step, used in error messages
        body_limit: Maximum number of body characters quoted in errors
        on_error_status: Builds the error raised for a non-2xx status

    Returns:
        Decoded JSON object

    Raises:
        BnetExportError: Whatever ``on_error_status`` builds for non-2xx statuses
        ProtocolError: If the body is not a JSON object
    """
    status = response.status_code
    content_type = response.headers.get("Content-Type", "") or ""
    body = response.text or ""

    if not 200 <= status < 300:
        logger.debug(f"{label} failed with HTTP {status}")
        raise on_error_status(
            status,
            f"{label} failed with HTTP {status}. Response: {truncate(body, body_limit)}"
        )

    if not is_json_content_type(content_type):
        raise ProtocolError(
            f"{label} returned non-JSON content (Content-Type: {content_type or '(missing)'}). "
            f"Response: {truncate(body, body_limit)}"
        )

    try:
        data = json.loads(body)
    except ValueError as e:
        raise ProtocolError(f"failed to parse {label} JSON response: {e}")

    if not isinstance(data, dict):
        raise ProtocolError(f"{label} JSON response is not an object")
    return data
