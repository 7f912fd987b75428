"""Sequential export pipeline: session token -> bearer token -> secret -> URI."""

import logging
from typing import Optional

from ..core.config import AppConfig
from ..core.exceptions import BnetExportError
from ..core.models import Credentials, ErrorDescriptor, ExportResult, mask_value
from .provisioning import ProvisioningEncoder
from .secret_retriever import SecretRetriever
from .token_exchanger import TokenExchanger

logger = logging.getLogger(__name__)


def export_authenticator(
    credentials: Credentials,
    config: Optional[AppConfig] = None,
    *,
    label: Optional[str] = None,
    issuer: Optional[str] = None,
    exchanger: Optional[TokenExchanger] = None,
    retriever: Optional[SecretRetriever] = None,
    encoder: Optional[ProvisioningEncoder] = None,
) -> ExportResult:
    """Run the three export stages once, in order.

    Args:
        credentials: Session token, serial and restore code for this run
        config: Application configuration (defaults when omitted)
        label: Account label in the TOTP app; defaults to the serial
        issuer: Issuer in the TOTP app; defaults to the configured issuer
        exchanger: TokenExchanger to use instead of a default one
        retriever: SecretRetriever to use instead of a default one
        encoder: ProvisioningEncoder to use instead of a default one

    Returns:
        Export result carrying the provisioning URI

    Raises:
        BnetExportError: The first error raised by any stage, unchanged
    """
    config = config or AppConfig()
    exchanger = exchanger or TokenExchanger(config.endpoints)
    retriever = retriever or SecretRetriever(config.endpoints)
    encoder = encoder or ProvisioningEncoder(config.provisioning.issuer)

    issuer = issuer or config.provisioning.issuer
    label = label or credentials.serial

    logger.info(f"Starting export for serial {mask_value(credentials.serial)}")
    bearer_token = exchanger.exchange(credentials.session_token)
    device_secret = retriever.retrieve(bearer_token, credentials.serial, credentials.restore_code)
    uri = encoder.encode(device_secret, label, issuer)
    logger.info("Provisioning URI built")

    return ExportResult(serial=credentials.serial, issuer=issuer, label=label, uri=uri)


def describe_error(error: BnetExportError) -> ErrorDescriptor:
    """Convert a pipeline error into the descriptor shown to the user."""
    return ErrorDescriptor.from_exception(error)
