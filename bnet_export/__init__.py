"""Export Battle.net authenticator secrets as otpauth:// provisioning URIs."""

__version__ = "0.1.0"

from .core.exceptions import BnetExportError  # noqa: E402
from .core.models import Credentials, ExportResult  # noqa: E402
from .services import export_authenticator  # noqa: E402

__all__ = ["BnetExportError", "Credentials", "ExportResult", "export_authenticator", "__version__"]
