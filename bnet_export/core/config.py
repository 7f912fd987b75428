"""Configuration management for the authenticator exporter."""

import os
import yaml
from pathlib import Path
from typing import Dict, Optional
from pydantic import BaseModel, Field, ValidationError
from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationError
from .models import DEFAULT_ISSUER
from .. import __version__


DEFAULT_CONFIG_PATH = "config.yml"


class EndpointConfig(BaseModel):
    """Vendor endpoints and the SSO client identity."""
    sso_url: str = Field("https://oauth.battle.net/oauth/sso", description="Session token exchange endpoint")
    authenticator_base_url: str = Field(
        "https://authenticator-rest-api.bnet-identity.blizzard.net/v1/authenticator",
        description="Authenticator REST API base URL"
    )
    client_id: str = Field("baedda12fe054e4abdfc3ad7bdea970a", description="OAuth client id used for the SSO grant")
    grant_type: str = Field("client_sso", description="OAuth grant type for the SSO exchange")
    scope: str = Field("auth.authenticator", description="OAuth scope requested for the bearer token")
    user_agent: str = Field(f"bnet-export/{__version__}", description="User-Agent header sent with every request")
    request_timeout: Optional[float] = Field(None, description="HTTP timeout in seconds (None keeps the transport default)")

    @property
    def restore_url(self) -> str:
        return self.authenticator_base_url.rstrip("/") + "/device"


class ProvisioningConfig(BaseModel):
    """Provisioning URI settings."""
    issuer: str = Field(DEFAULT_ISSUER, description="Issuer shown in the TOTP app entry")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field("WARNING", description="Logging level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )
    file: Optional[str] = Field(None, description="Optional log file path")


class AppConfig(BaseModel):
    """Main application configuration."""
    endpoints: EndpointConfig = Field(default_factory=EndpointConfig, description="Vendor endpoints")
    provisioning: ProvisioningConfig = Field(default_factory=ProvisioningConfig, description="Provisioning settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging settings")


class ConfigManager:
    """Manages application configuration."""

    CREDENTIAL_KEYS = {
        'session_token': 'BNET_SESSION_TOKEN',
        'serial': 'BNET_SERIAL',
        'restore_code': 'BNET_RESTORE_CODE',
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file. When omitted, ``config.yml``
                is used if it exists and built-in defaults otherwise.
        """
        self._explicit_path = config_path is not None
        self.config_path = Path(config_path or DEFAULT_CONFIG_PATH)
        self._config: Optional[AppConfig] = None
        self._credentials: Dict[str, str] = {}

        # Load environment variables
        load_dotenv(find_dotenv(usecwd=True))
        self._load_credentials()

    def _load_credentials(self):
        """Load default credentials from environment variables."""
        for name, key in self.CREDENTIAL_KEYS.items():
            value = os.getenv(key)
            if value:
                self._credentials[name] = value

    def load_config(self) -> AppConfig:
        """Load configuration from file.

        Returns:
            Loaded configuration

        Raises:
            ConfigurationError: If an explicit config file is missing or the
                file is invalid
        """
        if not self.config_path.exists():
            if self._explicit_path:
                raise ConfigurationError(f"Configuration file not found: {self.config_path}")
            self._config = AppConfig()
            return self._config

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {self.config_path}")

        try:
            self._config = AppConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Error loading configuration: {e}")
        return self._config

    def get_config(self) -> AppConfig:
        """Get current configuration, loading if necessary.

        Returns:
            Current configuration
        """
        if self._config is None:
            self.load_config()
        return self._config

    def get_credentials(self) -> Dict[str, str]:
        """Get credentials supplied through the environment.

        Returns:
            Dictionary with any of ``session_token``, ``serial`` and
            ``restore_code`` that were set
        """
        return dict(self._credentials)
