"""
Configuration loader for the PayPay relay.

Secrets and switches come from the environment (a .env file is honoured via
python-dotenv by the caller). Non-secret tuning lives in
config/relay_config.yml and is optional.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.integrations.contracts.interfaces import Credential, Environment
from src.integrations.contracts.payments import DEFAULT_REDIRECT_URL
from src.integrations.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "relay_config.yml"

_TRUTHY = {"1", "true", "yes", "on"}

_CREDENTIAL_ENV = {
    "api_key": "PAYPAY_API_KEY",
    "api_secret": "PAYPAY_API_SECRET",
    "merchant_id": "PAYPAY_MERCHANT_ID",
}


class ProviderConfig(BaseModel):
    """Provider endpoints and per-call timeouts"""

    sandbox_base_url: str = "https://stg-api.paypay.ne.jp"
    production_base_url: str = "https://api.paypay.ne.jp"
    create_timeout_seconds: float = Field(default=30.0, gt=0)
    status_timeout_seconds: float = Field(default=15.0, gt=0)
    redirect_url: str = DEFAULT_REDIRECT_URL


class MockConfig(BaseModel):
    """Artificial delays used by the mock gateway"""

    create_delay_seconds: float = Field(default=1.0, ge=0)
    status_delay_seconds: float = Field(default=0.5, ge=0)


class RelayFileConfig(BaseModel):
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    mock: MockConfig = Field(default_factory=MockConfig)


class RelaySettings(BaseModel):
    """Immutable process-wide settings, built once at startup."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    credential: Optional[Credential] = None
    environment: Environment = Environment.SANDBOX
    mock_mode: bool = False
    port: int = Field(default=3000, ge=1, le=65535)
    app_env: str = "development"
    debug_endpoint: bool = False
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    mock: MockConfig = Field(default_factory=MockConfig)

    @property
    def api_base_url(self) -> str:
        if self.environment == Environment.PRODUCTION:
            return self.provider.production_base_url.rstrip("/")
        return self.provider.sandbox_base_url.rstrip("/")

    @property
    def is_development(self) -> bool:
        return self.app_env.strip().lower() == "development"


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def load_file_config(config_path: Optional[Path] = None) -> RelayFileConfig:
    """
    Load non-secret tuning from YAML.

    A missing file at the default location is not an error; a missing file at an
    explicitly requested location is.
    """
    explicit = config_path is not None
    path = Path(config_path) if explicit else DEFAULT_CONFIG_PATH

    if not path.exists():
        if explicit:
            raise ConfigurationError(f"Relay config file not found: {path}")
        logger.debug("No relay config file at %s, using defaults", path)
        return RelayFileConfig()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = RelayFileConfig(**data)
        logger.info("Loaded relay config from %s", path)
        return cfg
    except ValidationError as e:
        logger.error("Relay config validation failed: %s", e)
        raise ConfigurationError(f"Invalid relay config in {path}: {e}") from e


def load_credential(env: Mapping[str, str]) -> Credential:
    values: Dict[str, str] = {
        field: (env.get(var) or "").strip() for field, var in _CREDENTIAL_ENV.items()
    }
    return Credential(**values)


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> RelaySettings:
    """
    Build RelaySettings from environment variables and the optional YAML file.

    Raises:
        ConfigurationError: credentials missing while mock mode is off, or the
            environment selector / port / config file is invalid
    """
    env = os.environ if env is None else env

    if config_path is None and env.get("RELAY_CONFIG_PATH"):
        config_path = Path(env["RELAY_CONFIG_PATH"])
    file_cfg = load_file_config(config_path)

    mock_mode = _flag(env.get("PAYPAY_MOCK_MODE"))
    credential = load_credential(env)
    missing = [_CREDENTIAL_ENV[name] for name in credential.missing_fields()]

    if missing and not mock_mode:
        raise ConfigurationError(
            "Missing required PayPay credentials in environment variables: "
            + ", ".join(missing)
            + ". Set PAYPAY_MOCK_MODE=true to run without credentials."
        )

    environment_raw = (env.get("PAYPAY_ENVIRONMENT") or Environment.SANDBOX.value).strip().lower()
    try:
        environment = Environment(environment_raw)
    except ValueError as e:
        raise ConfigurationError(
            f"PAYPAY_ENVIRONMENT must be 'sandbox' or 'production', got '{environment_raw}'"
        ) from e

    try:
        settings = RelaySettings(
            credential=None if missing else credential,
            environment=environment,
            mock_mode=mock_mode,
            port=int(env.get("PORT") or 3000),
            app_env=(env.get("APP_ENV") or "development").strip().lower(),
            debug_endpoint=_flag(env.get("RELAY_ENABLE_DEBUG")),
            provider=file_cfg.provider,
            mock=file_cfg.mock,
        )
    except (ValueError, ValidationError) as e:
        raise ConfigurationError(f"Invalid relay settings: {e}") from e

    logger.info(
        "Relay settings loaded: environment=%s mock_mode=%s port=%d",
        settings.environment.value,
        settings.mock_mode,
        settings.port,
    )
    return settings
