"""Pytest fixtures for signing, gateway and API tests."""

import pytest

from src.integrations.contracts.interfaces import Credential
from src.utils.config_loader import MockConfig, RelaySettings

FIXED_TIMESTAMP = 1700000000
FIXED_NONCE = "000102030405060708090a0b0c0d0e0f"


@pytest.fixture
def credential():
    return Credential(api_key="test_api_key", api_secret="test_api_secret", merchant_id="merchant-001")


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def fixed_random():
    """16 bytes 00..0f, i.e. nonce 000102...0f."""
    return lambda n: bytes(range(n))


@pytest.fixture
def live_settings(credential):
    return RelaySettings(credential=credential, mock_mode=False, app_env="production")


@pytest.fixture
def mock_settings():
    return RelaySettings(
        mock_mode=True,
        app_env="development",
        mock=MockConfig(create_delay_seconds=0, status_delay_seconds=0),
    )
