"""Tests for CanadaPostConfig."""

import pytest
from pydantic import ValidationError

from canadapost_pws.config import (
    DEVELOPMENT_ENDPOINT,
    PRODUCTION_ENDPOINT,
    CanadaPostConfig,
)
from canadapost_pws.exceptions import ConfigurationError, NoCredentialsFound


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("API_KEY", "SECRET", "ENDPOINT", "CUSTOMER_NUMBER"):
        monkeypatch.delenv(f"CANADAPOST_{name}", raising=False)


def test_config_defaults():
    """Config targets production with polling defaults."""
    config = CanadaPostConfig()
    assert config.endpoint == PRODUCTION_ENDPOINT
    assert config.language == "en-CA"
    assert config.timeout_seconds == 30.0
    assert config.poll_max_attempts == 8
    assert config.poll_backoff_seconds == 1.0
    assert config.poll_max_delay_seconds == 30.0
    assert config.customer_number is None


def test_config_env_prefix(monkeypatch):
    """Config reads from CANADAPOST_ env vars."""
    monkeypatch.setenv("CANADAPOST_API_KEY", "key")
    monkeypatch.setenv("CANADAPOST_SECRET", "secret")
    monkeypatch.setenv("CANADAPOST_ENDPOINT", DEVELOPMENT_ENDPOINT)
    monkeypatch.setenv("CANADAPOST_POLL_MAX_ATTEMPTS", "3")
    config = CanadaPostConfig()
    assert config.require_credentials() == ("key", "secret")
    assert config.endpoint == DEVELOPMENT_ENDPOINT
    assert config.poll_max_attempts == 3


def test_endpoint_gets_trailing_slash():
    """Endpoint always ends with a slash."""
    config = CanadaPostConfig(endpoint="https://ct.soa-gw.canadapost.ca")
    assert config.endpoint == DEVELOPMENT_ENDPOINT


@pytest.mark.parametrize(
    "kwargs", [{}, {"api_key": "key"}, {"secret": "secret"}]
)
def test_missing_credentials(kwargs):
    """Missing credentials raise NoCredentialsFound."""
    config = CanadaPostConfig(**kwargs)
    with pytest.raises(NoCredentialsFound) as exc_info:
        config.require_credentials()
    assert isinstance(exc_info.value, ConfigurationError)


def test_poll_attempts_must_be_positive():
    """Zero poll attempts is rejected."""
    with pytest.raises(ValidationError):
        CanadaPostConfig(poll_max_attempts=0)
