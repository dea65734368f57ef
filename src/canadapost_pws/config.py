"""Client configuration."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from canadapost_pws.exceptions import NoCredentialsFound

PRODUCTION_ENDPOINT = "https://soa-gw.canadapost.ca/"
DEVELOPMENT_ENDPOINT = "https://ct.soa-gw.canadapost.ca/"


class CanadaPostConfig(BaseSettings):
    """Runtime config for the Canada Post client.

    Reads from environment variables with CANADAPOST_ prefix.
    """

    model_config = SettingsConfigDict(env_prefix="CANADAPOST_")

    api_key: str | None = None
    secret: str | None = None
    endpoint: str = PRODUCTION_ENDPOINT
    customer_number: str | None = None
    contract_id: str | None = None
    platform_id: str | None = None
    language: str = "en-CA"
    timeout_seconds: float = 30.0

    # Manifest polling settings
    poll_max_attempts: int = Field(default=8, ge=1)
    poll_backoff_seconds: float = Field(default=1.0, gt=0)
    poll_max_delay_seconds: float = Field(default=30.0, gt=0)

    @field_validator("endpoint")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else f"{value}/"

    def require_credentials(self) -> tuple[str, str]:
        """Return ``(api_key, secret)`` or raise NoCredentialsFound."""
        if not self.api_key or not self.secret:
            raise NoCredentialsFound(
                "Canada Post API key and secret are required "
                "(set CANADAPOST_API_KEY and CANADAPOST_SECRET)"
            )
        return self.api_key, self.secret
