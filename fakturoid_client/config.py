"""
Environment-driven configuration for the Fakturoid clients.

Credentials are normally passed to the client constructors directly.
:class:`FakturoidSettings` is an optional convenience that reads them
from ``FAKTUROID_*`` environment variables or a local ``.env`` file::

    FAKTUROID_EMAIL=me@example.com
    FAKTUROID_API_TOKEN=0123456789abcdef
    FAKTUROID_SLUG=mycompany
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://app.fakturoid.cz/api/v2"


class FakturoidSettings(BaseSettings):
    """Connection settings for a single Fakturoid account."""

    model_config = SettingsConfigDict(
        env_prefix="FAKTUROID_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    email: str = Field(
        ...,
        min_length=1,
        description="Login email of the API user.",
    )
    api_token: str = Field(
        ...,
        min_length=1,
        description="API token from the user's settings page.",
    )
    slug: str = Field(
        ...,
        min_length=1,
        description="Account slug, the subdomain part of app.fakturoid.cz/<slug>.",
    )
    user_agent: Optional[str] = Field(
        default=None,
        description="User-Agent header; Fakturoid asks for an app name and contact email.",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        min_length=8,
        description="API root, without the accounts/<slug> part.",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout (seconds).",
    )
