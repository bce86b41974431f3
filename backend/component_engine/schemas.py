"""Pydantic schemas for engine inputs."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from . import config
from .errors import ErrorKind, ExtractionError

_RESOURCE_TYPE_RE = re.compile(r"^[a-z0-9_-]+$")


class ConnectionConfig(BaseModel):
    """WordPress connection used to fetch component documents."""
    base_url: str = Field(..., description="Site URL, e.g. https://components.example.org")
    resource_type: str = Field(
        default="posts",
        description="REST collection holding components (posts, pages, elementor_library, ...)",
    )
    username: Optional[str] = None
    application_password: Optional[str] = None

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, url: str) -> str:
        url = url.strip()
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"must use http or https (got '{parsed.scheme}')")
        if not parsed.hostname:
            raise ValueError("missing hostname")
        return url.rstrip("/")

    @field_validator("resource_type")
    @classmethod
    def validate_resource_type(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not _RESOURCE_TYPE_RE.match(value):
            raise ValueError(f"'{value}' is not a valid REST resource slug")
        return value

    @field_validator("username", "application_password")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @model_validator(mode="after")
    def credentials_paired(self) -> "ConnectionConfig":
        if bool(self.username) != bool(self.application_password):
            raise ValueError(
                "username and application_password must be provided together"
            )
        return self

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.application_password)

    @classmethod
    def from_env(cls) -> "ConnectionConfig":
        """Build from WP_* environment variables (see config.py)."""
        return cls.build(
            base_url=config.WP_BASE_URL,
            resource_type=config.WP_POST_TYPE,
            username=config.WP_USERNAME,
            application_password=config.WP_APPLICATION_PASSWORD,
        )

    @classmethod
    def build(cls, **values) -> "ConnectionConfig":
        """Validate connection values, raising ExtractionError on bad input."""
        try:
            return cls(**values)
        except ValidationError as e:
            fields = ", ".join(
                ".".join(str(p) for p in err["loc"]) or "connection"
                for err in e.errors()
            )
            raise ExtractionError(
                ErrorKind.INVALID_CONFIGURATION,
                f"Invalid connection configuration: {fields}",
            ) from e
