"""Configuration models using Pydantic."""

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from livecheck.identity import DEFAULT_BASE_URL, HOST_MARKER
from livecheck.provider.http import DEFAULT_API_URL


class Provider(BaseModel):
    """Status provider configuration.

    Attributes:
        api_url: Stream list endpoint queried with all channels at once.
        timeout: HTTP request timeout in seconds.
        client_id: Optional API client ID.
    """

    api_url: str = DEFAULT_API_URL
    timeout: float = Field(default=10.0, gt=0)
    client_id: str | None = None


class Logging(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level (debug, info, warn, error, critical).
        format: Output format (json, text, console).
    """

    level: str = "info"
    format: str = "console"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate and normalize log level.

        Args:
            v: Input log level string.

        Returns:
            Lowercase validated log level.

        Raises:
            ValueError: If level is not recognized.
        """
        valid_levels = ["debug", "info", "warn", "warning", "error", "critical"]
        if v.lower() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.lower()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate and normalize log format.

        Args:
            v: Input log format string.

        Returns:
            Lowercase validated log format.

        Raises:
            ValueError: If format is not recognized.
        """
        valid_formats = ["json", "text", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v.lower()


class Config(BaseSettings):
    """Main application configuration.

    Supports environment variable overrides with LC_ prefix.

    Attributes:
        channels: Channel names or URLs to track.
        base_url: Platform base URL for canonical channel URLs.
        host_marker: Substring a channel URL must contain.
        case_sensitive_login: Match status logins against channel ids exactly.
        fetch_timeout: Upper bound in seconds for one batched status fetch.
        provider: Status provider settings.
        logging: Logging configuration.
    """

    model_config = SettingsConfigDict(
        env_prefix="LC_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    channels: list[str] = Field(default_factory=list)
    base_url: str = DEFAULT_BASE_URL
    host_marker: str = HOST_MARKER
    case_sensitive_login: bool = True
    fetch_timeout: float = Field(default=15.0, gt=0)

    provider: Provider = Field(default_factory=Provider)
    logging: Logging = Field(default_factory=Logging)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Drop trailing slashes so canonical URLs have a single separator.

        Args:
            v: Input base URL.

        Returns:
            Base URL without trailing slashes.
        """
        return v.rstrip("/")

    @field_validator("host_marker")
    @classmethod
    def validate_host_marker(cls, v: str) -> str:
        """Reject an empty host marker.

        Args:
            v: Input host marker.

        Returns:
            Validated host marker.

        Raises:
            ValueError: If the marker is empty or contains a slash.
        """
        if not v or "/" in v:
            raise ValueError(f"Invalid host marker: {v!r}. Must be a non-empty host name")
        return v
