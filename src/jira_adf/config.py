"""Configuration management with pydantic-settings for the Jira ADF converter.

- Automatic .env file loading with environment variables taking precedence
- Validation with clear error messages
- SecretStr for the Jira API token
- Frozen config (thread-safe, immutable after load)
"""

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "VALID_LOG_FORMATS",
    "VALID_LOG_LEVELS",
    "AdfConfig",
    "get_config",
    "reset_config",
]

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("json", "text")


class AdfConfig(BaseSettings):
    """Configuration for the converter and its Jira client.

    Loads from (in order of precedence):
    1. Environment variables (highest priority)
    2. .env file in the working directory
    3. Default values (lowest priority)

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json for production, text for development)
        adf_max_depth: Nesting depth rendered as structure before falling back to plain text
        jira_instance_url: Jira Cloud instance URL (e.g., https://company.atlassian.net)
        jira_email: Jira account email for Basic Auth
        jira_api_token: Jira API token (stored as SecretStr)
        jira_request_delay_ms: Delay between paginated Jira requests
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
        populate_by_name=True,  # AdfConfig(log_level=...) alongside the env aliases
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="JIRA_ADF_LOG_LEVEL",
        description="Logging level",
    )

    log_format: str = Field(
        default="json",
        validation_alias="JIRA_ADF_LOG_FORMAT",
        description="Log output format: json or text",
    )

    adf_max_depth: int = Field(
        default=100,
        ge=1,
        le=500,
        description="Maximum ADF nesting rendered as structure; deeper subtrees render as plain text",
    )

    jira_instance_url: str = Field(
        default="",
        description="Jira Cloud instance URL (e.g., https://company.atlassian.net)",
    )

    jira_email: str = Field(
        default="",
        description="Jira account email for Basic Auth",
    )

    jira_api_token: SecretStr = Field(
        default=SecretStr(""),
        description="Jira API token for authentication (stored securely)",
    )

    jira_request_delay_ms: int = Field(
        default=100,
        ge=0,
        le=5000,
        description="Delay between Jira API requests in milliseconds (rate limiting)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, got {v!r}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in VALID_LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(VALID_LOG_FORMATS)}, got {v!r}")
        return fmt

    @field_validator("jira_instance_url")
    @classmethod
    def strip_instance_url(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @property
    def jira_configured(self) -> bool:
        """True when URL, email and token are all set."""
        return bool(
            self.jira_instance_url
            and self.jira_email
            and self.jira_api_token.get_secret_value()
        )


@lru_cache(maxsize=1)
def get_config() -> AdfConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Returns:
        AdfConfig singleton instance.

    Raises:
        ValidationError: If configuration values are invalid.
    """
    return AdfConfig()


def reset_config() -> None:
    """Reset configuration singleton for testing.

    Warning:
        Only use in test code. Production code should not reset config.
    """
    get_config.cache_clear()
