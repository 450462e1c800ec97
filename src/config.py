"""
Application Configuration Module.

Manages application settings and environment variables using Pydantic for validation.
Provides centralized configuration management with type safety and validation.

Features:
- Environment variable loading and validation
- Secure credential management
- Filter and trigger selection by name
- Path normalization for data directories
"""

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import os
from logger import LogManager


class Settings(BaseSettings):
    """
    Application configuration settings with validation.

    Attributes:
        app_name (str): Name of the application
        dev (bool): Debug mode flag
        log_dir (str): Directory for log files
        log_level (int): Logging level (default: info)
        github_token (SecretStr): GitHub API authentication token
        github_base_url (Optional[str]): GitHub Enterprise API URL
        data_dir (str): Directory holding the reviewer, team and repository stores
        bot_identifier (str): Signature token embedded in balancer comments
        ownership_file_name (str): Name of the per-directory ownership file
        reconcile_period_hours (int): Hours between repository reconciliations
        run_interval_seconds (int): Seconds between balancing cycles, 0 runs once
        filter_names (str): Comma-separated filter names, empty disables filtering.
            Parameterized filters take `target_ref:<branch>` or `title_keyword:<word>`
        trigger_names (str): Comma-separated reviewer trigger names
    """

    # Application settings
    app_name: str = Field(default="CRBalancer", description="Application name")
    dev: bool = Field(default=False, description="Debug mode")
    log_dir: str = Field(default="logs", description="Logging directory")
    log_level: int = Field(default=20, description="Logging level, default info")

    # GitHub configuration
    github_token: SecretStr = Field(..., description="GitHub token")
    github_base_url: Optional[str] = Field(
        default=None, description="GitHub Enterprise API base URL"
    )

    # Storage configuration
    data_dir: str = Field(default="data", description="Store data directory")

    # Balancer configuration
    bot_identifier: str = Field(
        default="b03f5f7f11d50a3a", description="Balancer comment signature"
    )
    ownership_file_name: str = Field(
        default="owners.txt", description="Ownership declaration file name"
    )
    reconcile_period_hours: int = Field(
        default=24, description="Hours between repository reconciliations"
    )
    run_interval_seconds: int = Field(
        default=0, description="Seconds between balancing cycles, 0 runs once"
    )
    filter_names: str = Field(
        default="wip,main_branch_only,draft",
        description="Comma-separated pull request filters, e.g. wip,draft,target_ref:release",
    )
    trigger_names: str = Field(
        default="log", description="Comma-separated reviewer triggers"
    )

    @property
    def filters(self) -> List[str]:
        """
        Get filter names from configuration.

        An empty value yields an empty list, which disables filtering.

        Returns:
            List[str]: List of filter names
        """
        return [name.strip() for name in self.filter_names.split(",") if name.strip()]

    @property
    def triggers(self) -> List[str]:
        """
        Get reviewer trigger names from configuration.

        Returns:
            List[str]: List of trigger names
        """
        return [name.strip() for name in self.trigger_names.split(",") if name.strip()]

    @field_validator("data_dir")
    def ensure_absolute_path(cls, v: str) -> str:
        """
        Ensure data directory path is absolute.

        Converts relative paths to absolute paths based on current working directory.

        Args:
            v (str): Directory path to validate

        Returns:
            str: Absolute path to data directory
        """
        if not os.path.isabs(v):
            return os.path.abspath(v)
        return v

    # Configure env file loading
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )


# Create global settings instance
settings = Settings()

# Initialize logging configuration
logger = LogManager(
    app_name=settings.app_name.lower(),
    log_dir=settings.log_dir,
    development=settings.dev,
    level=settings.log_level,
).logger
