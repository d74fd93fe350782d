"""Configuration settings using Pydantic."""
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or the command line."""

    model_config = SettingsConfigDict(
        env_prefix="MCP_CE_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Paths
    base_directory: str = Field(default=".", description="Base directory for file operations")
    ignore_file_name: str = Field(default=".gitignore", description="Per-directory ignore file name")
    default_ignore_patterns: list[str] = Field(
        default=[".git/", ".mcp-logs/"],
        description="Ignore rules applied before any ignore file on disk",
    )
    global_filter: str | None = Field(
        default=None,
        description="Comma-separated glob filter applied to every listing (e.g. '*.cs,*.json')",
    )

    # Build tooling
    dotnet_path: str = Field(default="dotnet", description="dotnet executable")

    # Logging
    log_directory: str = Field(
        default=".mcp-logs",
        description="Failed tool call logs, relative to the base directory",
    )
    log_level: str = Field(default="INFO")

    @property
    def base_path(self) -> Path:
        return Path(self.base_directory).expanduser().resolve()

    @property
    def log_path(self) -> Path:
        return self.base_path / self.log_directory


def get_settings(cli_args: list[str] | None = None) -> Settings:
    """Factory function to get settings instance.

    Args:
        cli_args: Command line arguments to parse on top of the environment
    """
    if cli_args is None:
        return Settings()
    return Settings(_cli_parse_args=cli_args)
