"""Tests for settings loading."""

import pytest

from settings.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep a developer's MCP_CE_* variables and .env file out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "BASE_DIRECTORY", "IGNORE_FILE_NAME", "DEFAULT_IGNORE_PATTERNS",
        "GLOBAL_FILTER", "DOTNET_PATH", "LOG_DIRECTORY", "LOG_LEVEL",
    ):
        monkeypatch.delenv(f"MCP_CE_{name}", raising=False)


def test_defaults(tmp_path):
    settings = get_settings()

    assert settings.base_directory == "."
    assert settings.base_path == tmp_path.resolve()
    assert settings.ignore_file_name == ".gitignore"
    assert settings.default_ignore_patterns == [".git/", ".mcp-logs/"]
    assert settings.global_filter is None
    assert settings.dotnet_path == "dotnet"
    assert settings.log_path == tmp_path.resolve() / ".mcp-logs"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("MCP_CE_BASE_DIRECTORY", str(tmp_path / "repo"))
    monkeypatch.setenv("MCP_CE_DOTNET_PATH", "/usr/share/dotnet/dotnet")
    monkeypatch.setenv("MCP_CE_DEFAULT_IGNORE_PATTERNS", '[".git/", "node_modules/"]')

    settings = Settings()

    assert settings.base_path == (tmp_path / "repo").resolve()
    assert settings.dotnet_path == "/usr/share/dotnet/dotnet"
    assert settings.default_ignore_patterns == [".git/", "node_modules/"]


def test_env_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("MCP_CE_GLOBAL_FILTER=*.cs,*.json\n", encoding="utf-8")

    assert get_settings().global_filter == "*.cs,*.json"


def test_command_line_arguments(tmp_path):
    settings = get_settings(cli_args=["--base_directory", str(tmp_path / "cli"), "--log_level", "DEBUG"])

    assert settings.base_path == (tmp_path / "cli").resolve()
    assert settings.log_level == "DEBUG"
