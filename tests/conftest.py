"""Pytest configuration and shared fixtures for ftp-deploy tests."""

import os

import pytest
from pathlib import Path
from typing import Generator
from dataclasses import dataclass


# Test constants
TEST_FTP_HOST = "127.0.0.1"
TEST_FTP_PORT = 2121
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"

# 2020-01-01 00:00:00 UTC, well before any remote upload time
OLD_TIMESTAMP = 1577836800


@dataclass
class MockFTPConfig:
    """Configuration for mock FTP server in tests."""
    host: str = TEST_FTP_HOST
    port: int = TEST_FTP_PORT
    username: str = TEST_FTP_USER
    password: str = TEST_FTP_PASS


@pytest.fixture
def ftp_config() -> MockFTPConfig:
    """Provide mock FTP configuration for tests."""
    return MockFTPConfig()


@pytest.fixture
def temp_settings_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Provide a temporary settings file path for testing."""
    settings_file = tmp_path / "settings.json"
    yield settings_file
    # Cleanup handled by tmp_path fixture


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """
    Create a small web project to deploy.

    site/
        index.html
        web.config
        bin/App.dll
        bin/App.pdb
        css/site.css
        obj/Debug/App.dll
        .git/HEAD
        Controllers/HomeController.cs
        App.csproj
        logs/today.log
    """
    root = tmp_path / "site"
    files = {
        "index.html": "<html>home</html>",
        "web.config": "<configuration />",
        "bin/App.dll": "MZ" + "\x00" * 64,
        "bin/App.pdb": "pdb",
        "css/site.css": "body { margin: 0; }",
        "obj/Debug/App.dll": "MZ",
        ".git/HEAD": "ref: refs/heads/main",
        "Controllers/HomeController.cs": "class HomeController {}",
        "App.csproj": "<Project />",
        "logs/today.log": "log line",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        os.utime(path, (OLD_TIMESTAMP, OLD_TIMESTAMP))
    return root


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """Create a single file to upload."""
    path = tmp_path / "page.html"
    path.write_text("<p>line one</p>\n<p>line two</p>\n")
    return path
