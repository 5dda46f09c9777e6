"""Pytest configuration and shared fixtures for termtab tests."""

import sys
from unittest.mock import patch

import pytest

from termtab.services.config_service import reset_config_service
from termtab.services.registry import reset_driver_registry
from termtab.services.session_store import reset_session_store


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset every service singleton between tests."""
    reset_config_service()
    reset_driver_registry()
    reset_session_store()
    yield
    reset_config_service()
    reset_driver_registry()
    reset_session_store()


@pytest.fixture
def macos():
    """Pretend to run on macOS."""
    with patch.object(sys, "platform", "darwin"):
        yield


@pytest.fixture
def linux():
    """Pretend to run on Linux."""
    with patch.object(sys, "platform", "linux"):
        yield


@pytest.fixture
def windows():
    """Pretend to run on Windows."""
    with patch.object(sys, "platform", "win32"):
        yield


@pytest.fixture
def worktree(tmp_path):
    """A worktree directory to open tabs in."""
    path = tmp_path / "feature-login"
    path.mkdir()
    return path
