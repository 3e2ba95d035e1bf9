"""
Global test configuration for the response extraction tests.
"""

import logging
import os

import pytest

from target_response import ResponseExtractor
from tests.fixtures.responses import full_response


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_target_response_env(request, monkeypatch):
    """Ensure a clean TARGET_RESPONSE_* environment for each test.

    Escape hatch: mark a test with @pytest.mark.allow_env_pollution to keep
    the current environment unchanged.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("TARGET_RESPONSE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def debug_logging(caplog):
    """Capture the library's debug diagnostics."""
    caplog.set_level(logging.DEBUG, logger="target_response")


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Whole-document extraction tests",
        "allow_env_pollution: Keep TARGET_RESPONSE_* environment variables",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Core Fixtures ---


@pytest.fixture
def extractor():
    """Extractor with default settings."""
    return ResponseExtractor()


@pytest.fixture
def response():
    """A fresh, fully populated delivery response document."""
    return full_response()
