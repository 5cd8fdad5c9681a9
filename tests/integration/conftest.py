"""Pytest configuration and fixtures for integration tests.

Loads .env from the project root and skips the whole directory when
GEMINI_API_KEY is not configured. These tests call the real Gemini API.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from fridgepal.utils.config import Config


def pytest_configure(config):
    """Load .env before collection so skips see the key."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)


@pytest.fixture(scope="session", autouse=True)
def check_api_key():
    """Skip integration tests when GEMINI_API_KEY is missing."""
    if not os.getenv("GEMINI_API_KEY"):
        pytest.skip("Integration tests skipped. Set GEMINI_API_KEY in your environment or .env file.")


@pytest.fixture
def live_config():
    """Config for live calls; a short backoff keeps rate-limited runs bearable."""
    config = Config()
    config.RETRY_BASE_DELAY = float(os.getenv("INTEGRATION_RETRY_BASE_DELAY", "2"))
    return config
