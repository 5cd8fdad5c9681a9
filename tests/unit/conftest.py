"""Shared fixtures for unit tests."""

import pytest

from fridgepal.utils.config import Config

CONFIG_ENV_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "TEMPERATURE",
    "TOP_K",
    "TOP_P",
    "MAX_OUTPUT_TOKENS",
    "THINKING_BUDGET",
    "MAX_RETRIES",
    "RETRY_BASE_DELAY",
    "REQUEST_TIMEOUT_SECONDS",
    "MAX_RECIPES_PER_REQUEST",
    "MAX_INSTRUCTION_STEPS",
    "IMAGE_PLACEHOLDER_URL",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration variables picked up from the shell or .env."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def config(clean_env):
    """Default Config with a test API key."""
    clean_env.setenv("GEMINI_API_KEY", "test-key")
    return Config()
