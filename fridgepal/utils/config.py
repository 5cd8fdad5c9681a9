"""Configuration management for the FridgePal recipe pipeline.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults

There is no module-level validated instance: a Config is built by the caller
and passed explicitly to GenerativeRecipeClient, which checks the credential
at construction time.
"""

import os

from dotenv import load_dotenv

from fridgepal.services.errors import ConfigurationError


# Load .env file (if exists, silently continues if missing)
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Default: gemini-2.5-flash (stable, broadly available)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

        # LLM Model Parameters
        # Temperature: 0.6 leaves room for varied recipes while keeping JSON well-formed
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.6"))
        self.TOP_K: int = int(os.getenv("TOP_K", "40"))
        self.TOP_P: float = float(os.getenv("TOP_P", "0.95"))
        # Max Output Tokens: two short recipes fit comfortably in 1024
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "1024"))
        # Thinking Budget: 2.5 models think by default and thinking tokens count against
        # MAX_OUTPUT_TOKENS. 0 disables thinking, -1 lets the model decide (dynamic)
        self.THINKING_BUDGET: int = int(os.getenv("THINKING_BUDGET", "0"))

        # Retry Configuration - rate limits and empty responses only
        # MAX_RETRIES: total attempts per generation request
        self.MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "5"))
        # RETRY_BASE_DELAY: seconds; wait before attempt n+1 is 2**n * RETRY_BASE_DELAY
        self.RETRY_BASE_DELAY: float = float(os.getenv("RETRY_BASE_DELAY", "5"))
        # REQUEST_TIMEOUT_SECONDS: per-attempt transport timeout
        self.REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))

        # Prompt limits - bound response size, latency and token cost
        self.MAX_RECIPES_PER_REQUEST: int = int(os.getenv("MAX_RECIPES_PER_REQUEST", "2"))
        self.MAX_INSTRUCTION_STEPS: int = int(os.getenv("MAX_INSTRUCTION_STEPS", "5"))

        # Placeholder image used when a generated recipe has none; {query} is the url-encoded name
        self.IMAGE_PLACEHOLDER_URL: str = os.getenv(
            "IMAGE_PLACEHOLDER_URL", "https://source.unsplash.com/400x300/?food,{query}"
        )

    def validate(self) -> None:
        """Validate configuration values.

        The API key is not checked here; GenerativeRecipeClient rejects a
        missing key when it is constructed.

        Raises:
            ConfigurationError: If a value is out of range. ConfigurationError
                is a ValueError, so callers may catch either.
        """
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ConfigurationError(
                f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}"
            )
        if not (0.0 < self.TOP_P <= 1.0):
            raise ConfigurationError(f"TOP_P must be in (0.0, 1.0], got: {self.TOP_P}")
        if self.TOP_K < 1:
            raise ConfigurationError(f"TOP_K must be at least 1, got: {self.TOP_K}")
        if self.MAX_OUTPUT_TOKENS < 256:
            raise ConfigurationError(
                f"MAX_OUTPUT_TOKENS must be at least 256, got: {self.MAX_OUTPUT_TOKENS}"
            )
        if self.THINKING_BUDGET < -1:
            raise ConfigurationError(
                f"THINKING_BUDGET must be -1 (dynamic), 0 (off) or positive, got: {self.THINKING_BUDGET}"
            )
        if self.MAX_RETRIES < 1:
            raise ConfigurationError(f"MAX_RETRIES must be at least 1, got: {self.MAX_RETRIES}")
        if self.RETRY_BASE_DELAY < 0:
            raise ConfigurationError(
                f"RETRY_BASE_DELAY must not be negative, got: {self.RETRY_BASE_DELAY}"
            )
        if self.REQUEST_TIMEOUT_SECONDS <= 0:
            raise ConfigurationError(
                f"REQUEST_TIMEOUT_SECONDS must be positive, got: {self.REQUEST_TIMEOUT_SECONDS}"
            )
        if self.MAX_RECIPES_PER_REQUEST < 1:
            raise ConfigurationError(
                f"MAX_RECIPES_PER_REQUEST must be at least 1, got: {self.MAX_RECIPES_PER_REQUEST}"
            )
        if self.MAX_INSTRUCTION_STEPS < 1:
            raise ConfigurationError(
                f"MAX_INSTRUCTION_STEPS must be at least 1, got: {self.MAX_INSTRUCTION_STEPS}"
            )
        if "{query}" not in self.IMAGE_PLACEHOLDER_URL:
            raise ConfigurationError("IMAGE_PLACEHOLDER_URL must contain a {query} placeholder")
