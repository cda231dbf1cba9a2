"""
Configuration management for the Gemini LINE bot.

Loads environment variables from .env file and provides typed access to configuration.
Built once at startup and passed explicitly to the components that need it.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv

from inference import GeminiModelBackend, ModelBackend, StubModelBackend
from inference.gemini import DEFAULT_BASE_URL as GEMINI_DEFAULT_BASE_URL
from inference.gemini import DEFAULT_MODEL as GEMINI_DEFAULT_MODEL
from transport.line.sender import (
    DEFAULT_API_BASE_URL,
    DEFAULT_DATA_API_BASE_URL,
    LineMessagingClient,
)

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

logger = logging.getLogger(__name__)

LLMBackendType = Literal["gemini", "stub"]


class ConfigurationError(Exception):
    """Required configuration is missing or invalid."""
    pass


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"Expected a number, got {value!r}")


@dataclass(frozen=True)
class Config:
    """Configuration for the bot, read-only after startup."""

    # LINE channel
    channel_secret: str
    channel_access_token: str
    line_api_base_url: str
    line_data_api_base_url: str

    # Gemini
    gemini_api_key: str
    gemini_model: str
    gemini_vision_model: str
    gemini_base_url: str
    gemini_timeout_s: Optional[float]

    # Service
    llm_backend: LLMBackendType
    port: int
    environment: str
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """
        Load configuration from environment variables.

        The three credentials keep the names used by the LINE/Gemini console
        setup guides: GOOGLE_GEMINI_API_KEY, ChannelSecret, ChannelAccessToken.
        """
        try:
            port = int(os.getenv("PORT") or "5000")
        except ValueError:
            raise ConfigurationError(f"PORT must be an integer, got {os.getenv('PORT')!r}")

        gemini_model = os.getenv("GEMINI_MODEL", GEMINI_DEFAULT_MODEL)

        return cls(
            channel_secret=os.getenv("ChannelSecret", ""),
            channel_access_token=os.getenv("ChannelAccessToken", ""),
            line_api_base_url=os.getenv("LINE_API_BASE_URL", DEFAULT_API_BASE_URL),
            line_data_api_base_url=os.getenv("LINE_DATA_API_BASE_URL", DEFAULT_DATA_API_BASE_URL),
            gemini_api_key=os.getenv("GOOGLE_GEMINI_API_KEY", ""),
            gemini_model=gemini_model,
            gemini_vision_model=os.getenv("GEMINI_VISION_MODEL", gemini_model),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", GEMINI_DEFAULT_BASE_URL),
            gemini_timeout_s=_optional_float(os.getenv("GEMINI_TIMEOUT_S")),
            llm_backend=os.getenv("LLM_BACKEND", "gemini"),  # type: ignore
            port=port,
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """
        Validate that required configuration is set.

        Raises:
            ConfigurationError: listing every missing variable
        """
        required = {
            "ChannelSecret": self.channel_secret,
            "ChannelAccessToken": self.channel_access_token,
        }
        if self.llm_backend == "gemini":
            required["GOOGLE_GEMINI_API_KEY"] = self.gemini_api_key
        elif self.llm_backend != "stub":
            raise ConfigurationError(f"Unknown LLM_BACKEND: {self.llm_backend}")

        missing = [key for key, value in required.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

    def create_llm_backend(self) -> ModelBackend:
        """Create LLM backend instance based on configuration."""
        if self.llm_backend == "stub":
            logger.warning("LLM_BACKEND=stub, replies are not generated by Gemini")
            return StubModelBackend()

        return GeminiModelBackend(
            api_key=self.gemini_api_key,
            model_name=self.gemini_model,
            vision_model_name=self.gemini_vision_model,
            base_url=self.gemini_base_url,
            timeout_s=self.gemini_timeout_s,
        )

    def create_messaging_client(self) -> LineMessagingClient:
        """Create the LINE reply/content client."""
        return LineMessagingClient(
            access_token=self.channel_access_token,
            api_base_url=self.line_api_base_url,
            data_api_base_url=self.line_data_api_base_url,
        )
