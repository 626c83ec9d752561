"""
config.py — Environment configuration for the API.

Settings come from environment variables, with a ``.env`` file at the
project root filling in anything not already set.
"""

import os
from functools import lru_cache
from pathlib import Path

from whiteboard.engine.units import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH


# Load .env file if it exists
def _load_dotenv():
    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()
                    if key and value and key not in os.environ:
                        os.environ[key] = value

_load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.app_name: str = os.environ.get("WHITEBOARD_APP_NAME", "Semantic Whiteboard")
        self.app_version: str = "0.1.0"
        self.debug: bool = os.environ.get("WHITEBOARD_DEBUG", "false").lower() == "true"
        self.log_level: str = os.environ.get("WHITEBOARD_LOG_LEVEL", "INFO").upper()
        self.api_prefix: str = os.environ.get("WHITEBOARD_API_PREFIX", "/api/v1")

        # Board defaults
        self.canvas_width: int = int(os.environ.get("WHITEBOARD_CANVAS_WIDTH", str(DEFAULT_CANVAS_WIDTH)))
        self.canvas_height: int = int(os.environ.get("WHITEBOARD_CANVAS_HEIGHT", str(DEFAULT_CANVAS_HEIGHT)))
        self.default_subject: str = os.environ.get("WHITEBOARD_DEFAULT_SUBJECT", "general")
        self.max_boards: int = int(os.environ.get("WHITEBOARD_MAX_BOARDS", "100"))

        # CORS settings
        self.cors_origins: list = os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
        ).split(",")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
