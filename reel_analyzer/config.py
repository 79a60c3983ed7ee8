"""
Configuration management for the reel analyzer.

Centralizes all configuration loading from environment variables
and provides type-safe access to configuration values.
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, Any, List
from dataclasses import dataclass, field

from .errors import ConfigurationError


DEFAULT_TAXONOMY_PATH = str(Path(__file__).parent / "data" / "activities.json")

KNOWN_PROVIDERS = ("instagram_stable", "instagram_api2", "ytdlp")


@dataclass
class AnalyzerConfig:
    """Configuration for the reel analyzer"""

    # Frame sampling
    FRAME_COUNT: int = 3
    FRAME_MAX_WIDTH: int = 1280
    SCRATCH_DIR: str = field(default_factory=tempfile.gettempdir)

    # Classification
    VISION_MAX_CONCURRENT: int = 10
    VISION_MODEL: str = "gpt-4o"
    TEXT_MODEL: str = "gpt-4o-mini"

    # Timeouts
    PIPELINE_TIMEOUT_SEC: float = 60.0
    PROVIDER_TIMEOUT_SEC: float = 15.0
    DOWNLOAD_TIMEOUT_SEC: float = 30.0
    MAX_VIDEO_BYTES: int = 100 * 1024 * 1024

    # Video providers
    RAPIDAPI_KEY: str = ""
    VIDEO_PROVIDERS: List[str] = field(default_factory=lambda: ["instagram_stable", "instagram_api2"])
    ENABLE_YTDLP_FALLBACK: bool = False

    # Admission
    ACTIVITY_TAXONOMY_PATH: str = DEFAULT_TAXONOMY_PATH

    # Frame store settings
    FRAME_STORE_TYPE: str = "inline"  # inline, s3
    FRAME_STORE_CONFIG: Dict[str, Any] = field(default_factory=dict)

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "./data/logs"

    # HTTP server
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8000

    @classmethod
    def from_env(cls) -> 'AnalyzerConfig':
        """Load configuration from environment variables"""
        config = cls()

        # Frame sampling
        config.FRAME_COUNT = int(os.getenv("FRAME_COUNT", "3"))
        config.FRAME_MAX_WIDTH = int(os.getenv("FRAME_MAX_WIDTH", "1280"))
        config.SCRATCH_DIR = os.getenv("SCRATCH_DIR", tempfile.gettempdir())

        # Classification
        config.VISION_MAX_CONCURRENT = int(os.getenv("VISION_MAX_CONCURRENT", "10"))
        config.VISION_MODEL = os.getenv("VISION_MODEL", "gpt-4o")
        config.TEXT_MODEL = os.getenv("TEXT_MODEL", "gpt-4o-mini")

        # Timeouts
        config.PIPELINE_TIMEOUT_SEC = float(os.getenv("PIPELINE_TIMEOUT_SEC", "60"))
        config.PROVIDER_TIMEOUT_SEC = float(os.getenv("PROVIDER_TIMEOUT_SEC", "15"))
        config.DOWNLOAD_TIMEOUT_SEC = float(os.getenv("DOWNLOAD_TIMEOUT_SEC", "30"))
        config.MAX_VIDEO_BYTES = int(os.getenv("MAX_VIDEO_BYTES", str(100 * 1024 * 1024)))

        # Video providers
        config.RAPIDAPI_KEY = os.getenv("RAPIDAPI_KEY", "")
        config.VIDEO_PROVIDERS = cls._parse_provider_list(
            os.getenv("VIDEO_PROVIDERS", "instagram_stable,instagram_api2")
        )
        config.ENABLE_YTDLP_FALLBACK = os.getenv("ENABLE_YTDLP_FALLBACK", "false").lower() == "true"

        # Admission
        config.ACTIVITY_TAXONOMY_PATH = os.getenv("ACTIVITY_TAXONOMY_PATH", DEFAULT_TAXONOMY_PATH)

        # Frame store
        config.FRAME_STORE_TYPE = os.getenv("FRAME_STORE_TYPE", "inline")
        config.FRAME_STORE_CONFIG = cls._parse_frame_store_config()

        # Logging
        config.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        config.LOG_DIR = os.getenv("LOG_DIR", "./data/logs")

        # HTTP server
        config.HTTP_HOST = os.getenv("HTTP_HOST", "0.0.0.0")
        config.HTTP_PORT = int(os.getenv("HTTP_PORT", "8000"))

        return config

    @staticmethod
    def _parse_provider_list(raw: str) -> List[str]:
        return [name.strip().lower() for name in raw.split(",") if name.strip()]

    @classmethod
    def _parse_frame_store_config(cls) -> Dict[str, Any]:
        """Parse frame store specific configuration"""
        store_type = os.getenv("FRAME_STORE_TYPE", "inline")

        if store_type == "s3":
            return {
                "bucket": os.getenv("AWS_S3_BUCKET"),
                "region": os.getenv("AWS_REGION", "us-east-1"),
                "prefix": os.getenv("S3_PREFIX", "reel-thumbnails/"),
                "public_base_url": os.getenv("S3_PUBLIC_BASE_URL")
            }
        else:
            return {}

    def provider_order(self) -> List[str]:
        """Providers in the order they are tried, yt-dlp last when enabled"""
        order = [name for name in self.VIDEO_PROVIDERS if name != "ytdlp"]
        if self.ENABLE_YTDLP_FALLBACK or "ytdlp" in self.VIDEO_PROVIDERS:
            order.append("ytdlp")
        return order

    def validate(self) -> None:
        """Validate configuration and raise errors for missing or invalid values"""
        required_vars = []
        problems = []

        if not os.getenv("OPENAI_API_KEY"):
            required_vars.append("OPENAI_API_KEY")

        uses_rapidapi = any(name.startswith("instagram_") for name in self.provider_order())
        if uses_rapidapi and not self.RAPIDAPI_KEY:
            required_vars.append("RAPIDAPI_KEY")

        if self.FRAME_STORE_TYPE == "s3" and not self.FRAME_STORE_CONFIG.get("bucket"):
            required_vars.append("AWS_S3_BUCKET")

        unknown = [name for name in self.VIDEO_PROVIDERS if name not in KNOWN_PROVIDERS]
        if unknown:
            problems.append(f"unknown video providers: {', '.join(unknown)}")

        if not self.provider_order():
            problems.append("no video providers configured")

        if self.FRAME_STORE_TYPE not in ("inline", "s3"):
            problems.append(f"unsupported frame store type: {self.FRAME_STORE_TYPE}")

        if self.FRAME_COUNT < 1:
            problems.append("FRAME_COUNT must be at least 1")

        if self.VISION_MAX_CONCURRENT < 1:
            problems.append("VISION_MAX_CONCURRENT must be at least 1")

        if self.PIPELINE_TIMEOUT_SEC <= 0:
            problems.append("PIPELINE_TIMEOUT_SEC must be positive")

        if required_vars:
            problems.insert(0, f"Missing required environment variables: {', '.join(required_vars)}")

        if problems:
            raise ConfigurationError("; ".join(problems))
