"""
Configuration management for QRThis
"""

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import find_dotenv, load_dotenv

from qrthis import (
    DEFAULT_BACKGROUND,
    DEFAULT_FOREGROUND,
    DEFAULT_MARGIN,
    DEFAULT_WIDTH,
    MAX_CHARACTERS,
)


@dataclass
class GeneratorConfig:
    max_characters: int = MAX_CHARACTERS
    debounce_delay: float = 0.3
    optimization_delay: float = 2.0
    width: int = DEFAULT_WIDTH
    margin: int = DEFAULT_MARGIN
    foreground: str = DEFAULT_FOREGROUND
    background: str = DEFAULT_BACKGROUND


@dataclass
class ArtConfig:
    backend: str = "gateway"
    api_key: str = ""
    gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    model: str = "google/gemini-2.5-flash-image-preview"
    timeout: float = 120.0


@dataclass
class StorageConfig:
    data_dir: str = "~/.qrthis"
    store_file: str = "local_store.json"
    signups_db: str = "signups.db"

    @property
    def store_path(self) -> Path:
        return Path(self.data_dir).expanduser() / self.store_file

    @property
    def signups_path(self) -> Path:
        return Path(self.data_dir).expanduser() / self.signups_db


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 5
    console_output: bool = True


@dataclass
class SecurityConfig:
    qr_max_requests: int = 15
    qr_window: float = 60.0
    burst_max_requests: int = 5
    burst_window: float = 10.0
    min_interval: float = 1.0
    signup_max_requests: int = 3
    allowed_origins: list = field(default_factory=lambda: ["*"])


class Config:
    """All settings, from defaults, then a YAML file, then the environment."""

    def __init__(self, config_file: str = "qrthis.yaml"):
        self.config_file = config_file

        self.generator = GeneratorConfig()
        self.art = ArtConfig()
        self.storage = StorageConfig()
        self.logging = LoggingConfig()
        self.security = SecurityConfig()

    @classmethod
    def load(cls, config_file: str | None = None) -> "Config":
        config = cls(config_file or os.getenv("QRTHIS_CONFIG", "qrthis.yaml"))
        config.reload()
        return config

    def reload(self) -> None:
        """Load configuration from file and environment variables"""
        load_dotenv(find_dotenv(usecwd=True))

        config_path = Path(self.config_file)
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
            self._update_from_dict(config_data)

        self._load_from_env()

    def _update_from_dict(self, config_data: Dict[str, Any]):
        for section in ("generator", "art", "storage", "logging", "security"):
            if section in config_data:
                self._update_dataclass(getattr(self, section), config_data[section])

    def _update_dataclass(self, obj, data: Dict[str, Any]):
        for key, value in (data or {}).items():
            if hasattr(obj, key):
                setattr(obj, key, value)

    def _load_from_env(self):
        # Art service
        if os.getenv("LOVABLE_API_KEY"):
            self.art.api_key = os.getenv("LOVABLE_API_KEY")
        if os.getenv("QRTHIS_AI_GATEWAY_URL"):
            self.art.gateway_url = os.getenv("QRTHIS_AI_GATEWAY_URL")
        if os.getenv("QRTHIS_AI_MODEL"):
            self.art.model = os.getenv("QRTHIS_AI_MODEL")
        if os.getenv("QRTHIS_ART_BACKEND"):
            self.art.backend = os.getenv("QRTHIS_ART_BACKEND")

        # Storage
        if os.getenv("QRTHIS_DATA_DIR"):
            self.storage.data_dir = os.getenv("QRTHIS_DATA_DIR")

        # Logging
        if os.getenv("QRTHIS_LOG_LEVEL"):
            self.logging.level = os.getenv("QRTHIS_LOG_LEVEL").upper()
        if os.getenv("QRTHIS_LOG_FILE"):
            self.logging.file = os.getenv("QRTHIS_LOG_FILE")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator": asdict(self.generator),
            "art": {**asdict(self.art), "api_key": "***" if self.art.api_key else ""},
            "storage": asdict(self.storage),
            "logging": asdict(self.logging),
            "security": asdict(self.security),
        }

    def save(self, config_file: str | None = None):
        """Write the current settings as YAML. The API key is never written."""
        with open(config_file or self.config_file, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, indent=2)
