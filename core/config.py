"""Configuration models and loading."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

CONFIG_DIR = Path.home() / ".config" / "aps-relay"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_ALLOWED_HOST_SUFFIXES = [
    "developer.api.autodesk.com",
    "autodesk.com",
    "amazonaws.com",
    "cloudfront.net",
    "s3.amazonaws.com",
]
DEFAULT_FORWARDED_HEADERS = ["authorization", "x-ads-region", "accept", "content-type"]


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8787
    keep_alive_timeout: int = 5


class RelaySettings(BaseModel):
    allowed_host_suffixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_HOST_SUFFIXES)
    )
    forwarded_headers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FORWARDED_HEADERS)
    )
    extra_headers_header: str = "X-Extra-Headers"
    timeout_seconds: float = Field(default=120.0, gt=0)
    max_echo_bytes: int = Field(default=2000, ge=0)

    @field_validator("allowed_host_suffixes", "forwarded_headers")
    @classmethod
    def _lowercase(cls, values: list[str]) -> list[str]:
        return [v.strip().lower() for v in values if v.strip()]


class Config(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    relay: RelaySettings = Field(default_factory=RelaySettings)


def load_config(path: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed.

    ``PORT`` in the environment overrides the configured port.
    """
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        config = Config()
        path.write_text(config.model_dump_json(indent=2))
    else:
        try:
            data = json.loads(path.read_text())
            config = Config.model_validate(data)
        except (json.JSONDecodeError, ValidationError):
            # Backup corrupted config and recreate default
            backup = path.with_suffix(".json.bak")
            path.rename(backup)
            config = Config()
            path.write_text(config.model_dump_json(indent=2))

    return _apply_env(config)


def _apply_env(config: Config) -> Config:
    port = os.environ.get("PORT", "").strip()
    if port.isdigit():
        config.server.port = int(port)
    return config
