"""Process-level configuration for the upload service."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

CONNECTION_STRING_KEY = "AzureWebJobsStorage"
DEFAULT_CONTAINER = "upload"
DEFAULT_LOCAL_SETTINGS = "local.settings.json"


@dataclass(frozen=True)
class Settings:
    """Immutable settings resolved once at startup and injected into the app."""

    connection_string: Optional[str]
    container_name: str = DEFAULT_CONTAINER
    key_prefix: str = ""
    local_settings_path: str = DEFAULT_LOCAL_SETTINGS
    log_dir: str = "storage"
    log_level: str = "INFO"


def read_local_settings(path: str) -> Optional[str]:
    """
    Return the storage connection string from a Functions-style
    local.settings.json ({"Values": {"AzureWebJobsStorage": ...}}).
    Missing file or key yields None.
    """
    settings_path = Path(path)
    if not settings_path.exists():
        return None
    with settings_path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    return (data.get("Values") or {}).get(CONNECTION_STRING_KEY) or None


def load_settings() -> Settings:
    """Load settings from the environment (after .env) with local file fallback."""
    load_dotenv()

    local_settings_path = os.getenv("LOCAL_SETTINGS_PATH", DEFAULT_LOCAL_SETTINGS)
    connection_string = os.getenv(CONNECTION_STRING_KEY) or read_local_settings(local_settings_path)

    return Settings(
        connection_string=connection_string,
        container_name=os.getenv("UPLOAD_CONTAINER", DEFAULT_CONTAINER),
        key_prefix=os.getenv("UPLOAD_KEY_PREFIX", "").strip("/"),
        local_settings_path=local_settings_path,
        log_dir=os.getenv("LOG_DIR", "storage"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
