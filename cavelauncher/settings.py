"""
Launcher settings stored as JSON next to the caves registry.

Missing or unreadable settings fall back to defaults, the same way the
download settings do.
"""
import os
import json
import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional

from .utils.paths import SETTINGS_PATH

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "api_base_url": "https://api.example.com",
    "api_key": None,
}


@dataclass
class Credentials:
    """Session credentials handed to the API client"""
    key: str
    user_id: Optional[int] = None


def load_settings(path: str = SETTINGS_PATH) -> Dict[str, Any]:
    """Load settings, merged over the defaults"""
    settings = dict(DEFAULT_SETTINGS)
    try:
        if os.path.exists(path):
            with open(path, 'r') as f:
                data = json.load(f)
            if isinstance(data, dict):
                settings.update(data)
            else:
                logger.warning(f"[Settings] Ignoring {path}: expected an object, got {type(data).__name__}")
    except Exception as e:
        logger.error(f"[Settings] Error loading settings: {e}")
    return settings


def save_setting(key: str, value: Any, path: str = SETTINGS_PATH) -> bool:
    """Set a single setting and persist the file"""
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        settings = {}
        if os.path.exists(path):
            with open(path, 'r') as f:
                settings = json.load(f)
        settings[key] = value
        with open(path, 'w') as f:
            json.dump(settings, f, indent=2)
        logger.info(f"[Settings] Set {key}")
        return True
    except Exception as e:
        logger.error(f"[Settings] Error saving setting {key}: {e}")
        return False


def get_credentials(settings: Optional[Dict[str, Any]] = None) -> Optional[Credentials]:
    """Build credentials from the environment or the settings file.

    CAVELAUNCHER_API_KEY wins over the stored key.

    Returns:
        Credentials, or None when no API key is configured
    """
    settings = settings if settings is not None else load_settings()
    key = os.environ.get("CAVELAUNCHER_API_KEY") or settings.get("api_key")
    if not key:
        return None
    return Credentials(key=key, user_id=settings.get("user_id"))
