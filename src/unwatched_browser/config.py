"""Configuration persistence: load and save user preferences."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from unwatched_browser.models import (
    CONFIG_APP_NAME,
    DEFAULT_API_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_SORT_KEY,
    DEFAULT_VIDEO_HOST,
    MAX_AUTO_REFRESH_MINUTES,
    MAX_REQUEST_TIMEOUT_SECONDS,
    SORT_ASCENDING,
    SORT_DIRECTIONS,
    SORT_KEYS,
    UserConfig,
)
from unwatched_browser.parsing import normalize_base_url
from unwatched_browser.themes import DEFAULT_THEME_NAME, THEME_NAMES

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# _dict_to_config() returns a valid UserConfig for any JSON object:
#
#   api_base_url             http(s) URL, trailing slash stripped
#   default_sort_key         in SORT_KEYS
#   default_sort_direction   in SORT_DIRECTIONS
#   request_timeout_seconds  1 ≤ x ≤ MAX_REQUEST_TIMEOUT_SECONDS
#   auto_refresh_minutes     0 ≤ x ≤ MAX_AUTO_REFRESH_MINUTES
#   theme_name               in THEME_NAMES
#
CONFIG_FILENAME = "config.json"


def get_config_dir() -> Path:
    return Path(user_config_dir(CONFIG_APP_NAME))


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/unwatched-browser/config.json
    - macOS: ~/Library/Application Support/unwatched-browser/config.json
    - Windows: %APPDATA%/unwatched-browser/config.json
    """
    return get_config_dir() / CONFIG_FILENAME


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    """Serialize UserConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "api_base_url": config.api_base_url,
        "server_key": config.server_key,
        "video_host": config.video_host,
        "default_sort_key": config.default_sort_key,
        "default_sort_direction": config.default_sort_direction,
        "request_timeout_seconds": config.request_timeout_seconds,
        "auto_refresh_minutes": config.auto_refresh_minutes,
        "theme_name": config.theme_name,
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    # bool is an int subclass; never accept it for numeric fields
    if isinstance(value, bool) and expected_type is not bool:
        return default
    if not isinstance(value, expected_type):
        return default
    return value


def _clamp_int(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _parse_choice(data: dict[str, Any], key: str, default: str, choices: tuple | list) -> str:
    value = _safe_get(data, key, default, str)
    if value not in choices:
        logger.warning("Config %s=%r is not one of %s, using %r", key, value, choices, default)
        return default
    return value


def _parse_base_url(data: dict[str, Any]) -> str:
    raw = _safe_get(data, "api_base_url", DEFAULT_API_BASE_URL, str)
    try:
        return normalize_base_url(raw)
    except ValueError as e:
        logger.warning("Config api_base_url ignored: %s", e)
        return DEFAULT_API_BASE_URL


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Deserialize a dictionary to UserConfig with type validation."""
    if not isinstance(data, dict):
        raise TypeError(f"config root must be an object, got {type(data).__name__}")
    return UserConfig(
        api_base_url=_parse_base_url(data),
        server_key=_safe_get(data, "server_key", "", str),
        video_host=_safe_get(data, "video_host", DEFAULT_VIDEO_HOST, str).strip()
        or DEFAULT_VIDEO_HOST,
        default_sort_key=_parse_choice(data, "default_sort_key", DEFAULT_SORT_KEY, SORT_KEYS),
        default_sort_direction=_parse_choice(
            data, "default_sort_direction", SORT_ASCENDING, SORT_DIRECTIONS
        ),
        request_timeout_seconds=_clamp_int(
            _safe_get(data, "request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS, int),
            1,
            MAX_REQUEST_TIMEOUT_SECONDS,
        ),
        auto_refresh_minutes=_clamp_int(
            _safe_get(data, "auto_refresh_minutes", 0, int), 0, MAX_AUTO_REFRESH_MINUTES
        ),
        theme_name=_parse_choice(data, "theme_name", DEFAULT_THEME_NAME, THEME_NAMES),
        version=_safe_get(data, "version", 1, int),
    )


def load_config() -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted.
    Logs specific errors to help diagnose config issues.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        return _dict_to_config(data)
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
    except (KeyError, TypeError) as e:
        logger.warning("Config file has invalid structure, using defaults: %s", e)
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
    return UserConfig(config_defaulted=True)


def save_config(config: UserConfig) -> bool:
    """Save configuration to disk atomically.

    Writes to a temp file in the same directory, then ``os.replace()``.
    Returns True on success, False on failure.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        json_str = json.dumps(_config_to_dict(config), indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


__all__ = [
    "CONFIG_FILENAME",
    "get_config_dir",
    "get_config_path",
    "load_config",
    "save_config",
]
