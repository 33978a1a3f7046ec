from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of crawler settings using JSON in the user data
directory. Missing or corrupt files fall back to defaults so a broken
settings file never blocks a crawl.
"""

import json
import logging
import os
from typing import Any, Dict

from pyqcrawler.domain.constants import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_BASE_PATH,
    DEFAULT_BASE_URL,
    DEFAULT_MAX_YEAR,
    DEFAULT_MIN_YEAR,
    DEFAULT_TEST_DIR,
)
from pyqcrawler.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")

DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_BACKOFF_FACTOR = 0.5


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.
    This dictionary drives the behavior of the crawl engine.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    base = os.getcwd()
    return {
        # Remote Source
        "base_url": DEFAULT_BASE_URL,
        "base_path": DEFAULT_BASE_PATH,
        "test_dir": DEFAULT_TEST_DIR,

        # Local Storage
        "data_dir": os.path.join(base, "data"),
        "output_dir": os.path.join(base, "output"),
        "log_dir": os.path.join(base, "logs"),

        # Extraction Policy
        "min_year": DEFAULT_MIN_YEAR,
        "max_year": DEFAULT_MAX_YEAR,

        # Network Policy
        "request_timeout": DEFAULT_REQUEST_TIMEOUT,
        "max_retries": DEFAULT_MAX_RETRIES,
        "backoff_factor": DEFAULT_BACKOFF_FACTOR,
        "workers": 1,

        # Run Modes
        "test_mode": False,
        "debug": False,
        "verbose": False,
        "interactive": False,
        "list_only": False,

        # Read-time URL Rewriting
        "legacy_base_url": "",
        "public_base_url": "",
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Load the persisted configuration merged over the defaults.

    Returns:
        Dict[str, Any]: The loaded configuration or defaults on failure.
    """
    config = get_default_config()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    settings = data.get("settings", {})
    if isinstance(settings, dict):
        config.update({k: v for k, v in settings.items() if k in config})
    return config


def save_config(config: Dict[str, Any]) -> None:
    """
    Persist the provided configuration to disk.

    Args:
        config: The configuration dictionary to save.
    """
    state = {"version": CURRENT_CONFIG_VERSION, "settings": config}
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {CONFIG_FILE}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
