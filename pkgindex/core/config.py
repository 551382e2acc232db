"""Configuration management for SourcePkg.

Handles loading and caching of the JSON configuration file with environment
variable support (SOURCEPKG_CONFIG_PATH) and section-specific defaults.

The configuration system provides:
- Centralized config loading with caching
- Index location (base URL of the Gitiles host)
- Network policy (timeout, SSL verification, retry budget, headers)
- Staging directory and external download/extract commands
- Search threshold and fuzziness
- Install defaults (destination root, tag)
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SOURCEPKG_CONFIG_PATH"

DEFAULT_BASE_URL = "https://android.googlesource.com"
DEFAULT_STAGING_DIR = "/tmp/android_sources_packages"
DEFAULT_DOWNLOAD_COMMAND = ["wget", "-c", "{url}", "-O", "{archive}"]
DEFAULT_EXTRACT_COMMAND = ["tar", "-xzf", "{archive}", "-C", "{dest}"]

_CONFIG_CACHE: Optional[Dict[str, Any]] = None


def get_config(force_reload: bool = False, path: Optional[str] = None) -> Dict[str, Any]:
    """Load project configuration JSON.

    Reads path when given; otherwise looks in the SOURCEPKG_CONFIG_PATH env
    var and falls back to 'config.json' in CWD. An explicit path always
    reloads. Caches the result unless force_reload is True.

    Returns:
        Configuration dictionary (empty dict if file not found or invalid)
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None and not force_reload and path is None:
        return _CONFIG_CACHE

    path = path or os.environ.get(CONFIG_ENV_VAR, "config.json")
    try:
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                _CONFIG_CACHE = json.load(f) or {}
        else:
            _CONFIG_CACHE = {}
    except (OSError, ValueError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        _CONFIG_CACHE = {}

    return _CONFIG_CACHE


def _section(name: str) -> Dict[str, Any]:
    section = get_config().get(name, {})
    return dict(section) if isinstance(section, dict) else {}


def get_index_config() -> Dict[str, Any]:
    """Get the package index section.

    Returns:
        Index configuration dictionary with defaults
    """
    idx = _section("index")
    idx.setdefault("base_url", DEFAULT_BASE_URL)
    idx["base_url"] = str(idx["base_url"]).rstrip("/")
    return idx


def get_network_config() -> Dict[str, Any]:
    """Return the network policy, with defaults.

    The retry budget defaults to zero: every request is a single attempt.

    Returns:
        Network configuration dictionary with all fields populated
    """
    net = _section("network")

    net.setdefault("timeout_s", 30.0)
    net.setdefault("verify_ssl", True)
    net.setdefault("max_retries", 0)

    # Ensure headers is a dict if provided
    if not isinstance(net.get("headers", {}), dict):
        net["headers"] = {}
    net.setdefault("headers", {})

    return net


def get_staging_config() -> Dict[str, Any]:
    """Get staging directory and external command settings.

    Returns:
        Staging configuration dictionary with defaults
    """
    stg = _section("staging")

    stg.setdefault("staging_dir", DEFAULT_STAGING_DIR)
    stg.setdefault("download_command", list(DEFAULT_DOWNLOAD_COMMAND))
    stg.setdefault("extract_command", list(DEFAULT_EXTRACT_COMMAND))
    stg.setdefault("fail_on_error", True)

    return stg


def get_search_config() -> Dict[str, Any]:
    """Get search ranking settings.

    Returns:
        Search configuration dictionary with defaults
    """
    srch = _section("search")
    srch.setdefault("threshold", 0.3)
    srch.setdefault("fuzziness", 0.0)
    return srch


def get_install_config() -> Dict[str, Any]:
    """Get install defaults (destination root and tag name)."""
    inst = _section("install")
    inst.setdefault("default_root", ".")
    inst.setdefault("default_tag", "master")
    return inst
