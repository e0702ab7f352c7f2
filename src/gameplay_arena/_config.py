# Area: Shared
"""
gameplay_arena._config - Runtime configuration
==============================================

Configuration is a plain dict. Values come from, in increasing
priority: ``DEFAULT_CONFIG``, an optional JSON file, and environment
variables (a ``.env`` file in the working directory is loaded first).
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger("gameplay_arena")

DEFAULT_CONFIG: Dict[str, Any] = {
    "db_path": "gameplay.db",
    "lease_ttl_seconds": 60,
    "agent_timeout_seconds": 30,
    "worker_count": 4,
    "max_agent_chain": 1000,
    "log_file": "gameplay_arena.log",
    "log_level": "INFO",
    "poker_starting_chips": 100,
    "poker_blinds": [1, 2],
}

# Environment variable -> (config key, type)
ENV_MAPPINGS = {
    "GAMEPLAY_DB_PATH": ("db_path", str),
    "GAMEPLAY_LEASE_TTL": ("lease_ttl_seconds", float),
    "GAMEPLAY_AGENT_TIMEOUT": ("agent_timeout_seconds", float),
    "GAMEPLAY_WORKERS": ("worker_count", int),
    "GAMEPLAY_MAX_AGENT_CHAIN": ("max_agent_chain", int),
    "GAMEPLAY_LOG_FILE": ("log_file", str),
    "GAMEPLAY_LOG_LEVEL": ("log_level", str),
}

REQUIRED_CONFIG_KEYS = [
    "db_path",
    "lease_ttl_seconds",
    "agent_timeout_seconds",
    "worker_count",
    "max_agent_chain",
]


def load_config(config_path: Optional[str] = None, use_dotenv: bool = True) -> Dict[str, Any]:
    """
    Build the runtime config.

    Args:
        config_path: Optional JSON file with config keys
        use_dotenv: Load a ``.env`` file into the environment first

    Returns:
        Config dict with every default key present

    Raises:
        ValueError: If an environment variable has the wrong type
    """
    if use_dotenv:
        load_dotenv()

    config = dict(DEFAULT_CONFIG)

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                config.update(json.load(f))
        else:
            logger.warning(f"Config file {config_path} not found, using defaults")

    for env_key, (config_key, cast) in ENV_MAPPINGS.items():
        if env_key in os.environ:
            try:
                config[config_key] = cast(os.environ[env_key])
            except ValueError:
                raise ValueError(f"{env_key} must be {cast.__name__}, got {os.environ[env_key]!r}")

    return config


def validate_config(config: dict) -> None:
    """
    Validate configuration values.

    Args:
        config: Configuration dict

    Raises:
        ValueError: If required keys are missing or values are out of range
    """
    missing = [k for k in REQUIRED_CONFIG_KEYS if k not in config]
    if missing:
        raise ValueError(f"Missing required config keys: {missing}")

    if config["lease_ttl_seconds"] <= 0:
        raise ValueError("lease_ttl_seconds must be positive")
    if config["agent_timeout_seconds"] <= 0:
        raise ValueError("agent_timeout_seconds must be positive")
    # A lease must outlive the agent call made under it
    if config["agent_timeout_seconds"] >= config["lease_ttl_seconds"]:
        raise ValueError("agent_timeout_seconds must be less than lease_ttl_seconds")
    if config["worker_count"] < 1:
        raise ValueError("worker_count must be at least 1")
    if config["max_agent_chain"] < 1:
        raise ValueError("max_agent_chain must be at least 1")

    blinds = config.get("poker_blinds", [1, 2])
    if len(blinds) != 2 or not 0 < blinds[0] <= blinds[1]:
        raise ValueError("poker_blinds must be [small, big] with 0 < small <= big")
    if config.get("poker_starting_chips", 100) < blinds[1]:
        raise ValueError("poker_starting_chips must cover the big blind")
