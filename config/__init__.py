"""
Configuration loading utilities for SWAPGUARD.

YAML files live next to this module. Environment variables (optionally
from a .env file) can point at alternative files:

- SWAPGUARD_PAIRS_FILE: asset-pair allow-list
- SWAPGUARD_TRADER_FILE: trader / CLI defaults
- SWAPGUARD_ORACLE_URL: HTTP oracle base URL
- SWAPGUARD_LOG_LEVEL: default log level
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

CONFIG_DIR = Path(__file__).parent

PAIRS_FILE = "pairs.yaml"
TRADER_FILE = "trader.yaml"

_env_loaded = False


def load_env(dotenv_path: Optional[Path] = None) -> None:
    """Load .env once. Existing environment variables win."""
    global _env_loaded
    if _env_loaded and dotenv_path is None:
        return
    load_dotenv(dotenv_path=dotenv_path, override=False)
    _env_loaded = True


def get_setting(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read a SWAPGUARD_* setting from the environment."""
    load_env()
    value = os.getenv(name)
    return value if value else default


def resolve_config_path(filename: str, env_var: Optional[str] = None) -> Path:
    """
    Resolve a config file path.

    Env override (if set) wins over the bundled file in CONFIG_DIR.
    """
    if env_var:
        override = get_setting(env_var)
        if override:
            return Path(override)
    return CONFIG_DIR / filename


def load_yaml(filename: str, env_var: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory (or absolute path)
        env_var: Optional environment variable overriding the path

    Returns:
        Parsed YAML as dict

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the top level is not a mapping
    """
    filepath = Path(filename) if Path(filename).is_absolute() else resolve_config_path(filename, env_var)
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {filepath} must contain a mapping")
    return data


def load_pairs() -> Dict[str, Any]:
    """Load asset-pair allow-list configuration."""
    return load_yaml(PAIRS_FILE, env_var="SWAPGUARD_PAIRS_FILE")


def load_trader_defaults() -> Dict[str, Any]:
    """Load trader / CLI defaults."""
    return load_yaml(TRADER_FILE, env_var="SWAPGUARD_TRADER_FILE")
