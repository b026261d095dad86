"""
Configuration validation utilities.

Typed accessors over environment variables with helpful error messages.
"""
import os
import warnings
from typing import Optional
from .exceptions import ConfigurationError
from .network.mirror_node import MIRROR_NODE_URLS


def get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Get optional environment variable.
    
    :param key: Environment variable name
    :param default: Default value if not set
    :return: Environment variable value or default
    """
    value = os.getenv(key, default)
    
    if value and _is_placeholder(value):
        # Warn but don't fail for optional configs
        warnings.warn(
            f"{key} appears to be a placeholder. Using default or None.",
            UserWarning
        )
        return default
    
    return value


def get_int_env(key: str, default: int, minimum: int = 1) -> int:
    """
    Get integer environment variable.
    
    :param key: Environment variable name
    :param default: Default value if not set
    :param minimum: Smallest accepted value
    :return: Parsed integer
    :raises: ConfigurationError if the value is not an integer or below minimum
    """
    raw = get_optional_env(key)
    if raw is None or raw.strip() == "":
        return default
    
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got: {raw!r}")
    
    if value < minimum:
        raise ConfigurationError(f"{key} must be >= {minimum}, got: {value}")
    
    return value


def get_float_env(key: str, default: float) -> float:
    """
    Get positive float environment variable.
    
    :param key: Environment variable name
    :param default: Default value if not set
    :return: Parsed float
    :raises: ConfigurationError if the value is not a positive number
    """
    raw = get_optional_env(key)
    if raw is None or raw.strip() == "":
        return default
    
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got: {raw!r}")
    
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got: {value}")
    
    return value


def validate_network(network: str, key: str = "LEDGER_NETWORK") -> str:
    """
    Validate ledger network name.
    
    :param network: Network name (mainnet, testnet, previewnet)
    :param key: Name of the setting (for error messages)
    :return: Normalized network name
    :raises: ConfigurationError if empty or unknown
    """
    normalized = (network or "").strip().lower()
    if normalized not in MIRROR_NODE_URLS:
        raise ConfigurationError(
            f"{key} must be one of {', '.join(sorted(MIRROR_NODE_URLS))}, got: {network!r}"
        )
    return normalized


def _is_placeholder(value: str) -> bool:
    """Check if value is a placeholder."""
    if not value:
        return False
    
    placeholder_patterns = [
        "your_",
        "placeholder",
        "example",
        "xxx",
        "replace",
        "todo",
    ]
    
    value_lower = value.lower()
    return any(pattern in value_lower for pattern in placeholder_patterns)
