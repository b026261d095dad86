"""
Configuration loader with validation.

Builds ResolutionConfig from environment variables (and a local .env file).
"""
from dotenv import load_dotenv
from .config import ResolutionConfig
from .config_validator import get_optional_env, get_int_env, get_float_env, validate_network


def load_config_from_env() -> ResolutionConfig:
    """
    Load configuration from environment variables with validation.
    
    Usage:
        config = load_config_from_env()
        registry = create_default_registry(config)
    
    :return: Validated ResolutionConfig instance
    :raises: ConfigurationError if a value is malformed
    """
    # Load .env file if it exists (for local development)
    load_dotenv()
    
    defaults = ResolutionConfig()
    
    return ResolutionConfig(
        network_type=validate_network(
            get_optional_env("LEDGER_NETWORK", default=defaults.network_type)
        ),
        mirror_node_url=get_optional_env("MIRROR_NODE_URL"),
        cache_ttl_seconds=get_float_env("FORMAT_CACHE_TTL_SECONDS", defaults.cache_ttl_seconds),
        http_timeout_seconds=get_float_env("HTTP_TIMEOUT_SECONDS", defaults.http_timeout_seconds),
        http_retry_attempts=get_int_env("HTTP_RETRY_ATTEMPTS", defaults.http_retry_attempts),
        http_retry_max_delay_seconds=get_float_env(
            "HTTP_RETRY_MAX_DELAY_SECONDS", defaults.http_retry_max_delay_seconds
        ),
        default_hrl_standard=str(
            get_int_env("DEFAULT_HRL_STANDARD", int(defaults.default_hrl_standard), minimum=0)
        ),
    )
