from dataclasses import dataclass
from typing import Optional


@dataclass
class ResolutionConfig:
    # Network
    network_type: str = "testnet"
    mirror_node_url: Optional[str] = None

    # Detection cache
    cache_ttl_seconds: float = 300.0

    # Mirror node HTTP client
    http_timeout_seconds: float = 10.0
    http_retry_attempts: int = 3
    http_retry_max_delay_seconds: float = 1.0

    # Locator fallback
    default_hrl_standard: str = "1"
