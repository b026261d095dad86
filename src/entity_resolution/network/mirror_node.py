"""
Mirror node client used for entity existence probes and topic lookups.

Each lookup returns the decoded JSON document when the entity exists in that
namespace and None when the mirror node reports it as missing. Transient
failures (timeouts, connection errors, 5xx, 429) are retried a bounded number
of times and then raised.
"""
import logging
from typing import Any, Dict, Optional, Protocol

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

MIRROR_NODE_URLS: Dict[str, str] = {
    "mainnet": "https://mainnet-public.mirrornode.hedera.com",
    "testnet": "https://testnet.mirrornode.hedera.com",
    "previewnet": "https://previewnet.mirrornode.hedera.com",
}

DEFAULT_NETWORK = "testnet"


class EntityProbeClient(Protocol):
    """Lookups consumed by format detection and locator normalization."""

    async def get_account_balance(self, entity_id: str) -> Optional[Dict[str, Any]]:
        ...

    async def get_token_info(self, entity_id: str) -> Optional[Dict[str, Any]]:
        ...

    async def get_topic_info(self, entity_id: str) -> Optional[Dict[str, Any]]:
        ...

    async def get_contract_info(self, entity_id: str) -> Optional[Dict[str, Any]]:
        ...


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, (httpx.TimeoutException, httpx.ConnectError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return status >= 500 or status == 429
    return False


class MirrorNodeClient:
    """
    Thin async REST client over the public mirror node API.
    
    Usage:
        client = MirrorNodeClient("testnet")
        topic = await client.get_topic_info("0.0.6624800")
        memo = topic["memo"] if topic else ""
    """
    
    def __init__(
        self,
        network_type: str = DEFAULT_NETWORK,
        base_url: Optional[str] = None,
        timeout_seconds: float = 10.0,
        retry_attempts: int = 3,
        retry_max_delay_seconds: float = 1.0,
    ):
        """
        Initialize mirror node client.
        
        :param network_type: Ledger network; unknown names use the testnet mirror
        :param base_url: Explicit mirror node URL overriding the network default
        :param timeout_seconds: Per-request timeout
        :param retry_attempts: Total attempts per lookup for transient failures
        :param retry_max_delay_seconds: Upper bound of the exponential backoff
        """
        self.network_type = network_type
        self.base_url = (base_url or MIRROR_NODE_URLS.get(network_type, MIRROR_NODE_URLS[DEFAULT_NETWORK])).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.retry_attempts = max(1, int(retry_attempts))
        self.retry_max_delay_seconds = retry_max_delay_seconds
    
    async def get_account_balance(self, entity_id: str) -> Optional[Dict[str, Any]]:
        account = await self._get(f"/api/v1/accounts/{entity_id}")
        if not account:
            return None
        return account.get("balance") or {"account": account.get("account", entity_id)}
    
    async def get_token_info(self, entity_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(f"/api/v1/tokens/{entity_id}")
    
    async def get_topic_info(self, entity_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(f"/api/v1/topics/{entity_id}")
    
    async def get_contract_info(self, entity_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(f"/api/v1/contracts/{entity_id}")
    
    async def _get(self, path: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}{path}"
        
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(multiplier=0.1, max=self.retry_max_delay_seconds),
                retry=retry_if_exception(_is_retryable),
                reraise=True,
            ):
                with attempt:
                    response = await client.get(url)
                    if response.status_code == 404:
                        logger.debug(f"Mirror node: {path} not found")
                        return None
                    response.raise_for_status()
                    payload = response.json()
                    return payload or None
