"""
Hashlink Resource Locator (HRL) helpers.

An HRL is the canonical locator form of a topic-backed resource:
``hcs://<standard>/<topic id>``.
"""
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from ..exceptions import ReferenceResolutionError
from .mirror_node import EntityProbeClient

logger = logging.getLogger(__name__)

HRL_SCHEME = "hcs"
HRL_PATTERN = re.compile(r"^hcs://(\d+)/(\d+\.\d+\.\d+)$", re.IGNORECASE)
CONTENT_REF_PATTERN = re.compile(r"^content-ref:(\d+\.\d+\.\d+)$", re.IGNORECASE)
MEMO_STANDARD_PATTERN = re.compile(r"^hcs-(\d+)")


@dataclass(frozen=True)
class HRL:
    """Parsed locator reference."""
    standard: str
    topic_id: str

    def __str__(self) -> str:
        return f"{HRL_SCHEME}://{self.standard}/{self.topic_id}"


@dataclass(frozen=True)
class ResolvedReference:
    """A reference resolved to its underlying topic and locator."""
    topic_id: str
    hrl: str


def parse_hrl(value: str) -> Optional[HRL]:
    """Parse ``hcs://<standard>/<topic id>``; None when the value is not an HRL."""
    if not isinstance(value, str):
        return None
    match = HRL_PATTERN.match(value.strip())
    if not match:
        return None
    return HRL(standard=match.group(1), topic_id=match.group(2))


def standard_from_memo(memo: Optional[str]) -> Optional[str]:
    """Extract the standard number from a topic memo such as ``hcs-1;...``."""
    match = MEMO_STANDARD_PATTERN.match(memo or "")
    return match.group(1) if match else None


class HRLResolver:
    """
    Resolves bare or ``content-ref:`` topic references to their HRL.
    
    The standard number is read from the topic memo on the mirror node.
    """
    
    def __init__(self, client_factory: Callable[[str], EntityProbeClient]):
        """
        :param client_factory: Builds a mirror node client for a network name
        """
        self._client_factory = client_factory
    
    async def resolve(self, reference: str, network: str) -> ResolvedReference:
        """
        Resolve a reference to its topic id and HRL.
        
        :param reference: ``0.0.x`` or ``content-ref:0.0.x``
        :param network: Ledger network name
        :return: ResolvedReference
        :raises: ReferenceResolutionError if the topic is missing or carries no standard
        """
        content_ref = CONTENT_REF_PATTERN.match(reference.strip())
        topic_id = content_ref.group(1) if content_ref else reference.strip()
        
        topic = await self._client_factory(network).get_topic_info(topic_id)
        if not topic:
            raise ReferenceResolutionError(f"Topic {topic_id} not found on {network}")
        
        standard = standard_from_memo(topic.get("memo"))
        if standard is None:
            raise ReferenceResolutionError(f"Topic {topic_id} memo does not declare a standard")
        
        hrl = str(HRL(standard=standard, topic_id=topic_id))
        logger.debug(f"Resolved reference {reference} → {hrl}")
        return ResolvedReference(topic_id=topic_id, hrl=hrl)
