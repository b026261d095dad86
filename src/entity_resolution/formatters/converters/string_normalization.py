"""
Normalizes loosely formatted inscription references into canonical HRLs.

Accepted inputs:
- CDN paths embedding a topic id (``.../inscription-cdn/0.0.x/...``)
- ``content-ref:0.0.x`` tokens
- bare ``0.0.x`` ids, only when the tool prefers HRL output for topics or inscriptions

Lookup failures never propagate: the converter falls back to a configured
standard number and still returns a syntactically valid HRL.
"""
import logging
import re
from typing import Callable, Optional

from ...exceptions import ConversionFailedError
from ...network.hrl import (
    CONTENT_REF_PATTERN,
    HRL,
    HRL_PATTERN,
    HRLResolver,
    parse_hrl,
    standard_from_memo,
)
from ...network.mirror_node import EntityProbeClient, MirrorNodeClient
from ..types import ConversionContext, EntityFormat, FormatConverter, is_ledger_id

logger = logging.getLogger(__name__)

CDN_PATTERN = re.compile(r"inscription-cdn/(\d+\.\d+\.\d+)", re.IGNORECASE)
HARD_DEFAULT_STANDARD = "1"
HRL_PREFERENCE = "hrl"


class StringNormalizationConverter(FormatConverter):
    """Generic ``ANY → HRL`` normalizer; the fallback edge for unrecognized shapes."""
    
    source_format = EntityFormat.ANY
    target_format = EntityFormat.HRL
    
    def __init__(
        self,
        client_factory: Optional[Callable[[str], EntityProbeClient]] = None,
        resolver: Optional[HRLResolver] = None,
        default_standard: str = HARD_DEFAULT_STANDARD,
    ):
        """
        :param client_factory: Builds a mirror node client for a network name
        :param resolver: HRL resolver for content-ref and bare ids
        :param default_standard: Standard used when neither lookup nor tool preference gives one
        """
        self._client_factory = client_factory or MirrorNodeClient
        self._resolver = resolver or HRLResolver(self._client_factory)
        self._default_standard = default_standard
    
    def can_convert(self, source: str, context: ConversionContext) -> bool:
        if not isinstance(source, str):
            return False
        if HRL_PATTERN.match(source):
            return False
        if CDN_PATTERN.search(source):
            return True
        if CONTENT_REF_PATTERN.match(source):
            return True
        if is_ledger_id(source):
            return (
                context.preference("inscription") == HRL_PREFERENCE
                or context.preference("topic") == HRL_PREFERENCE
            )
        return False
    
    async def convert(self, source: str, context: ConversionContext) -> str:
        fallback = self._fallback_standard(context)
        network = context.network_type
        
        cdn_match = CDN_PATTERN.search(source)
        if cdn_match:
            return await self._from_topic_memo(cdn_match.group(1), network, fallback)
        
        content_ref = CONTENT_REF_PATTERN.match(source)
        if content_ref:
            return await self._from_resolver(source, content_ref.group(1), network, fallback)
        
        if is_ledger_id(source):
            return await self._from_resolver(source, source, network, fallback)
        
        raise ConversionFailedError(f"Unsupported inscription reference: {source!r}")
    
    def _fallback_standard(self, context: ConversionContext) -> str:
        return (
            context.preference("hrlStandard")
            or context.preference("inscriptionHrlStandard")
            or self._default_standard
        )
    
    async def _from_topic_memo(self, topic_id: str, network: str, fallback: str) -> str:
        try:
            topic = await self._client_factory(network).get_topic_info(topic_id)
            standard = standard_from_memo((topic or {}).get("memo"))
        except Exception as e:
            logger.warning(f"Topic memo lookup failed for {topic_id}: {e}")
            standard = None
        
        if standard is None:
            logger.info(f"Using fallback standard {fallback} for {topic_id}")
            standard = fallback
        return str(HRL(standard=standard, topic_id=topic_id))
    
    async def _from_resolver(self, reference: str, topic_id: str, network: str, fallback: str) -> str:
        try:
            resolved = await self._resolver.resolve(reference, network)
        except Exception as e:
            logger.warning(f"Reference resolution failed for {reference}: {e}")
            return str(HRL(standard=fallback, topic_id=topic_id))
        
        parsed = parse_hrl(resolved.hrl)
        standard = parsed.standard if parsed else fallback
        return str(HRL(standard=standard, topic_id=resolved.topic_id))
