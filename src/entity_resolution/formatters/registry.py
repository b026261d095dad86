"""
Registry of format converters.

Owns the directed converter graph, detects the format of arbitrary entity
strings (probing the mirror node when the shape alone is ambiguous) and
performs single-hop conversions.
"""
import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from ..exceptions import InadmissibleEntityError, NoConverterError
from ..network.mirror_node import EntityProbeClient, MirrorNodeClient
from .cache import DEFAULT_CACHE_TTL_SECONDS, FormatCache
from .types import (
    HRL_PREFIX,
    ConversionContext,
    ConversionOutcome,
    EntityFormat,
    FormatConverter,
    is_ledger_id,
)

logger = logging.getLogger(__name__)

# Probe order doubles as tie-break priority when an id exists in several namespaces
PROBE_ORDER: Tuple[Tuple[EntityFormat, str], ...] = (
    (EntityFormat.ACCOUNT_ID, "get_account_balance"),
    (EntityFormat.TOKEN_ID, "get_token_info"),
    (EntityFormat.TOPIC_ID, "get_topic_info"),
    (EntityFormat.CONTRACT_ID, "get_contract_info"),
)

ConverterKey = Tuple[EntityFormat, EntityFormat]


class FormatConverterRegistry:
    """
    Registry for format converters that handles entity transformation.
    
    Usage:
        registry = FormatConverterRegistry()
        registry.register(TopicIdToHrlConverter())
        hrl = await registry.convert_entity(
            "0.0.6624800", EntityFormat.HRL, ConversionContext(network_type="testnet")
        )
    """
    
    def __init__(
        self,
        client_factory: Optional[Callable[[str], EntityProbeClient]] = None,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize registry.
        
        :param client_factory: Builds a probe client for a network name (mirror node by default)
        :param cache_ttl_seconds: Lifetime of a positive format detection
        :param clock: Monotonic time source used by the detection cache
        """
        self._converters: Dict[ConverterKey, FormatConverter] = {}
        self._client_factory = client_factory or MirrorNodeClient
        self._cache = FormatCache(ttl_seconds=cache_ttl_seconds, clock=clock)
    
    @property
    def cache(self) -> FormatCache:
        return self._cache
    
    def register(self, converter: FormatConverter) -> None:
        """Register a converter; a later registration for the same edge replaces the earlier one."""
        key = (converter.source_format, converter.target_format)
        previous = self._converters.get(key)
        if previous is not None and previous is not converter:
            logger.info(
                f"Replacing converter {previous.name} with {converter.name} "
                f"for {key[0].value} → {key[1].value}"
            )
        self._converters[key] = converter
        logger.debug(f"Registered {converter.name}: {key[0].value} → {key[1].value}")
    
    def find_converter(self, source: EntityFormat, target: EntityFormat) -> Optional[FormatConverter]:
        return self._converters.get((source, target))
    
    def has_converter(self, source: EntityFormat, target: EntityFormat) -> bool:
        return self.find_converter(source, target) is not None
    
    def get_registered_converters(self) -> List[ConverterKey]:
        return list(self._converters.keys())
    
    def clear(self) -> None:
        """Remove all registered converters."""
        self._converters.clear()
    
    def clear_cache(self) -> None:
        """Drop every cached format detection."""
        self._cache.clear()
    
    async def convert_entity(
        self,
        entity: str,
        target_format: EntityFormat,
        context: Optional[ConversionContext] = None,
    ) -> str:
        """
        Convert an entity to the target format.
        
        :param entity: Raw entity string in any format
        :param target_format: Desired format
        :param context: Conversion context (network, tool preferences)
        :return: Converted value, or the entity itself when already in target format
        :raises: NoConverterError, InadmissibleEntityError, or whatever the converter raises
        """
        outcome = await self.convert_entity_traced(entity, target_format, context)
        return outcome.converted_value
    
    async def convert_entity_traced(
        self,
        entity: str,
        target_format: EntityFormat,
        context: Optional[ConversionContext] = None,
    ) -> ConversionOutcome:
        """Same as convert_entity, returning the detected source format and converter used."""
        context = context or ConversionContext()
        source_format = await self._detect_format_with_fallback(entity, context)
        
        if source_format == target_format:
            return ConversionOutcome(
                original_value=entity,
                converted_value=entity,
                source_format=source_format,
                target_format=target_format,
                converter_name=None,
            )
        
        converter = self.find_converter(source_format, target_format)
        if converter is None:
            raise NoConverterError(source_format, target_format)
        
        if not converter.can_convert(entity, context):
            raise InadmissibleEntityError(entity)
        
        converted = await converter.convert(entity, context)
        logger.info(f"Converted {entity} → {converted} via {converter.name}")
        return ConversionOutcome(
            original_value=entity,
            converted_value=converted,
            source_format=source_format,
            target_format=target_format,
            converter_name=converter.name,
        )
    
    async def detect_entity_format(
        self,
        entity: str,
        context: Optional[ConversionContext] = None,
    ) -> EntityFormat:
        """Detect entity format (ACCOUNT_ID, TOKEN_ID, TOPIC_ID, CONTRACT_ID, HRL or ANY)."""
        return await self._detect_format_with_fallback(entity, context or ConversionContext())
    
    async def _detect_format_with_fallback(self, entity: str, context: ConversionContext) -> EntityFormat:
        if isinstance(entity, str) and entity.startswith(HRL_PREFIX):
            return EntityFormat.HRL
        
        if not is_ledger_id(entity):
            return EntityFormat.ANY
        
        cached = self._cache.get(entity)
        if cached is not None:
            logger.debug(f"Format cache hit: {entity} → {cached.value}")
            return cached
        
        try:
            detected = await self._detect_format(entity, context)
        except Exception as e:
            logger.warning(f"Entity detection failed for {entity}, using fallback: {e}")
            return EntityFormat.ANY
        
        if detected != EntityFormat.ANY:
            self._cache.set(entity, detected)
        return detected
    
    async def _detect_format(self, entity: str, context: ConversionContext) -> EntityFormat:
        client = self._client_factory(context.network_type)
        
        # All probes settle before picking, so a fast negative never pre-empts a slower positive
        results = await asyncio.gather(*(
            self._probe(client, method, entity, entity_format)
            for entity_format, method in PROBE_ORDER
        ))
        
        for result in results:
            if result is not None:
                logger.debug(f"Detected {entity} as {result.value}")
                return result
        
        logger.debug(f"No namespace recognized {entity}")
        return EntityFormat.ANY
    
    async def _probe(
        self,
        client: EntityProbeClient,
        method: str,
        entity: str,
        entity_format: EntityFormat,
    ) -> Optional[EntityFormat]:
        try:
            result = await getattr(client, method)(entity)
        except Exception as e:
            logger.debug(f"Probe {method}({entity}) failed: {e}")
            return None
        return entity_format if result else None
