"""
Concrete resolution stages: entity detection and format conversion.
"""
import logging
from typing import Any, List, Optional, Sequence

from ..context.resolution_context import ConversionRecord, EntityType, ResolutionContext
from ..exceptions import InadmissibleEntityError, NoConverterError
from ..formatters.registry import FormatConverterRegistry
from ..formatters.types import HRL_PREFIX, ConversionContext, EntityFormat, is_ledger_id
from .entity_extractor import EntityExtractor
from .pipeline import DetectedEntity, ResolutionStage, ResolvedMessage

logger = logging.getLogger(__name__)

HINTLESS_CONFIDENCE = 0.5
DETECTED_CONFIDENCE = 0.9
LOCATOR_CONFIDENCE = 1.0


class EntityDetectionStage(ResolutionStage):
    """
    Scans a message for entity references and classifies them.
    
    Classification order: context hints, locator shape, then registry
    format detection (when a registry is supplied). References that remain
    unclassified are still reported, with ``type=None``.
    """
    
    name = "entity-detection"
    
    def __init__(
        self,
        registry: Optional[FormatConverterRegistry] = None,
        extractor: Optional[EntityExtractor] = None,
    ):
        self._registry = registry
        self._extractor = extractor or EntityExtractor()
    
    async def process(self, input: Any, context: ResolutionContext) -> List[DetectedEntity]:
        message = input if isinstance(input, str) else context.user_message
        conversion_context = ConversionContext.from_resolution_context(context)
        
        detected = []
        for extracted in self._extractor.extract(message):
            entity_type, confidence = await self._classify(extracted.text, context, conversion_context)
            detected.append(DetectedEntity(
                type=entity_type,
                value=extracted.text,
                original_text=extracted.text,
                confidence=confidence,
                position=extracted.start_pos,
            ))
        
        logger.debug(f"Detected {len(detected)} entities in message")
        return detected
    
    async def _classify(
        self,
        value: str,
        context: ResolutionContext,
        conversion_context: ConversionContext,
    ):
        hint = context.hint_for(value)
        if hint is not None:
            return hint.type, hint.confidence
        
        if not is_ledger_id(value):
            # HRL, CDN path or content-ref
            return EntityType.INSCRIPTION, LOCATOR_CONFIDENCE
        
        if self._registry is not None:
            entity_format = await self._registry.detect_entity_format(value, conversion_context)
            entity_type = EntityType.from_format(entity_format)
            if entity_type is not None:
                return entity_type, DETECTED_CONFIDENCE
        
        return None, HINTLESS_CONFIDENCE


class FormatConversionStage(ResolutionStage):
    """
    Rewrites detected entities into the formats the tool prefers.
    
    Conversion-layer failures for one entity (no converter, inadmissible
    value) leave that entity's text unchanged; any other error propagates.
    """
    
    name = "format-conversion"
    
    def __init__(self, registry: FormatConverterRegistry):
        self._registry = registry
    
    async def process(self, input: Any, context: ResolutionContext) -> ResolvedMessage:
        entities: List[DetectedEntity] = list(input or [])
        message = context.user_message
        conversions = []
        preferences = context.preferences
        
        if preferences is None or not entities:
            return ResolvedMessage(message=message, entities=entities, context=context)
        
        conversion_context = ConversionContext.from_resolution_context(context)
        offset = 0
        
        for entity in sorted(entities, key=lambda e: e.position):
            if entity.type is None:
                continue
            
            target = preferences.preferred_format(entity.type)
            if target is None or target == self._current_format(entity):
                continue
            
            try:
                outcome = await self._registry.convert_entity_traced(entity.value, target, conversion_context)
            except (NoConverterError, InadmissibleEntityError) as e:
                logger.warning(f"Leaving {entity.value} unchanged: {e}")
                continue
            
            if not outcome.changed or outcome.converted_value == entity.value:
                continue
            
            message, offset = self._substitute(message, entity, outcome.converted_value, offset)
            conversions.append({"original": entity.value, "converted": outcome.converted_value})
            context.record_conversion(ConversionRecord(
                original_value=entity.value,
                converted_value=outcome.converted_value,
                source_format=outcome.source_format.value,
                target_format=outcome.target_format.value,
                converter_name=outcome.converter_name,
                context={
                    "network_type": conversion_context.network_type,
                    "session_id": conversion_context.session_id,
                    "tool_name": conversion_context.tool_name,
                },
            ))
        
        return ResolvedMessage(
            message=message,
            entities=entities,
            conversions=conversions,
            context=context,
        )
    
    @staticmethod
    def _current_format(entity: DetectedEntity) -> EntityFormat:
        if entity.value.startswith(HRL_PREFIX):
            return EntityFormat.HRL
        if is_ledger_id(entity.value):
            return entity.type.raw_format
        return EntityFormat.ANY
    
    @staticmethod
    def _substitute(message: str, entity: DetectedEntity, converted: str, offset: int):
        """Replace the entity at its recorded position; returns the new message and offset."""
        start = entity.position + offset
        end = start + len(entity.original_text)
        if message[start:end] != entity.original_text:
            start = message.find(entity.original_text)
            if start < 0:
                return message, offset
            end = start + len(entity.original_text)
        
        rewritten = message[:start] + converted + message[end:]
        return rewritten, offset + len(converted) - len(entity.original_text)
