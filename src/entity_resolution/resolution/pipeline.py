"""
Multi-stage resolution pipeline.

Stages run strictly in registration order; each receives the previous
stage's output and the same ResolutionContext. A failing stage aborts the run
and its exception propagates unchanged.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..context.resolution_context import EntityType, ResolutionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectedEntity:
    """
    An entity reference found in a message.
    
    Attributes:
        type: Entity class, or None when it could not be classified
        value: Normalized entity value
        original_text: Text as it appears in the message
        confidence: Confidence score between 0.0 and 1.0
        position: Character offset of the first occurrence in the message
    """
    type: Optional[EntityType]
    value: str
    original_text: str
    confidence: float
    position: int


@dataclass
class ResolvedMessage:
    """Final output of a pipeline run."""
    message: str
    entities: List[DetectedEntity] = field(default_factory=list)
    conversions: List[Dict[str, str]] = field(default_factory=list)
    context: Optional[ResolutionContext] = None


class ResolutionStage(ABC):
    """One named transformation step."""
    
    name: str = "stage"
    
    @abstractmethod
    async def process(self, input: Any, context: ResolutionContext) -> Any:
        """
        Transform the previous stage's output.
        
        :param input: Output of the previous stage (the initial input for the first stage)
        :param context: Resolution context shared by all stages
        :return: Input for the next stage
        """
        pass


class ResolutionPipeline:
    """
    Ordered list of resolution stages.
    
    Usage:
        pipeline = ResolutionPipeline()
        pipeline.add_stage(EntityDetectionStage(registry))
        pipeline.add_stage(FormatConversionStage(registry))
        resolved = await pipeline.process(context.user_message, context)
    """
    
    def __init__(self):
        self._stages: List[ResolutionStage] = []
    
    def add_stage(self, stage: ResolutionStage) -> None:
        self._stages.append(stage)
    
    def get_stages(self) -> List[ResolutionStage]:
        return list(self._stages)
    
    def clear(self) -> None:
        self._stages = []
    
    async def process(self, initial_input: Any, context: ResolutionContext) -> ResolvedMessage:
        """
        Run every stage in order.
        
        With no stages the context's user message passes through unchanged.
        
        :param initial_input: Input of the first stage
        :param context: Resolution context
        :return: ResolvedMessage built from the last stage's output
        """
        if not self._stages:
            return ResolvedMessage(message=context.user_message, context=context)
        
        current: Any = initial_input
        for stage in self._stages:
            try:
                current = await stage.process(current, context)
            except Exception as e:
                logger.error(f"Stage {stage.name} failed: {e}")
                raise
            logger.debug(f"Stage {stage.name} complete")
        
        return self._to_resolved_message(current, context)
    
    def _to_resolved_message(self, output: Any, context: ResolutionContext) -> ResolvedMessage:
        if isinstance(output, ResolvedMessage):
            if output.context is None:
                output.context = context
            return output
        
        if isinstance(output, Mapping) and {"message", "entities", "conversions"} <= set(output):
            return ResolvedMessage(
                message=output["message"],
                entities=list(output["entities"]),
                conversions=list(output["conversions"]),
                context=context,
            )
        
        return ResolvedMessage(message=str(output), context=context)
