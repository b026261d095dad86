"""
Staged message resolution.

Key components:
- ResolutionPipeline: ordered stage runner
- EntityDetectionStage / FormatConversionStage: default stages
- EntityExtractor: finds entity references in free text
"""
from .entity_extractor import EntityExtractor, ExtractedEntity
from .pipeline import DetectedEntity, ResolvedMessage, ResolutionStage, ResolutionPipeline
from .stages import EntityDetectionStage, FormatConversionStage

__all__ = [
    "EntityExtractor",
    "ExtractedEntity",
    "DetectedEntity",
    "ResolvedMessage",
    "ResolutionStage",
    "ResolutionPipeline",
    "EntityDetectionStage",
    "FormatConversionStage",
]
