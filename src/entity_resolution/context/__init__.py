"""
Resolution context domain objects.

Pure values built per request; no network access and no agent logic.
"""
from .resolution_context import (
    EntityType,
    HintSource,
    EntityHint,
    ConversionRecord,
    EntityResolutionPreferences,
    ToolMetadata,
    ResolutionContext,
    ResolutionContextBuilder,
)

__all__ = [
    "EntityType",
    "HintSource",
    "EntityHint",
    "ConversionRecord",
    "EntityResolutionPreferences",
    "ToolMetadata",
    "ResolutionContext",
    "ResolutionContextBuilder",
]
