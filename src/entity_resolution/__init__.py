"""
Entity format resolution engine.

Detects what kind of ledger entity an identifier string refers to, converts
it between textual encodings (raw id, HRL, ...) and rewrites messages so a
tool receives identifiers in the format it expects.
"""
from .config import ResolutionConfig
from .config_loader import load_config_from_env
from .exceptions import (
    EntityResolutionError,
    ConfigurationError,
    NoConverterError,
    InadmissibleEntityError,
    ConversionFailedError,
    ReferenceResolutionError,
)
from .formatters import (
    EntityFormat,
    ConversionContext,
    FormatConverter,
    FormatConverterRegistry,
    TopicIdToHrlConverter,
    StringNormalizationConverter,
)
from .context import (
    EntityType,
    EntityHint,
    ConversionRecord,
    EntityResolutionPreferences,
    ToolMetadata,
    ResolutionContext,
    ResolutionContextBuilder,
)
from .resolution import (
    DetectedEntity,
    ResolvedMessage,
    ResolutionStage,
    ResolutionPipeline,
    EntityDetectionStage,
    FormatConversionStage,
)
from .factory import create_default_registry, create_default_pipeline

__all__ = [
    "ResolutionConfig",
    "load_config_from_env",
    "EntityResolutionError",
    "ConfigurationError",
    "NoConverterError",
    "InadmissibleEntityError",
    "ConversionFailedError",
    "ReferenceResolutionError",
    "EntityFormat",
    "ConversionContext",
    "FormatConverter",
    "FormatConverterRegistry",
    "TopicIdToHrlConverter",
    "StringNormalizationConverter",
    "EntityType",
    "EntityHint",
    "ConversionRecord",
    "EntityResolutionPreferences",
    "ToolMetadata",
    "ResolutionContext",
    "ResolutionContextBuilder",
    "DetectedEntity",
    "ResolvedMessage",
    "ResolutionStage",
    "ResolutionPipeline",
    "EntityDetectionStage",
    "FormatConversionStage",
    "create_default_registry",
    "create_default_pipeline",
]
