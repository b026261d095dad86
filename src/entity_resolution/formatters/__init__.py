"""
Entity format detection and conversion.

Key components:
- EntityFormat: closed taxonomy of entity encodings
- FormatConverter: one directed format → format edge
- FormatConverterRegistry: converter graph, format detection and detection cache
"""
from .types import (
    EntityFormat,
    ConversionContext,
    ConversionOutcome,
    FormatConverter,
    is_ledger_id,
)
from .cache import CacheEntry, FormatCache
from .registry import FormatConverterRegistry
from .converters import TopicIdToHrlConverter, StringNormalizationConverter

__all__ = [
    "EntityFormat",
    "ConversionContext",
    "ConversionOutcome",
    "FormatConverter",
    "is_ledger_id",
    "CacheEntry",
    "FormatCache",
    "FormatConverterRegistry",
    "TopicIdToHrlConverter",
    "StringNormalizationConverter",
]
