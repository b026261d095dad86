"""
Core abstractions for entity format conversion.

Defines the format taxonomy, the per-call conversion context and the
converter contract.
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

LEDGER_ID_PATTERN = re.compile(r"\d+\.\d+\.\d+")
HRL_PREFIX = "hcs://"
DEFAULT_NETWORK = "testnet"


class EntityFormat(str, Enum):
    """Recognized textual encodings of a ledger entity reference."""
    TOPIC_ID = "topicId"
    HRL = "hrl"
    SCHEDULE_ID = "scheduleId"
    TOKEN_ID = "tokenId"
    ADDRESS = "address"
    SYMBOL = "symbol"
    SERIAL_NUMBER = "serialNumber"
    METADATA = "metadata"
    ACCOUNT_ID = "accountId"
    ALIAS = "alias"
    EVM_ADDRESS = "evmAddress"
    CONTRACT_ID = "contractId"
    FILE_ID = "fileId"
    ANY = "any"


def is_ledger_id(value: Any) -> bool:
    """Check for the ``shard.realm.num`` shape, with no surrounding text."""
    return isinstance(value, str) and LEDGER_ID_PATTERN.fullmatch(value) is not None


@dataclass(frozen=True)
class ConversionContext:
    """
    Per-call values threaded through detection and conversion.
    
    Attributes:
        network_type: Ledger network, conservative test network by default
        session_id: Calling session, if any
        tool_name: Name of the tool the value is being prepared for
        tool_preferences: Preference key → desired sub-format (e.g. {"topic": "hrl"})
        extra: Open extension fields
    """
    network_type: str = DEFAULT_NETWORK
    session_id: Optional[str] = None
    tool_name: Optional[str] = None
    tool_preferences: Mapping[str, str] = field(default_factory=dict)
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.network_type:
            object.__setattr__(self, "network_type", DEFAULT_NETWORK)

    def preference(self, key: str) -> Optional[str]:
        """Return a tool preference value, or None when unset."""
        return (self.tool_preferences or {}).get(key)

    @classmethod
    def from_resolution_context(cls, context) -> "ConversionContext":
        """Derive a conversion context from a ResolutionContext."""
        metadata = getattr(context, "tool_metadata", None)
        preferences: Dict[str, str] = {}
        tool_name = None
        if metadata is not None:
            tool_name = metadata.name
            if metadata.entity_resolution_preferences is not None:
                preferences = metadata.entity_resolution_preferences.as_preference_map()
        return cls(
            network_type=context.network_type,
            session_id=context.session_id,
            tool_name=tool_name,
            tool_preferences=preferences,
        )


class FormatConverter(ABC):
    """
    A single directed edge ``source_format → target_format``.
    
    ``can_convert`` must be cheap, pure and never raise. ``convert`` may
    perform I/O and raises on irrecoverable failure rather than returning a
    sentinel value.
    """
    
    source_format: EntityFormat
    target_format: EntityFormat
    
    @property
    def name(self) -> str:
        return type(self).__name__
    
    @abstractmethod
    def can_convert(self, source: str, context: ConversionContext) -> bool:
        """Check whether this converter accepts the given value."""
        pass
    
    @abstractmethod
    async def convert(self, source: str, context: ConversionContext) -> str:
        """Convert the value to the target format."""
        pass


@dataclass(frozen=True)
class ConversionOutcome:
    """Result of a single registry conversion, with its provenance."""
    original_value: str
    converted_value: str
    source_format: EntityFormat
    target_format: EntityFormat
    converter_name: Optional[str]

    @property
    def changed(self) -> bool:
        return self.converter_name is not None
