"""
Resolution context domain objects.

A ResolutionContext is built once per request and only ever extended by
returning a new value; the builder never mutates its input.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..formatters.types import DEFAULT_NETWORK, EntityFormat


class EntityType(str, Enum):
    """Ledger entity classes a message can refer to."""
    TOPIC = "topic"
    TOKEN = "token"
    NFT = "nft"
    ACCOUNT = "account"
    CONTRACT = "contract"
    INSCRIPTION = "inscription"

    @property
    def raw_format(self) -> EntityFormat:
        """The format a bare ledger id of this class is in."""
        return _RAW_FORMATS[self]

    @classmethod
    def from_format(cls, entity_format: EntityFormat) -> Optional["EntityType"]:
        return _FORMAT_TYPES.get(entity_format)


_RAW_FORMATS = {
    EntityType.TOPIC: EntityFormat.TOPIC_ID,
    EntityType.TOKEN: EntityFormat.TOKEN_ID,
    EntityType.NFT: EntityFormat.TOKEN_ID,
    EntityType.ACCOUNT: EntityFormat.ACCOUNT_ID,
    EntityType.CONTRACT: EntityFormat.CONTRACT_ID,
    EntityType.INSCRIPTION: EntityFormat.TOPIC_ID,
}

_FORMAT_TYPES = {
    EntityFormat.TOPIC_ID: EntityType.TOPIC,
    EntityFormat.TOKEN_ID: EntityType.TOKEN,
    EntityFormat.ACCOUNT_ID: EntityType.ACCOUNT,
    EntityFormat.CONTRACT_ID: EntityType.CONTRACT,
    EntityFormat.HRL: EntityType.INSCRIPTION,
}

# Topic and inscription references are both topic-backed: each honours its own key first, then the other
_PREFERENCE_KEYS: Dict[EntityType, Tuple[str, ...]] = {
    EntityType.TOPIC: ("topic", "inscription"),
    EntityType.INSCRIPTION: ("inscription", "topic"),
    EntityType.TOKEN: ("token",),
    EntityType.NFT: ("nft",),
    EntityType.ACCOUNT: ("account",),
}


class HintSource(str, Enum):
    USER = "user"
    INFERRED = "inferred"
    CACHED = "cached"


@dataclass(frozen=True)
class EntityHint:
    """Advisory typing information for a value that may appear in the message."""
    type: EntityType
    value: str
    confidence: float
    source: HintSource = HintSource.USER

    def __post_init__(self):
        """Validate confidence score."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be between 0.0 and 1.0, got {self.confidence}")


@dataclass(frozen=True)
class ConversionRecord:
    """Audit entry for a conversion that actually happened."""
    original_value: str
    converted_value: str
    source_format: str
    target_format: str
    converter_name: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    context: Dict[str, Any] = field(default_factory=dict)


class EntityResolutionPreferences(BaseModel):
    """Per-tool preferred output format for each entity class."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    inscription: Optional[Literal["hrl", "topicId", "metadata", "any"]] = None
    topic: Optional[Literal["hrl", "topicId", "any"]] = None
    token: Optional[Literal["tokenId", "address", "symbol", "any"]] = None
    nft: Optional[Literal["serialNumber", "metadata", "hrl", "any"]] = None
    account: Optional[Literal["accountId", "alias", "evmAddress", "any"]] = None
    hrl_standard: Optional[str] = Field(default=None, alias="hrlStandard")
    inscription_hrl_standard: Optional[str] = Field(default=None, alias="inscriptionHrlStandard")

    def as_preference_map(self) -> Dict[str, str]:
        """Preference key → value for every preference that is set."""
        return {
            key: value
            for key, value in self.model_dump(by_alias=True).items()
            if value is not None
        }

    def preferred_format(self, entity_type: EntityType) -> Optional[EntityFormat]:
        """
        Return the format a tool requests for an entity class.
        
        :param entity_type: Entity class
        :return: Requested format, or None when unset or "any"
        """
        for key in _PREFERENCE_KEYS.get(entity_type, ()):
            value = getattr(self, key)
            if value is None:
                continue
            if value == "any":
                return None
            return EntityFormat(value)
        return None


class ToolMetadata(BaseModel):
    """Metadata of the tool a message is being resolved for."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    version: str = "1.0.0"
    category: str = "core"
    description: str = ""
    entity_resolution_preferences: Optional[EntityResolutionPreferences] = Field(
        default=None, alias="entityResolutionPreferences"
    )


@dataclass(frozen=True)
class ResolutionContext:
    """Per-request state shared by pipeline stages."""
    user_message: str
    session_id: str
    network_type: str = DEFAULT_NETWORK
    entity_hints: List[EntityHint] = field(default_factory=list)
    conversion_history: List[ConversionRecord] = field(default_factory=list)
    tool_metadata: Optional[ToolMetadata] = None

    @property
    def preferences(self) -> Optional[EntityResolutionPreferences]:
        if self.tool_metadata is None:
            return None
        return self.tool_metadata.entity_resolution_preferences

    def hint_for(self, value: str) -> Optional[EntityHint]:
        """Return the most confident hint for a value."""
        matching = [hint for hint in self.entity_hints if hint.value == value]
        if not matching:
            return None
        return max(matching, key=lambda hint: hint.confidence)

    def record_conversion(self, record: ConversionRecord) -> None:
        """Append to the conversion audit trail."""
        self.conversion_history.append(record)


class ResolutionContextBuilder:
    """Builder for creating and extending resolution contexts."""

    @staticmethod
    def from_message(message: str, session_id: str, network_type: str = DEFAULT_NETWORK) -> ResolutionContext:
        """Create initial context from user message and session ID."""
        return ResolutionContext(
            user_message=message,
            session_id=session_id,
            network_type=network_type or DEFAULT_NETWORK,
        )

    @staticmethod
    def with_tool_context(context: ResolutionContext, tool_metadata: ToolMetadata) -> ResolutionContext:
        """Return a copy of the context carrying tool metadata."""
        return replace(
            context,
            tool_metadata=tool_metadata,
            entity_hints=list(context.entity_hints),
            conversion_history=list(context.conversion_history),
        )

    @staticmethod
    def with_entity_hints(context: ResolutionContext, hints: Sequence[EntityHint]) -> ResolutionContext:
        """Return a copy of the context whose hints are replaced by a copy of ``hints``."""
        return replace(
            context,
            entity_hints=list(hints),
            conversion_history=list(context.conversion_history),
        )
