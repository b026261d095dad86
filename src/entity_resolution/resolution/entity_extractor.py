"""
Entity extraction for message resolution.

Finds ledger entity references in free text before they are typed and
converted.
"""
import re
from typing import List, Set
from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractedEntity:
    """Represents an extracted entity from a message."""
    text: str
    start_pos: int
    end_pos: int


class EntityExtractor:
    """
    Extracts ledger entity references from natural language messages.
    
    Recognizes:
    - HRLs (hcs://1/0.0.123)
    - inscription CDN paths (https://host/api/inscription-cdn/0.0.123?network=testnet)
    - content-ref tokens (content-ref:0.0.123)
    - bare ledger ids (0.0.123)
    """
    
    HRL_PATTERN = re.compile(r'hcs://\d+/\d+\.\d+\.\d+', re.IGNORECASE)
    # Whole URL including query; trailing sentence punctuation stays outside
    CDN_PATTERN = re.compile(
        r'(?:https?://[^\s/]+/(?:[^\s/]+/)*)?inscription-cdn/\d+\.\d+\.\d+'
        r'(?:[/?#](?:\S*[^\s.,;:!?\'")\]])?)?',
        re.IGNORECASE,
    )
    CONTENT_REF_PATTERN = re.compile(r'content-ref:\d+\.\d+\.\d+', re.IGNORECASE)
    # Not part of a longer dotted number (versions, IPs) or a URL path; a trailing sentence period is fine
    LEDGER_ID_PATTERN = re.compile(r'(?<![\w./])\d+\.\d+\.\d+(?!\w|\.\d)')
    
    def extract(self, message: str) -> List[ExtractedEntity]:
        """
        Extract entity references from a message.
        
        :param message: Natural language message
        :return: List of ExtractedEntity objects ordered by position
        """
        if not message:
            return []
        
        entities = []
        for pattern in (self.HRL_PATTERN, self.CDN_PATTERN, self.CONTENT_REF_PATTERN, self.LEDGER_ID_PATTERN):
            entities.extend(self._extract_pattern(pattern, message))
        
        # Ids inside an HRL, CDN path or content-ref overlap the longer match and are dropped
        return self._deduplicate_entities(entities)
    
    def _extract_pattern(self, pattern: re.Pattern, message: str) -> List[ExtractedEntity]:
        return [
            ExtractedEntity(text=match.group(0), start_pos=match.start(), end_pos=match.end())
            for match in pattern.finditer(message)
        ]
    
    def _deduplicate_entities(self, entities: List[ExtractedEntity]) -> List[ExtractedEntity]:
        """
        Remove duplicate entities (same text or overlapping positions).
        
        Prefers entities with longer text (more specific). Only the first
        occurrence of a repeated value is kept.
        """
        if not entities:
            return []
        
        # Sort by length (descending) and start position
        sorted_entities = sorted(entities, key=lambda e: (-len(e.text), e.start_pos))
        
        seen_texts: Set[str] = set()
        seen_positions: Set[tuple] = set()
        deduplicated = []
        
        for entity in sorted_entities:
            position_range = (entity.start_pos, entity.end_pos)
            
            if any(self._positions_overlap(position_range, seen) for seen in seen_positions):
                continue
            
            seen_positions.add(position_range)
            if entity.text in seen_texts:
                continue
            
            seen_texts.add(entity.text)
            deduplicated.append(entity)
        
        # Sort by position in message (ascending)
        return sorted(deduplicated, key=lambda e: e.start_pos)
    
    def _positions_overlap(self, range1: tuple, range2: tuple) -> bool:
        """Check if two position ranges overlap."""
        start1, end1 = range1
        start2, end2 = range2
        return not (end1 <= start2 or end2 <= start1)
