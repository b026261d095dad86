"""
Converts topic ids to HRL format for consensus service references.
"""
from ...exceptions import ConversionFailedError
from ...network.hrl import HRL
from ..types import ConversionContext, EntityFormat, FormatConverter, is_ledger_id

NETWORK_CODES = {
    "mainnet": "0",
    "testnet": "1",
}
NON_PRODUCTION_CODE = "1"


def network_code(network_type: str) -> str:
    """Map a network name to its locator code; unknown networks use the non-production code."""
    return NETWORK_CODES.get((network_type or "").lower(), NON_PRODUCTION_CODE)


class TopicIdToHrlConverter(FormatConverter):
    """``0.0.x`` → ``hcs://<network code>/0.0.x``. Pure, no I/O."""
    
    source_format = EntityFormat.TOPIC_ID
    target_format = EntityFormat.HRL
    
    def can_convert(self, source: str, context: ConversionContext) -> bool:
        return is_ledger_id(source)
    
    async def convert(self, source: str, context: ConversionContext) -> str:
        if not is_ledger_id(source):
            raise ConversionFailedError(f"Not a topic id: {source!r}")
        return str(HRL(standard=network_code(context.network_type), topic_id=source))
