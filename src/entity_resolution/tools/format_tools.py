import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from pydantic import BaseModel, Field
from langchain_core.tools import BaseTool

from ..exceptions import InadmissibleEntityError, NoConverterError
from ..formatters.registry import FormatConverterRegistry
from ..formatters.types import DEFAULT_NETWORK, ConversionContext, EntityFormat

logger = logging.getLogger(__name__)


def _run_sync(coroutine):
    """Run a coroutine to completion from synchronous code, even inside a running event loop."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coroutine)
    # A running loop cannot be re-entered; use a worker thread with its own loop
    with ThreadPoolExecutor(max_workers=1) as executor:
        return executor.submit(asyncio.run, coroutine).result()


class ConvertEntityFormatArgs(BaseModel):
    entity: str = Field(description="Entity reference to convert (e.g. 0.0.12345, content-ref:0.0.12345)")
    target_format: EntityFormat = Field(description="Desired format, e.g. 'hrl' or 'topicId'")
    network_type: Optional[str] = Field(default=None, description="Ledger network (mainnet, testnet)")


class DetectEntityFormatArgs(BaseModel):
    entity: str = Field(description="Entity reference whose format should be detected")
    network_type: Optional[str] = Field(default=None, description="Ledger network (mainnet, testnet)")


class _BaseFormatTool(BaseTool):
    """Shared registry wiring for the format tools."""

    registry: Any = Field(default=None)
    network_type: str = Field(default=DEFAULT_NETWORK)

    def __init__(self, registry: FormatConverterRegistry, network_type: str = DEFAULT_NETWORK, **kwargs):
        super().__init__(**kwargs)
        self.registry = registry
        self.network_type = network_type

    def _context(self, network_type: Optional[str]) -> ConversionContext:
        return ConversionContext(network_type=network_type or self.network_type, tool_name=self.name)


class ConvertEntityFormatTool(_BaseFormatTool):
    name: str = "convert_entity_format"
    description: str = (
        "Convert a ledger entity reference into another format, e.g. a topic id "
        "into its HRL (hcs://<n>/<topic id>). Returns the input unchanged when it "
        "cannot be converted."
    )
    args_schema: type[BaseModel] = ConvertEntityFormatArgs

    def _run(self, entity: str, target_format: EntityFormat, network_type: Optional[str] = None) -> str:
        return _run_sync(self._arun(entity, target_format, network_type))

    async def _arun(self, entity: str, target_format: EntityFormat, network_type: Optional[str] = None) -> str:
        try:
            return await self.registry.convert_entity(
                entity, EntityFormat(target_format), self._context(network_type)
            )
        except (NoConverterError, InadmissibleEntityError) as e:
            logger.warning(f"{self.name}: returning {entity} unchanged: {e}")
            return entity


class DetectEntityFormatTool(_BaseFormatTool):
    name: str = "detect_entity_format"
    description: str = (
        "Detect what a ledger entity reference is: accountId, tokenId, topicId, "
        "contractId, hrl, or any when unknown."
    )
    args_schema: type[BaseModel] = DetectEntityFormatArgs

    def _run(self, entity: str, network_type: Optional[str] = None) -> str:
        return _run_sync(self._arun(entity, network_type))

    async def _arun(self, entity: str, network_type: Optional[str] = None) -> str:
        detected = await self.registry.detect_entity_format(entity, self._context(network_type))
        return detected.value
