"""
Factories for composing the default registry and pipeline.
"""
import time
from typing import Callable, Optional

from .config import ResolutionConfig
from .formatters.converters import StringNormalizationConverter, TopicIdToHrlConverter
from .formatters.registry import FormatConverterRegistry
from .network.mirror_node import EntityProbeClient, MirrorNodeClient
from .resolution.pipeline import ResolutionPipeline
from .resolution.stages import EntityDetectionStage, FormatConversionStage


def mirror_client_factory(config: ResolutionConfig) -> Callable[[str], EntityProbeClient]:
    """
    Build a network-name → MirrorNodeClient factory from config.
    
    An explicit MIRROR_NODE_URL only applies to the configured network.
    """
    def build(network_type: str) -> EntityProbeClient:
        base_url = config.mirror_node_url if network_type == config.network_type else None
        return MirrorNodeClient(
            network_type=network_type,
            base_url=base_url,
            timeout_seconds=config.http_timeout_seconds,
            retry_attempts=config.http_retry_attempts,
            retry_max_delay_seconds=config.http_retry_max_delay_seconds,
        )
    return build


def create_default_registry(
    config: Optional[ResolutionConfig] = None,
    client_factory: Optional[Callable[[str], EntityProbeClient]] = None,
    clock: Callable[[], float] = time.monotonic,
) -> FormatConverterRegistry:
    """
    Create a registry with the built-in converters.
    
    :param config: ResolutionConfig (defaults used when omitted)
    :param client_factory: Probe client factory; mirror node clients built from config by default
    :param clock: Time source for the detection cache
    :return: FormatConverterRegistry with TOPIC_ID → HRL and ANY → HRL registered
    """
    config = config or ResolutionConfig()
    client_factory = client_factory or mirror_client_factory(config)
    
    registry = FormatConverterRegistry(
        client_factory=client_factory,
        cache_ttl_seconds=config.cache_ttl_seconds,
        clock=clock,
    )
    registry.register(TopicIdToHrlConverter())
    registry.register(StringNormalizationConverter(
        client_factory=client_factory,
        default_standard=config.default_hrl_standard,
    ))
    return registry


def create_default_pipeline(registry: FormatConverterRegistry) -> ResolutionPipeline:
    """Entity detection followed by format conversion, both backed by ``registry``."""
    pipeline = ResolutionPipeline()
    pipeline.add_stage(EntityDetectionStage(registry))
    pipeline.add_stage(FormatConversionStage(registry))
    return pipeline
