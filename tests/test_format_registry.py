"""
Tests for the format converter registry: conversion, detection and caching.
"""
import asyncio

import pytest

from entity_resolution.exceptions import InadmissibleEntityError, NoConverterError
from entity_resolution.formatters import (
    ConversionContext,
    EntityFormat,
    FormatConverter,
    FormatConverterRegistry,
    TopicIdToHrlConverter,
)

TOPIC_ID = "0.0.6624800"
UNKNOWN_ID = "0.0.99999999"


class RecordingConverter(FormatConverter):
    """Converter double that records calls."""

    def __init__(self, source, target, result="converted", admissible=True, error=None):
        self.source_format = source
        self.target_format = target
        self.result = result
        self.admissible = admissible
        self.error = error
        self.convert_calls = []

    def can_convert(self, source, context):
        return self.admissible

    async def convert(self, source, context):
        self.convert_calls.append(source)
        if self.error is not None:
            raise self.error
        return self.result


def make_registry(client, clock=None, ttl=300.0):
    kwargs = {"client_factory": lambda network: client, "cache_ttl_seconds": ttl}
    if clock is not None:
        kwargs["clock"] = clock
    return FormatConverterRegistry(**kwargs)


class TestConverterGraph:
    """Tests for converter registration and lookup."""

    def test_register_and_find(self, topic_client):
        """Test that a registered converter is found by its edge."""
        registry = make_registry(topic_client)
        converter = TopicIdToHrlConverter()

        registry.register(converter)

        assert registry.find_converter(EntityFormat.TOPIC_ID, EntityFormat.HRL) is converter
        assert registry.has_converter(EntityFormat.TOPIC_ID, EntityFormat.HRL)

    def test_edges_are_directed(self, topic_client):
        """Test that registering A→B does not enable B→A."""
        registry = make_registry(topic_client)
        registry.register(TopicIdToHrlConverter())

        assert registry.find_converter(EntityFormat.HRL, EntityFormat.TOPIC_ID) is None
        assert not registry.has_converter(EntityFormat.HRL, EntityFormat.TOPIC_ID)

    def test_second_registration_replaces_first(self, topic_client):
        """Test that the last registration for an edge wins."""
        registry = make_registry(topic_client)
        first = RecordingConverter(EntityFormat.TOPIC_ID, EntityFormat.HRL)
        second = RecordingConverter(EntityFormat.TOPIC_ID, EntityFormat.HRL)

        registry.register(first)
        registry.register(second)

        assert registry.find_converter(EntityFormat.TOPIC_ID, EntityFormat.HRL) is second
        assert len(registry.get_registered_converters()) == 1

    def test_get_registered_converters_lists_edges(self, topic_client):
        """Test that registered edges are reported as (source, target) pairs."""
        registry = make_registry(topic_client)
        registry.register(TopicIdToHrlConverter())
        registry.register(RecordingConverter(EntityFormat.TOKEN_ID, EntityFormat.SYMBOL))

        edges = registry.get_registered_converters()

        assert (EntityFormat.TOPIC_ID, EntityFormat.HRL) in edges
        assert (EntityFormat.TOKEN_ID, EntityFormat.SYMBOL) in edges

    def test_clear_removes_converters(self, topic_client):
        """Test that clear empties the converter graph."""
        registry = make_registry(topic_client)
        registry.register(TopicIdToHrlConverter())

        registry.clear()

        assert registry.get_registered_converters() == []


class TestConvertEntity:
    """Tests for convert_entity."""

    @pytest.mark.asyncio
    async def test_topic_id_to_hrl_testnet(self, topic_client):
        """Test topic id conversion on testnet."""
        registry = make_registry(topic_client)
        registry.register(TopicIdToHrlConverter())

        result = await registry.convert_entity(
            TOPIC_ID, EntityFormat.HRL, ConversionContext(network_type="testnet")
        )

        assert result == "hcs://1/0.0.6624800"

    @pytest.mark.asyncio
    async def test_topic_id_to_hrl_mainnet(self, make_client):
        """Test topic id conversion on mainnet."""
        registry = make_registry(make_client(topics=[TOPIC_ID]))
        registry.register(TopicIdToHrlConverter())

        result = await registry.convert_entity(
            TOPIC_ID, EntityFormat.HRL, ConversionContext(network_type="mainnet")
        )

        assert result == "hcs://0/0.0.6624800"

    @pytest.mark.asyncio
    async def test_same_format_is_noop(self, topic_client):
        """Test that an entity already in the target format is returned untouched."""
        registry = make_registry(topic_client)
        converter = RecordingConverter(EntityFormat.HRL, EntityFormat.HRL)
        registry.register(converter)

        result = await registry.convert_entity("hcs://1/0.0.42", EntityFormat.HRL)

        assert result == "hcs://1/0.0.42"
        assert converter.convert_calls == []
        assert topic_client.calls == []

    @pytest.mark.asyncio
    async def test_detected_id_in_target_format_is_noop(self, topic_client):
        """Test that a topic id requested as topic id needs no converter."""
        registry = make_registry(topic_client)

        outcome = await registry.convert_entity_traced(TOPIC_ID, EntityFormat.TOPIC_ID)

        assert outcome.converted_value == TOPIC_ID
        assert outcome.converter_name is None
        assert not outcome.changed

    @pytest.mark.asyncio
    async def test_missing_converter_names_both_formats(self, topic_client):
        """Test that a missing edge raises NoConverterError naming source and target."""
        registry = make_registry(topic_client)

        with pytest.raises(NoConverterError) as exc_info:
            await registry.convert_entity(TOPIC_ID, EntityFormat.HRL)

        assert "topicId" in str(exc_info.value)
        assert "hrl" in str(exc_info.value)
        assert exc_info.value.source_format == EntityFormat.TOPIC_ID
        assert exc_info.value.target_format == EntityFormat.HRL

    @pytest.mark.asyncio
    async def test_inadmissible_entity(self, topic_client):
        """Test that a converter rejecting the entity raises InadmissibleEntityError."""
        registry = make_registry(topic_client)
        converter = RecordingConverter(EntityFormat.TOPIC_ID, EntityFormat.HRL, admissible=False)
        registry.register(converter)

        with pytest.raises(InadmissibleEntityError, match="0.0.6624800"):
            await registry.convert_entity(TOPIC_ID, EntityFormat.HRL)

        assert converter.convert_calls == []

    @pytest.mark.asyncio
    async def test_converter_error_propagates_unchanged(self, topic_client):
        """Test that converter exceptions are not wrapped."""
        registry = make_registry(topic_client)
        error = RuntimeError("ledger exploded")
        registry.register(RecordingConverter(EntityFormat.TOPIC_ID, EntityFormat.HRL, error=error))

        with pytest.raises(RuntimeError) as exc_info:
            await registry.convert_entity(TOPIC_ID, EntityFormat.HRL)

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_traced_conversion_reports_provenance(self, topic_client):
        """Test that traced conversions report source format and converter."""
        registry = make_registry(topic_client)
        registry.register(TopicIdToHrlConverter())

        outcome = await registry.convert_entity_traced(TOPIC_ID, EntityFormat.HRL)

        assert outcome.source_format == EntityFormat.TOPIC_ID
        assert outcome.converter_name == "TopicIdToHrlConverter"
        assert outcome.changed


class TestFormatDetection:
    """Tests for format detection via network probes."""

    @pytest.mark.asyncio
    async def test_hrl_detected_without_probes(self, topic_client):
        """Test that HRL syntax short-circuits detection."""
        registry = make_registry(topic_client)

        result = await registry.detect_entity_format("hcs://1/0.0.6624800")

        assert result == EntityFormat.HRL
        assert topic_client.calls == []

    @pytest.mark.asyncio
    async def test_non_id_shape_is_any_without_probes(self, topic_client):
        """Test that strings that are not ledger ids are not probed."""
        registry = make_registry(topic_client)

        for value in ["hello", "0.0.12abc", " 0.0.5", "content-ref:0.0.5"]:
            assert await registry.detect_entity_format(value) == EntityFormat.ANY

        assert topic_client.calls == []
        assert len(registry.cache) == 0

    @pytest.mark.asyncio
    async def test_probes_every_namespace(self, topic_client):
        """Test that all four namespaces are probed."""
        registry = make_registry(topic_client)

        result = await registry.detect_entity_format(TOPIC_ID)

        assert result == EntityFormat.TOPIC_ID
        assert sorted(method for method, _ in topic_client.calls) == [
            "get_account_balance",
            "get_contract_info",
            "get_token_info",
            "get_topic_info",
        ]

    @pytest.mark.asyncio
    async def test_priority_order_breaks_ties(self, make_client):
        """Test that account beats token, topic and contract when several match."""
        client = make_client(accounts=["0.0.7"], tokens=["0.0.7"], topics=["0.0.7"], contracts=["0.0.7"])
        registry = make_registry(client)

        assert await registry.detect_entity_format("0.0.7") == EntityFormat.ACCOUNT_ID

    @pytest.mark.asyncio
    async def test_token_beats_contract(self, make_client):
        """Test priority between later namespaces."""
        client = make_client(tokens=["0.0.8"], contracts=["0.0.8"])
        registry = make_registry(client)

        assert await registry.detect_entity_format("0.0.8") == EntityFormat.TOKEN_ID

    @pytest.mark.asyncio
    async def test_slow_positive_beats_fast_negative(self):
        """Test that detection waits for every probe instead of the first to finish."""

        class SlowTopicClient:
            async def get_account_balance(self, entity_id):
                return None

            async def get_token_info(self, entity_id):
                raise ConnectionError("flaky")

            async def get_topic_info(self, entity_id):
                await asyncio.sleep(0.05)
                return {"topic_id": entity_id}

            async def get_contract_info(self, entity_id):
                return None

        registry = make_registry(SlowTopicClient())

        assert await registry.detect_entity_format(TOPIC_ID) == EntityFormat.TOPIC_ID

    @pytest.mark.asyncio
    async def test_all_probes_failing_yields_any(self, failing_client):
        """Test that erroring probes degrade to ANY with nothing cached."""
        registry = make_registry(failing_client)

        result = await registry.detect_entity_format(UNKNOWN_ID)

        assert result == EntityFormat.ANY
        assert UNKNOWN_ID not in registry.cache
        assert len(registry.cache) == 0

    @pytest.mark.asyncio
    async def test_client_factory_failure_yields_any(self):
        """Test that a failure before probing still degrades to ANY."""
        def broken_factory(network):
            raise RuntimeError("no client")

        registry = FormatConverterRegistry(client_factory=broken_factory)

        assert await registry.detect_entity_format(TOPIC_ID) == EntityFormat.ANY

    @pytest.mark.asyncio
    async def test_probes_use_context_network(self, topic_client):
        """Test that the probe client is built for the context's network."""
        networks = []

        def factory(network):
            networks.append(network)
            return topic_client

        registry = FormatConverterRegistry(client_factory=factory)
        await registry.detect_entity_format(TOPIC_ID, ConversionContext(network_type="mainnet"))

        assert networks == ["mainnet"]


class TestDetectionCache:
    """Tests for detection cache polarity and TTL."""

    @pytest.mark.asyncio
    async def test_positive_detection_is_cached(self, topic_client, clock):
        """Test that a repeated lookup within the TTL does not re-probe."""
        registry = make_registry(topic_client, clock=clock)

        await registry.detect_entity_format(TOPIC_ID)
        probes_after_first = len(topic_client.calls)
        clock.advance(299)
        result = await registry.detect_entity_format(TOPIC_ID)

        assert result == EntityFormat.TOPIC_ID
        assert len(topic_client.calls) == probes_after_first

    @pytest.mark.asyncio
    async def test_unknown_detection_is_not_cached(self, make_client):
        """Test that ANY results re-probe on every call."""
        client = make_client()
        registry = make_registry(client)

        await registry.detect_entity_format(UNKNOWN_ID)
        await registry.detect_entity_format(UNKNOWN_ID)

        assert len(client.calls) == 8
        assert len(registry.cache) == 0

    @pytest.mark.asyncio
    async def test_unknown_entity_self_heals(self, make_client):
        """Test that an entity unknown at first is detected once it exists."""
        client = make_client()
        registry = make_registry(client)

        assert await registry.detect_entity_format(TOPIC_ID) == EntityFormat.ANY
        client.topics.add(TOPIC_ID)
        assert await registry.detect_entity_format(TOPIC_ID) == EntityFormat.TOPIC_ID

    @pytest.mark.asyncio
    async def test_expired_entry_reprobes_once(self, topic_client, clock):
        """Test that advancing past the TTL triggers exactly one new probe round."""
        registry = make_registry(topic_client, clock=clock, ttl=300)

        await registry.detect_entity_format(TOPIC_ID)
        assert len(topic_client.calls) == 4

        clock.advance(301)
        await registry.detect_entity_format(TOPIC_ID)
        await registry.detect_entity_format(TOPIC_ID)

        assert len(topic_client.calls) == 8

    @pytest.mark.asyncio
    async def test_entry_expires_at_ttl_boundary(self, topic_client, clock):
        """Test that an entry exactly ttl old is no longer valid."""
        registry = make_registry(topic_client, clock=clock, ttl=300)

        await registry.detect_entity_format(TOPIC_ID)
        clock.advance(300)

        assert registry.cache.get(TOPIC_ID) is None
        assert TOPIC_ID not in registry.cache

    @pytest.mark.asyncio
    async def test_clear_cache_forces_reprobe(self, topic_client):
        """Test that clear_cache drops cached detections."""
        registry = make_registry(topic_client)

        await registry.detect_entity_format(TOPIC_ID)
        registry.clear_cache()
        await registry.detect_entity_format(TOPIC_ID)

        assert len(topic_client.calls) == 8
