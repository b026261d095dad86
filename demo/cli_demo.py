#!/usr/bin/env python3
"""
Interactive CLI demo for entity format resolution.

Pushes each message through the default pipeline (entity detection followed
by format conversion) against the configured mirror node and prints the
rewritten message.

Commands:
  :prefer <class>=<format>   set a tool preference, e.g. ':prefer topic=hrl'
  :clear                     drop all preferences
  :convert <entity> <format> convert a single entity, e.g. ':convert 0.0.123 hrl'
"""
import asyncio
import logging
import sys
import uuid

from dotenv import load_dotenv

# Imports assume PYTHONPATH=src is set (e.g., PYTHONPATH=src python demo/cli_demo.py)
from entity_resolution import (
    ConversionContext,
    EntityFormat,
    EntityResolutionError,
    EntityResolutionPreferences,
    ResolutionContextBuilder,
    ToolMetadata,
    create_default_pipeline,
    create_default_registry,
    load_config_from_env,
)

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


def print_banner(network_type):
    """Print welcome banner."""
    print("\n" + "=" * 60)
    print("  Entity Resolution - Interactive CLI Demo")
    print("=" * 60)
    print(f"\nNetwork: {network_type}")
    print("Type a message containing entity ids (e.g. 'mint topic 0.0.6624800').")
    print("  :prefer topic=hrl    prefer HRLs for topic references")
    print("  :clear               drop preferences")
    print("  :convert <id> <fmt>  convert one entity")
    print("\nType 'quit' or 'exit' to end the session.")
    print("-" * 60 + "\n")


def print_result(result):
    """Print formatted pipeline result."""
    print(f"\n💬 Message: {result.message}")

    for entity in result.entities:
        entity_type = entity.type.value if entity.type else "unknown"
        print(f"🔎 {entity.value} @ {entity.position}: {entity_type} ({entity.confidence:.2f})")

    for conversion in result.conversions:
        print(f"🔁 {conversion['original']} → {conversion['converted']}")

    print("-" * 60)


def parse_preference(argument, preferences):
    """Apply 'class=format' to a preference dict; returns the updated dict."""
    key, _, value = argument.partition("=")
    if not key or not value:
        raise ValueError("Usage: :prefer <class>=<format>")
    updated = dict(preferences)
    updated[key.strip()] = value.strip()
    # Validates key/value combinations
    EntityResolutionPreferences(**updated)
    return updated


async def run_session(config):
    """Main interactive loop."""
    registry = create_default_registry(config)
    pipeline = create_default_pipeline(registry)
    session_id = str(uuid.uuid4())
    preferences = {}

    while True:
        try:
            query = input("You: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\n👋 Goodbye!\n")
            break

        if not query:
            continue

        if query.lower() in ['quit', 'exit', 'q']:
            print("\n👋 Goodbye!\n")
            break

        if query.startswith(":prefer "):
            try:
                preferences = parse_preference(query[len(":prefer "):], preferences)
                print(f"✅ Preferences: {preferences}")
            except ValueError as e:
                print(f"❌ {e}")
            continue

        if query == ":clear":
            preferences = {}
            print("✅ Preferences cleared")
            continue

        if query.startswith(":convert "):
            parts = query.split()
            if len(parts) != 3:
                print("❌ Usage: :convert <entity> <format>")
                continue
            try:
                converted = await registry.convert_entity(
                    parts[1],
                    EntityFormat(parts[2]),
                    ConversionContext(network_type=config.network_type, session_id=session_id),
                )
                print(f"🔁 {parts[1]} → {converted}")
            except (ValueError, EntityResolutionError) as e:
                print(f"❌ {e}")
            continue

        context = ResolutionContextBuilder.from_message(query, session_id, config.network_type)
        if preferences:
            context = ResolutionContextBuilder.with_tool_context(context, ToolMetadata(
                name="cli-demo",
                entity_resolution_preferences=EntityResolutionPreferences(**preferences),
            ))

        try:
            result = await pipeline.process(query, context)
            print_result(result)
        except Exception as e:
            logger.exception("Resolution failed")
            print(f"\n❌ Error: {e}")
            print("-" * 60)


def main():
    """Entry point."""
    try:
        config = load_config_from_env()
    except EntityResolutionError as e:
        print(f"\n❌ Invalid configuration: {e}")
        return 1

    print_banner(config.network_type)
    asyncio.run(run_session(config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
