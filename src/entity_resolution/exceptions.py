class EntityResolutionError(Exception):
    """Base exception for entity format resolution."""


class ConfigurationError(EntityResolutionError):
    """Raised when configuration is missing or invalid."""


class NoConverterError(EntityResolutionError):
    """Raised when no converter is registered for a source/target pair."""

    def __init__(self, source_format, target_format):
        self.source_format = source_format
        self.target_format = target_format
        super().__init__(
            f"No converter found for {_format_name(source_format)} → {_format_name(target_format)}"
        )


class InadmissibleEntityError(EntityResolutionError):
    """Raised when a converter rejects the entity it was asked to convert."""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"Converter cannot handle entity: {entity}")


class ConversionFailedError(EntityResolutionError):
    """Raised by a converter when the conversion cannot be completed."""


class ReferenceResolutionError(EntityResolutionError):
    """Raised when a locator reference cannot be resolved to its topic."""


def _format_name(value) -> str:
    return getattr(value, "value", value)
