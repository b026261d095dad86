from .format_tools import (
    ConvertEntityFormatTool,
    DetectEntityFormatTool,
    ConvertEntityFormatArgs,
    DetectEntityFormatArgs,
)

__all__ = [
    "ConvertEntityFormatTool",
    "DetectEntityFormatTool",
    "ConvertEntityFormatArgs",
    "DetectEntityFormatArgs",
]
