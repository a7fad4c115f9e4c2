"""
Handle Generator - Handle batch files from blog exports.

Reads a WordPress-style XML export and writes the Handle service batch
commands that register every item carrying a ``handle`` annotation.
"""

__version__ = "1.0.0"

from .config import ConversionOptions
from .record_transformer import RecordTransformer
from .templates import CommandSet, get_command_set, load_command_set
from .types import ConversionError, ErrorType, ExportItem, TemplateError, TransformResult

__all__ = [
    "RecordTransformer",
    "ConversionOptions",
    "CommandSet",
    "get_command_set",
    "load_command_set",
    "ConversionError",
    "TemplateError",
    "ErrorType",
    "ExportItem",
    "TransformResult",
]
