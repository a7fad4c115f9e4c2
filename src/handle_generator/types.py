"""Core type definitions for the Handle Generator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, Dict, List, Optional, Tuple


HANDLE_KEY = "handle"


class ErrorType(Enum):
    """Enumeration of error types."""
    PARSE = "parse"
    PATTERN = "pattern"
    TEMPLATE = "template"
    SUBSTITUTION = "substitution"
    CONFIGURATION = "configuration"
    LIMIT = "limit"
    IO = "io"


class UrlSource(Enum):
    """Element an item's target URL is taken from."""
    LINK = "link"
    GUID = "guid"


@dataclass
class ExportItem:
    """
    One exported entry of the blog export.

    Metadata is kept as ordered (key, value) pairs because the export
    format allows the same key to appear more than once.
    """
    link: str
    guid: str
    metadata: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def handle(self) -> Optional[str]:
        """Value of the first metadata entry keyed ``handle``."""
        for key, value in self.metadata:
            if key == HANDLE_KEY:
                return value
        return None

    def url_for(self, source: UrlSource) -> str:
        return self.guid if source is UrlSource.GUID else self.link


@dataclass
class RenderContext:
    """Placeholder values used to render one item's commands."""
    prefix: str
    handle: str
    url: str

    def as_mapping(self) -> Dict[str, str]:
        return {"prefix": self.prefix, "handle": self.handle, "url": self.url}


@dataclass
class TransformResult:
    """Result of a transform run."""
    items_selected: int = 0
    items_emitted: int = 0
    items_filtered: int = 0
    items_skipped: int = 0
    lines_written: int = 0


@dataclass
class ValidationError:
    """Validation error details."""
    type: ErrorType
    message: str
    location: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of input validation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[str]


@dataclass
class ErrorResponse:
    """Response for error handling."""
    error_type: ErrorType
    message: str
    suggested_action: str


class HandleGeneratorError(Exception):
    """Base exception for handle generator failures."""

    def __init__(self, message: str, error_type: ErrorType, context: Optional[Any] = None):
        super().__init__(message)
        self.error_type = error_type
        self.context = context


class ConversionError(HandleGeneratorError):
    """
    Raised when a transform run fails.

    The underlying exception, if any, is chained as ``__cause__`` and
    also exposed through :attr:`cause`.
    """

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__


class TemplateError(HandleGeneratorError):
    """Raised when the command template resource is missing or invalid."""

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message, ErrorType.TEMPLATE, context)


# Abstract base classes for interfaces

class RecordTransformerInterface(ABC):
    """Abstract interface for the record transformer."""

    @abstractmethod
    def transform(self, input_stream: BinaryIO, output_stream: BinaryIO,
                  options: Optional[Any] = None) -> TransformResult:
        """Render the batch commands for every selected item of the export."""
        pass
