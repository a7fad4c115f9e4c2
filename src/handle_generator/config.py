"""
Configuration for a conversion run.

Supports both environment-based (.env) and programmatic configuration.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .types import UrlSource


_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip().lower() in _TRUE_VALUES


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass
class ConversionOptions:
    """
    Options recognized by the record transformer.

    Attributes:
        prefix: Handle prefix substituted into every command (required)
        use_guid: Take the target URL from ``guid`` instead of ``link``
        add_delete: Emit a delete command before each create block
        filter: Regular expression the whole handle must match
        commands_file: Alternative command template file
        max_items: Ceiling on selected items per run (None = unlimited)
        max_input_bytes: Ceiling on input document size (None = unlimited)
    """

    prefix: Optional[str] = None
    use_guid: bool = False
    add_delete: bool = False
    filter: Optional[str] = None
    commands_file: Optional[str] = None
    max_items: Optional[int] = None
    max_input_bytes: Optional[int] = None

    @property
    def url_source(self) -> UrlSource:
        return UrlSource.GUID if self.use_guid else UrlSource.LINK

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'ConversionOptions':
        """
        Create options from a dictionary.

        Example:
            >>> options = ConversionOptions.from_dict({
            ...     'prefix': '20.500.12345',
            ...     'use_guid': True
            ... })
        """
        return cls(**config_dict)

    @classmethod
    def from_env(cls, **overrides: Any) -> 'ConversionOptions':
        """
        Load options from environment variables (.env file).

        Recognized variables: HANDLE_PREFIX, HANDLE_USE_GUID,
        HANDLE_ADD_DELETE, HANDLE_FILTER, HANDLE_COMMANDS_FILE,
        HANDLE_MAX_ITEMS, HANDLE_MAX_INPUT_BYTES.

        Keyword overrides that are not None take precedence over the
        environment.

        Raises:
            ValueError: If a numeric variable is not an integer
        """
        load_dotenv()

        values = {
            "prefix": os.environ.get("HANDLE_PREFIX") or None,
            "use_guid": _env_flag("HANDLE_USE_GUID"),
            "add_delete": _env_flag("HANDLE_ADD_DELETE"),
            "filter": os.environ.get("HANDLE_FILTER") or None,
            "commands_file": os.environ.get("HANDLE_COMMANDS_FILE") or None,
            "max_items": _env_int("HANDLE_MAX_ITEMS"),
            "max_input_bytes": _env_int("HANDLE_MAX_INPUT_BYTES"),
        }
        for key, value in overrides.items():
            if key not in values:
                raise TypeError(f"Unknown option: {key}")
            if value is not None:
                values[key] = value

        return cls(**{key: value for key, value in values.items() if value is not None})

    def with_changes(self, **changes: Any) -> 'ConversionOptions':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def __repr__(self) -> str:
        return (
            f"ConversionOptions(prefix={self.prefix!r}, "
            f"url_source={self.url_source.value}, "
            f"add_delete={self.add_delete}, filter={self.filter!r}, "
            f"commands_file={self.commands_file!r}, "
            f"limits={self.max_items} items/{self.max_input_bytes} bytes)"
        )
