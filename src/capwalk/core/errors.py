"""
Error types for capwalk manifests, hosts, and discovery invocation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class CapwalkError(Exception):
    """Base exception for all capwalk errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ConfigError(CapwalkError):
    """
    Raised when a collector manifest cannot be loaded.

    Examples:
    - Manifest file missing or unreadable
    - Invalid TOML syntax
    - Wrong value type for a known key
    """

    pass


class HostError(CapwalkError):
    """
    Raised when a type host cannot be built.

    Examples:
    - Unknown host kind in the manifest
    - Duplicate type declaration
    """

    pass


class DiscoveryError(CapwalkError):
    """
    Raised when a declared discovery function cannot be resolved on a type.

    Failures raised by user-supplied discovery functions are never wrapped
    in this type; they reach the consumer of the traversal unchanged.
    """

    pass


@dataclass
class ErrorContext:
    """
    Location of a configuration error.

    Attributes:
        file: Path to the manifest
        key: Optional dotted key inside the manifest (e.g. "discovery.Animal")
    """

    file: Path
    key: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "capwalk.toml [collector.capabilities]"
        """
        if self.key:
            return f"{self.file} [{self.key}]"
        return str(self.file)


def make_config_error(
    message: str,
    file: Path | None = None,
    key: str | None = None,
) -> ConfigError:
    """
    Helper to create a ConfigError with optional context.

    Args:
        message: Error description
        file: Optional manifest path
        key: Optional dotted key inside the manifest

    Returns:
        ConfigError with context if a file was provided
    """
    if file:
        return ConfigError(message, ErrorContext(file=file, key=key))
    return ConfigError(message)
