"""
capwalk - capability-driven type discovery.

Walks a type universe from seed identifiers, emitting every type that
satisfies a capability and following discovery functions registered on
capabilities to find more.
"""

from __future__ import annotations

from ._version import get_version
from .core import (
    CapwalkError,
    ConfigError,
    DeclaredTypeHost,
    DiscoveryError,
    HostError,
    InterfaceCollector,
    PythonTypeHost,
    Traversal,
    TypeHost,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "InterfaceCollector",
    "Traversal",
    "TypeHost",
    "PythonTypeHost",
    "DeclaredTypeHost",
    "CapwalkError",
    "ConfigError",
    "HostError",
    "DiscoveryError",
]
