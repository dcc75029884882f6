"""
capwalk core: collector, hosts, validation, and manifests.
"""

from .collector import InterfaceCollector, Traversal
from .errors import CapwalkError, ConfigError, DiscoveryError, HostError
from .host import DeclaredTypeHost, PythonTypeHost, TypeHost, identifier_of
from .manifest import CollectorManifest, build_collector, build_host, load_manifest
from .specs import (
    DiscoveryFunctionSpec,
    DiscoveryMap,
    DropKind,
    DroppedEntry,
    TypeDeclaration,
    ValidatedConfiguration,
)
from .validator import (
    filter_capabilities,
    filter_discovery_map,
    is_valid_discovery_function,
    validate_configuration,
)

__all__ = [
    "InterfaceCollector",
    "Traversal",
    "TypeHost",
    "PythonTypeHost",
    "DeclaredTypeHost",
    "identifier_of",
    "CollectorManifest",
    "load_manifest",
    "build_host",
    "build_collector",
    "DiscoveryFunctionSpec",
    "DiscoveryMap",
    "DropKind",
    "DroppedEntry",
    "TypeDeclaration",
    "ValidatedConfiguration",
    "is_valid_discovery_function",
    "filter_capabilities",
    "filter_discovery_map",
    "validate_configuration",
    "CapwalkError",
    "ConfigError",
    "HostError",
    "DiscoveryError",
]
