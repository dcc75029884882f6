"""
Collector manifest (``capwalk.toml``) loading.

Example:

    [collector]
    capabilities = ["Pet", "Animal"]
    auto_reset = true

    [host]
    kind = "declared"          # or "python"
    search_paths = ["src"]     # python host only, relative to the manifest

    [discovery.Animal]
    siblings = ["Animal"]

    [types.Dog]                # declared host only
    satisfies = ["Pet", "Animal"]
    functions = { siblings = ["Cat", "Fish"] }
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .collector import InterfaceCollector
from .errors import HostError, make_config_error
from .host import DeclaredTypeHost, PythonTypeHost, TypeHost
from .specs import TypeDeclaration

logger = logging.getLogger(__name__)

MANIFEST_NAME = "capwalk.toml"
HOST_KINDS = ("declared", "python")


@dataclass
class HostConfig:
    """Which type host backs the collector."""

    kind: str = "declared"  # "declared" | "python"
    search_paths: list[Path] = field(default_factory=list)


@dataclass
class CollectorManifest:
    """Everything needed to build a collector."""

    path: Path
    capabilities: list[Any] = field(default_factory=list)
    discovery: dict[str, Any] = field(default_factory=dict)
    auto_reset: bool = True
    host: HostConfig = field(default_factory=HostConfig)
    types: list[TypeDeclaration] = field(default_factory=list)


def _expect(value: Any, kind: type, path: Path, key: str) -> Any:
    if not isinstance(value, kind):
        raise make_config_error(
            f"Expected {kind.__name__}, got {type(value).__name__}", file=path, key=key
        )
    return value


def _parse_types(data: dict[str, Any], path: Path) -> list[TypeDeclaration]:
    declarations = []
    for name, body in data.items():
        _expect(body, dict, path, f"types.{name}")
        try:
            declarations.append(TypeDeclaration(name=name, **body))
        except (PydanticValidationError, TypeError) as e:
            raise make_config_error(
                f"Invalid type declaration: {e}", file=path, key=f"types.{name}"
            )
    return declarations


def load_manifest(path: Path) -> CollectorManifest:
    """
    Load a collector manifest.

    Discovery entries and capability names are passed through unvalidated;
    the collector filters them against its host.

    Args:
        path: Path to the TOML manifest

    Returns:
        Parsed CollectorManifest

    Raises:
        ConfigError: If the file is missing, is not valid TOML, or a known key
            has the wrong type
    """
    path = Path(path)
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise make_config_error("Manifest not found", file=path)
    except OSError as e:
        raise make_config_error(f"Cannot read manifest: {e}", file=path)
    except tomllib.TOMLDecodeError as e:
        raise make_config_error(f"Invalid TOML: {e}", file=path)

    collector_data = _expect(data.get("collector", {}), dict, path, "collector")
    host_data = _expect(data.get("host", {}), dict, path, "host")
    discovery = _expect(data.get("discovery", {}), dict, path, "discovery")
    types_data = _expect(data.get("types", {}), dict, path, "types")

    capabilities = _expect(
        collector_data.get("capabilities", []), list, path, "collector.capabilities"
    )
    auto_reset = _expect(collector_data.get("auto_reset", True), bool, path, "collector.auto_reset")

    kind = _expect(host_data.get("kind", "declared"), str, path, "host.kind")
    search_paths = _expect(host_data.get("search_paths", []), list, path, "host.search_paths")
    host = HostConfig(
        kind=kind,
        search_paths=[
            path.parent / _expect(p, str, path, "host.search_paths") for p in search_paths
        ],
    )

    return CollectorManifest(
        path=path,
        capabilities=capabilities,
        discovery=discovery,
        auto_reset=auto_reset,
        host=host,
        types=_parse_types(types_data, path),
    )


def build_host(manifest: CollectorManifest) -> TypeHost:
    """
    Build the type host a manifest asks for.

    Raises:
        HostError: If the host kind is unknown or declarations conflict
    """
    kind = manifest.host.kind
    if kind == "declared":
        return DeclaredTypeHost(manifest.types)
    if kind == "python":
        if manifest.types:
            logger.warning("Ignoring [types] in %s: python host imports classes", manifest.path)
        return PythonTypeHost(search_paths=manifest.host.search_paths)
    raise HostError(f"Unknown host kind '{kind}'. Available kinds: {list(HOST_KINDS)}")


def build_collector(
    manifest: CollectorManifest,
    auto_reset: bool | None = None,
) -> InterfaceCollector:
    """
    Build a collector from a manifest.

    Args:
        manifest: Loaded manifest
        auto_reset: Overrides ``collector.auto_reset`` when given
    """
    return InterfaceCollector(
        manifest.discovery,
        manifest.capabilities,
        build_host(manifest),
        auto_reset=manifest.auto_reset if auto_reset is None else auto_reset,
    )
