"""
Construction-time validation of collector configuration.

Filters a raw capability list and a raw discovery map down to entries the
collector can use. Nothing here raises for a bad entry: invalid entries are
dropped, recorded on the result, and logged at debug level.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .host import TypeHost
from .specs import (
    DiscoveryFunctionSpec,
    DiscoveryMap,
    DropKind,
    DroppedEntry,
    ValidatedConfiguration,
)

logger = logging.getLogger(__name__)


def is_valid_discovery_function(spec: DiscoveryFunctionSpec) -> bool:
    """
    Check whether a registration can be used as a discovery source.

    A valid discovery function is public, type-level, needs no arguments,
    and declares an iterable result.
    """
    return (
        spec.is_public
        and spec.is_static
        and spec.required_parameters == 0
        and spec.returns_iterable
    )


def _rejection_reason(spec: DiscoveryFunctionSpec | None) -> str | None:
    if spec is None:
        return "not declared on capability"
    if not spec.is_public:
        return "not public"
    if not spec.is_static:
        return "not a static or class method"
    if spec.required_parameters:
        return f"requires {spec.required_parameters} argument(s)"
    if not spec.returns_iterable:
        return "does not declare an iterable return type"
    return None


def _drop(
    dropped: list[DroppedEntry],
    kind: DropKind,
    name: Any,
    reason: str,
    owner: str | None = None,
) -> None:
    entry = DroppedEntry(kind=kind, name=str(name), owner=owner, reason=reason)
    logger.debug("Dropping %s %r (%s): %s", kind.value, entry.name, owner or "-", reason)
    dropped.append(entry)


def _filter_targets(
    host: TypeHost,
    targets: Iterable[Any],
    owner: str,
    dropped: list[DroppedEntry],
) -> list[str]:
    kept: list[str] = []
    for target in targets:
        if not isinstance(target, str):
            _drop(dropped, DropKind.TARGET, target, "not a string", owner)
        elif not host.exists(target):
            _drop(dropped, DropKind.TARGET, target, "type does not exist", owner)
        else:
            kept.append(target)
    return kept


def filter_capabilities(
    host: TypeHost,
    capabilities: Iterable[Any],
    dropped: list[DroppedEntry] | None = None,
) -> list[str]:
    """
    Keep existing capability tags, in order, first occurrence only.

    Args:
        host: Type host used for existence checks
        capabilities: Raw candidate capability names
        dropped: Optional list collecting dropped entries

    Returns:
        Sanitised capability list
    """
    dropped = dropped if dropped is not None else []
    kept: list[str] = []
    for capability in capabilities:
        if not isinstance(capability, str):
            _drop(dropped, DropKind.CAPABILITY, capability, "not a string")
        elif capability in kept:
            _drop(dropped, DropKind.CAPABILITY, capability, "duplicate")
        elif not host.exists(capability):
            _drop(dropped, DropKind.CAPABILITY, capability, "type does not exist")
        else:
            kept.append(capability)
    return kept


def filter_discovery_map(
    host: TypeHost,
    discovery_map: Mapping[Any, Any],
    dropped: list[DroppedEntry] | None = None,
) -> DiscoveryMap:
    """
    Keep well-formed discovery entries.

    A capability survives if it exists and at least one of its functions
    survives. A function survives if its registration is valid and at least
    one of its target tags exists.

    Args:
        host: Type host used for existence checks and registration descriptors
        discovery_map: Raw capability -> function -> targets mapping
        dropped: Optional list collecting dropped entries

    Returns:
        Sanitised discovery map, in the input's order
    """
    dropped = dropped if dropped is not None else []
    result: DiscoveryMap = {}

    for capability, functions in discovery_map.items():
        if not isinstance(capability, str):
            _drop(dropped, DropKind.DISCOVERY_CAPABILITY, capability, "not a string")
            continue
        if not host.exists(capability):
            _drop(dropped, DropKind.DISCOVERY_CAPABILITY, capability, "type does not exist")
            continue
        if not isinstance(functions, Mapping):
            _drop(
                dropped, DropKind.DISCOVERY_CAPABILITY, capability, "functions are not a mapping"
            )
            continue

        kept: dict[str, list[str]] = {}
        for name, targets in functions.items():
            if not isinstance(name, str):
                _drop(dropped, DropKind.DISCOVERY_FUNCTION, name, "not a string", capability)
                continue

            reason = _rejection_reason(host.describe(capability, name))
            if reason is None and (isinstance(targets, str) or not isinstance(targets, Iterable)):
                reason = "targets are not a list"
            if reason is not None:
                _drop(dropped, DropKind.DISCOVERY_FUNCTION, name, reason, capability)
                continue

            valid_targets = _filter_targets(host, targets, f"{capability}.{name}", dropped)
            if not valid_targets:
                _drop(dropped, DropKind.DISCOVERY_FUNCTION, name, "no valid targets", capability)
                continue
            kept[name] = valid_targets

        if not kept:
            _drop(
                dropped,
                DropKind.DISCOVERY_CAPABILITY,
                capability,
                "no valid discovery functions",
            )
            continue
        result[capability] = kept

    return result


def validate_configuration(
    discovery_map: Mapping[Any, Any],
    capabilities: Iterable[Any],
    host: TypeHost,
) -> ValidatedConfiguration:
    """
    Sanitise a collector configuration against a host.

    Args:
        discovery_map: Raw capability -> function -> targets mapping
        capabilities: Raw capability list, in priority order
        host: Type host answering existence and registration questions

    Returns:
        ValidatedConfiguration with the kept entries and a record of drops
    """
    dropped: list[DroppedEntry] = []
    filtered_map = filter_discovery_map(host, discovery_map, dropped)
    filtered_capabilities = filter_capabilities(host, capabilities, dropped)

    if dropped:
        logger.info("Dropped %d invalid configuration entries", len(dropped))

    return ValidatedConfiguration(
        capabilities=filtered_capabilities,
        discovery_map=filtered_map,
        dropped=dropped,
    )
