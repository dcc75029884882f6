"""
Descriptor types for capwalk.

This module contains the declarative models exchanged between hosts, the
configuration validator, and the collector: discovery function
registrations, declared types, and the validation result.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# capability tag -> discovery function name -> target capability tags
DiscoveryMap = dict[str, dict[str, list[str]]]


class DiscoveryFunctionSpec(BaseModel):
    """
    Registration descriptor for a discovery function on a capability.

    Hosts build these from whatever their type system exposes; the validator
    only ever looks at the descriptor.

    Attributes:
        capability: Capability tag the function is declared on
        name: Function name
        is_public: Function is part of the capability's public surface
        is_static: Function is callable on the type, without an instance
        required_parameters: Number of parameters without a default
        returns_iterable: Declared return type is an iterable of identifiers
    """

    capability: str
    name: str
    is_public: bool = True
    is_static: bool = True
    required_parameters: int = 0
    returns_iterable: bool = True

    model_config = ConfigDict(frozen=True)


class TypeDeclaration(BaseModel):
    """
    A type in a declared (in-memory) universe.

    Attributes:
        name: Identifier of the type
        satisfies: Direct supertypes / implemented capabilities, in order
        functions: Discovery functions and the identifiers each returns
    """

    name: str
    satisfies: list[str] = Field(default_factory=list)
    functions: dict[str, list[str]] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class DropKind(str, Enum):
    """What sort of configuration entry was dropped during validation."""

    CAPABILITY = "capability"
    DISCOVERY_CAPABILITY = "discovery_capability"
    DISCOVERY_FUNCTION = "discovery_function"
    TARGET = "target"


class DroppedEntry(BaseModel):
    """
    A configuration entry removed by the validator.

    Attributes:
        kind: Which part of the configuration the entry came from
        name: The offending name (stringified if it was not a string)
        owner: Capability or "capability.function" the entry belonged to
        reason: Human-readable explanation
    """

    kind: DropKind
    name: str
    owner: str | None = None
    reason: str

    model_config = ConfigDict(frozen=True)


class ValidatedConfiguration(BaseModel):
    """
    Sanitised collector configuration.

    Attributes:
        capabilities: Existing, deduplicated capability tags in priority order
        discovery_map: Well-formed discovery entries only
        dropped: Every entry removed, in the order it was encountered
    """

    capabilities: list[str] = Field(default_factory=list)
    discovery_map: DiscoveryMap = Field(default_factory=dict)
    dropped: list[DroppedEntry] = Field(default_factory=list)

    def dropped_of(self, kind: DropKind) -> list[DroppedEntry]:
        """Return dropped entries of a single kind."""
        return [entry for entry in self.dropped if entry.kind == kind]
