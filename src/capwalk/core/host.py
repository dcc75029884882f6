"""
Type hosts for capwalk.

A host answers the questions the collector asks about a type universe:
whether an identifier names a type, whether one type satisfies another, and
what a type's discovery functions return. It also describes discovery
function registrations for the configuration validator.

Two hosts are provided:

- PythonTypeHost: identifiers are dotted import paths of Python classes
- DeclaredTypeHost: identifiers name types declared in memory (manifests, tests)
"""

from __future__ import annotations

import builtins
import collections.abc
import importlib
import inspect
import logging
import sys
import types
import typing
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .errors import DiscoveryError, HostError
from .specs import DiscoveryFunctionSpec, TypeDeclaration

logger = logging.getLogger(__name__)


@runtime_checkable
class TypeHost(Protocol):
    """Capability matcher, discovery invoker, and registration describer."""

    def exists(self, identifier: str) -> bool: ...

    def satisfies(self, identifier: str, capability: str) -> bool: ...

    def invoke(self, identifier: str, function_name: str) -> Iterable[str]: ...

    def describe(self, capability: str, function_name: str) -> DiscoveryFunctionSpec | None: ...


# =============================================================================
# Python classes
# =============================================================================


def identifier_of(cls: type) -> str:
    """Return the dotted identifier for a class, e.g. ``pkg.mod.Outer.Inner``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def _walk_attributes(obj: Any, path: list[str]) -> Any:
    for part in path:
        obj = getattr(obj, part, None)
        if obj is None:
            return None
    return obj


def _import_class(identifier: str) -> type | None:
    """
    Import the class named by ``identifier``.

    Accepts ``pkg.mod:Qual.Name`` and ``pkg.mod.Qual.Name``. Names without a
    dot are looked up in ``builtins``.
    """
    if ":" in identifier:
        module_name, _, qualname = identifier.partition(":")
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            # A module that fails at import time names no type
            logger.debug("Cannot import %s for %s: %s", module_name, identifier, e)
            return None
        obj = _walk_attributes(module, qualname.split("."))
    else:
        parts = identifier.split(".")
        if len(parts) == 1:
            obj = getattr(builtins, identifier, None)
        else:
            obj = None
            # Longest importable module prefix wins
            for i in range(len(parts) - 1, 0, -1):
                module_name = ".".join(parts[:i])
                try:
                    module = importlib.import_module(module_name)
                except Exception as e:
                    logger.debug("Cannot import %s for %s: %s", module_name, identifier, e)
                    continue
                obj = _walk_attributes(module, parts[i:])
                break

    return obj if inspect.isclass(obj) else None


_NOT_ITERABLE = (str, bytes, bytearray)


def _is_iterable_annotation(annotation: Any) -> bool:
    """Check that a return annotation declares an iterable of identifiers."""
    if annotation is inspect.Signature.empty or annotation is None:
        return False

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return all(_is_iterable_annotation(arg) for arg in typing.get_args(annotation))

    target = origin or annotation
    if not inspect.isclass(target) or issubclass(target, _NOT_ITERABLE):
        return False
    return issubclass(target, collections.abc.Iterable)


def _count_required(signature: inspect.Signature) -> int:
    return sum(
        1
        for param in signature.parameters.values()
        if param.default is param.empty
        and param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
    )


class PythonTypeHost:
    """
    Host backed by the Python runtime.

    Identifiers are dotted import paths of classes. Satisfaction is
    ``issubclass``; discovery functions are static or class methods that
    return an iterable of identifiers or classes.
    """

    def __init__(self, search_paths: Iterable[str | Path] = ()):
        self._classes: dict[str, type | None] = {}
        for path in search_paths:
            entry = str(path)
            if entry not in sys.path:
                sys.path.insert(0, entry)

    def resolve(self, identifier: str) -> type | None:
        """Return the class for ``identifier``, or None if it does not resolve."""
        if identifier not in self._classes:
            self._classes[identifier] = _import_class(identifier)
        return self._classes[identifier]

    def exists(self, identifier: str) -> bool:
        return self.resolve(identifier) is not None

    def satisfies(self, identifier: str, capability: str) -> bool:
        cls = self.resolve(identifier)
        cap = self.resolve(capability)
        if cls is None or cap is None:
            return False
        try:
            return issubclass(cls, cap)
        except TypeError:
            # Protocols with data members refuse issubclass
            return False

    def invoke(self, identifier: str, function_name: str) -> Iterator[str]:
        cls = self.resolve(identifier)
        if cls is None:
            raise DiscoveryError(f"Cannot resolve '{identifier}' to invoke '{function_name}'")
        results = getattr(cls, function_name)()
        return self._identifiers(results)

    @staticmethod
    def _identifiers(results: Iterable[Any]) -> Iterator[str]:
        for result in results:
            yield identifier_of(result) if inspect.isclass(result) else result

    def describe(self, capability: str, function_name: str) -> DiscoveryFunctionSpec | None:
        cls = self.resolve(capability)
        if cls is None:
            return None

        raw = inspect.getattr_static(cls, function_name, None)
        if raw is None:
            return None

        is_static = isinstance(raw, (staticmethod, classmethod))
        bound = getattr(cls, function_name)
        if not callable(bound):
            return DiscoveryFunctionSpec(
                capability=capability,
                name=function_name,
                is_public=not function_name.startswith("_"),
                is_static=False,
                returns_iterable=False,
            )

        try:
            signature = inspect.signature(bound)
        except (TypeError, ValueError):
            signature = None

        func = getattr(raw, "__func__", raw)
        try:
            annotation = typing.get_type_hints(func).get("return", inspect.Signature.empty)
        except Exception as e:
            logger.debug("Cannot resolve hints for %s.%s: %s", capability, function_name, e)
            annotation = signature.return_annotation if signature else inspect.Signature.empty

        return DiscoveryFunctionSpec(
            capability=capability,
            name=function_name,
            is_public=not function_name.startswith("_"),
            is_static=is_static,
            required_parameters=_count_required(signature) if signature else 1,
            returns_iterable=_is_iterable_annotation(annotation),
        )


# =============================================================================
# Declared universe
# =============================================================================


class DeclaredTypeHost:
    """
    Host over an in-memory universe of declared types.

    Satisfaction is reflexive and transitive over ``satisfies``. Names that
    appear only as supertypes are declared implicitly, with no supertypes and
    no functions. Discovery functions are inherited: a type uses its own
    entry first, then its supertypes' depth-first in declaration order.
    """

    def __init__(self, declarations: Iterable[TypeDeclaration]):
        self._types: dict[str, TypeDeclaration] = {}
        for declaration in declarations:
            if declaration.name in self._types:
                raise HostError(f"Duplicate type declaration '{declaration.name}'")
            self._types[declaration.name] = declaration

        for declaration in list(self._types.values()):
            for parent in declaration.satisfies:
                self._types.setdefault(parent, TypeDeclaration(name=parent))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> DeclaredTypeHost:
        """Build a host from ``{name: {"satisfies": [...], "functions": {...}}}``."""
        return cls(TypeDeclaration(name=name, **dict(body)) for name, body in data.items())

    @property
    def names(self) -> list[str]:
        return list(self._types)

    def lineage(self, identifier: str) -> Iterator[str]:
        """Yield ``identifier`` and all of its supertypes, depth-first, once each."""
        seen: set[str] = set()
        stack = [identifier]
        while stack:
            name = stack.pop()
            if name in seen or name not in self._types:
                continue
            seen.add(name)
            yield name
            stack.extend(reversed(self._types[name].satisfies))

    def exists(self, identifier: str) -> bool:
        return identifier in self._types

    def satisfies(self, identifier: str, capability: str) -> bool:
        if capability not in self._types:
            return False
        return any(name == capability for name in self.lineage(identifier))

    def _find_function(self, identifier: str, function_name: str) -> list[str] | None:
        for name in self.lineage(identifier):
            functions = self._types[name].functions
            if function_name in functions:
                return functions[function_name]
        return None

    def invoke(self, identifier: str, function_name: str) -> Iterator[str]:
        results = self._find_function(identifier, function_name)
        if results is None:
            raise DiscoveryError(
                f"Type '{identifier}' has no discovery function '{function_name}'"
            )
        return iter(list(results))

    def describe(self, capability: str, function_name: str) -> DiscoveryFunctionSpec | None:
        if self._find_function(capability, function_name) is None:
            return None
        return DiscoveryFunctionSpec(
            capability=capability,
            name=function_name,
            is_public=not function_name.startswith("_"),
        )
