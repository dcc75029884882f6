"""
Interface collector: lazy, cycle-safe discovery over a type universe.

Starting from seed identifiers, the collector emits every identifier that
satisfies one of its capabilities, following discovery functions registered
on capabilities to find further candidates.

For each identifier taken from the work stack:

1. Skip it if it does not exist or was already visited; otherwise mark it
   visited.
2. Direct match: emit it if it was not yielded yet and satisfies any
   capability. The first capability in list order wins.
3. Expansion: for every discovery capability it satisfies, call each
   registered function. Each result not yet yielded is emitted if it
   satisfies one of the function's target tags, and is then visited in turn.

The walk is depth-first and uses an explicit stack instead of recursion, so
emission order follows seed order, discovery map order and result order.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .host import TypeHost
from .specs import DiscoveryMap, ValidatedConfiguration
from .validator import validate_configuration

logger = logging.getLogger(__name__)

_DONE = object()


@dataclass
class _VisitFrame:
    """Identifiers waiting to be visited (one level of the walk)."""

    identifiers: Iterator[Any]


@dataclass
class _ExpandFrame:
    """Discovery functions still to call for a visited identifier."""

    identifier: str
    entries: Iterator[tuple[str, list[str]]]


@dataclass
class _ResultFrame:
    """Results of one discovery function call, checked against its targets."""

    source: str
    function_name: str
    results: Iterator[Any]
    targets: list[str]


_Frame = _VisitFrame | _ExpandFrame | _ResultFrame


class Traversal(Iterator[str]):
    """
    Lazy cursor over one ``collect`` call.

    The cursor owns the pending-work stack; visited and yielded state belongs
    to the collector and is shared by every traversal it creates. Nothing
    happens until the first ``next()``, which is also when an auto-reset
    collector clears its state.
    """

    def __init__(self, collector: InterfaceCollector, seeds: Iterable[str]):
        self._collector = collector
        self._seeds = tuple(seeds)
        self._stack: list[_Frame] = []
        self._started = False
        self._exhausted = False

    @property
    def seeds(self) -> tuple[str, ...]:
        return self._seeds

    @property
    def started(self) -> bool:
        return self._started

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def pending(self) -> int:
        """Number of frames on the work stack."""
        return len(self._stack)

    @property
    def visited(self) -> frozenset[str]:
        return self._collector.visited

    @property
    def yielded(self) -> frozenset[str]:
        return self._collector.yielded

    def __iter__(self) -> Traversal:
        return self

    def __next__(self) -> str:
        if self._exhausted:
            raise StopIteration

        if not self._started:
            self._started = True
            self._collector._begin_traversal()
            self._stack.append(_VisitFrame(iter(self._seeds)))

        try:
            while self._stack:
                emitted = self._step(self._stack[-1])
                if emitted is not None:
                    return emitted
        except Exception:
            # A failing discovery function ends this traversal
            self._stack.clear()
            self._exhausted = True
            raise

        self._exhausted = True
        raise StopIteration

    def take(self, count: int) -> list[str]:
        """Pull at most ``count`` identifiers, leaving the rest pending."""
        return list(itertools.islice(self, count))

    def _step(self, frame: _Frame) -> str | None:
        if isinstance(frame, _VisitFrame):
            return self._visit(frame)
        if isinstance(frame, _ExpandFrame):
            return self._expand(frame)
        return self._check_result(frame)

    def _visit(self, frame: _VisitFrame) -> str | None:
        collector = self._collector
        identifier = next(frame.identifiers, _DONE)
        if identifier is _DONE:
            self._stack.pop()
            return None

        if (
            not isinstance(identifier, str)
            or identifier in collector._visited
            or not collector._host.exists(identifier)
        ):
            return None

        collector._visited.add(identifier)
        self._stack.append(_ExpandFrame(identifier, collector._expansions(identifier)))
        return collector._direct_match(identifier)

    def _expand(self, frame: _ExpandFrame) -> str | None:
        entry = next(frame.entries, _DONE)
        if entry is _DONE:
            self._stack.pop()
            return None

        function_name, targets = entry
        logger.debug("Expanding %s via %s()", frame.identifier, function_name)
        results = self._collector._host.invoke(frame.identifier, function_name)
        self._stack.append(
            _ResultFrame(frame.identifier, function_name, iter(results), targets)
        )
        return None

    def _check_result(self, frame: _ResultFrame) -> str | None:
        collector = self._collector
        result = next(frame.results, _DONE)
        if result is _DONE:
            self._stack.pop()
            return None

        if not isinstance(result, str):
            logger.debug(
                "Ignoring non-string result %r from %s.%s()",
                result,
                frame.source,
                frame.function_name,
            )
            return None

        if result in collector._yielded:
            return None

        # Visit the result after emitting it
        self._stack.append(_VisitFrame(iter((result,))))

        if any(collector._host.satisfies(result, target) for target in frame.targets):
            collector._yielded.add(result)
            return result
        return None


class InterfaceCollector:
    """
    Collects identifiers satisfying a capability list, following discovery
    functions.

    Args:
        discovery_map: capability -> discovery function name -> target tags
        capabilities: Capability tags checked for direct matches, in priority
            order
        host: Type host answering existence, satisfaction and invocation
        auto_reset: Clear visited/yielded state at the start of every
            traversal. When False, state accumulates across ``collect`` calls
            until ``reset()``.

    The configuration is validated once, here; invalid entries are dropped
    and listed in ``validation.dropped``.

    One collector must not drive two traversals at the same time: they share
    visited and yielded state.
    """

    def __init__(
        self,
        discovery_map: Mapping[Any, Any],
        capabilities: Iterable[Any],
        host: TypeHost,
        auto_reset: bool = True,
    ):
        self._host = host
        self._validation = validate_configuration(discovery_map, capabilities, host)
        self._capabilities = list(self._validation.capabilities)
        self._discovery_map: DiscoveryMap = {
            capability: {name: list(targets) for name, targets in functions.items()}
            for capability, functions in self._validation.discovery_map.items()
        }
        self._auto_reset = auto_reset
        self._visited: set[str] = set()
        self._yielded: set[str] = set()

    @property
    def host(self) -> TypeHost:
        return self._host

    @property
    def capabilities(self) -> list[str]:
        return list(self._capabilities)

    @property
    def discovery_map(self) -> DiscoveryMap:
        return {
            capability: {name: list(targets) for name, targets in functions.items()}
            for capability, functions in self._discovery_map.items()
        }

    @property
    def validation(self) -> ValidatedConfiguration:
        return self._validation

    @property
    def auto_reset(self) -> bool:
        return self._auto_reset

    @property
    def visited(self) -> frozenset[str]:
        return frozenset(self._visited)

    @property
    def yielded(self) -> frozenset[str]:
        return frozenset(self._yielded)

    def reset(self) -> None:
        """Forget everything visited and yielded so far."""
        self._visited.clear()
        self._yielded.clear()

    def collect(self, *seeds: str) -> Traversal:
        """
        Start a lazy traversal from ``seeds``.

        Returns:
            Traversal yielding each matching identifier once, in discovery
            order
        """
        return Traversal(self, seeds)

    def _begin_traversal(self) -> None:
        if self._auto_reset:
            logger.debug("Resetting collector state")
            self.reset()

    def _direct_match(self, identifier: str) -> str | None:
        if identifier in self._yielded:
            return None
        for capability in self._capabilities:
            if self._host.satisfies(identifier, capability):
                self._yielded.add(identifier)
                return identifier
        return None

    def _expansions(self, identifier: str) -> Iterator[tuple[str, list[str]]]:
        for capability, functions in self._discovery_map.items():
            if self._host.satisfies(identifier, capability):
                yield from functions.items()
