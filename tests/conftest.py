"""Shared pytest fixtures for capwalk tests."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from capwalk.core.collector import InterfaceCollector
from capwalk.core.host import DeclaredTypeHost, PythonTypeHost

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ANIMAL_TYPES = {
    "Pet": {},
    "Animal": {"functions": {"siblings": []}},
    "Dog": {"satisfies": ["Pet", "Animal"], "functions": {"siblings": ["Cat", "Fish"]}},
    "Cat": {"satisfies": ["Animal"]},
    "Fish": {},
}

ANIMAL_MANIFEST = """
[collector]
capabilities = ["Pet", "Animal"]

[discovery.Animal]
siblings = ["Animal"]

[types.Pet]

[types.Animal]
functions = { siblings = [] }

[types.Dog]
satisfies = ["Pet", "Animal"]
functions = { siblings = ["Cat", "Fish"] }

[types.Cat]
satisfies = ["Animal"]

[types.Fish]
"""


class RecordingHost(DeclaredTypeHost):
    """Declared host that records every discovery call."""

    def __init__(self, declarations):
        super().__init__(declarations)
        self.calls: list[tuple[str, str]] = []

    def invoke(self, identifier: str, function_name: str) -> Iterator[str]:
        self.calls.append((identifier, function_name))
        return super().invoke(identifier, function_name)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def animal_host() -> RecordingHost:
    """Return the Pet/Animal universe: Dog, Cat and Fish."""
    return RecordingHost.from_mapping(ANIMAL_TYPES)


@pytest.fixture
def make_collector(animal_host: RecordingHost) -> Callable[..., InterfaceCollector]:
    """Return a factory for collectors over the animal universe."""

    def _make(auto_reset: bool = True) -> InterfaceCollector:
        return InterfaceCollector(
            {"Animal": {"siblings": ["Animal"]}},
            ["Pet", "Animal"],
            animal_host,
            auto_reset=auto_reset,
        )

    return _make


@pytest.fixture
def python_host(fixtures_dir: Path) -> PythonTypeHost:
    """Return a Python host that can import the capwalk_zoo fixture module."""
    return PythonTypeHost(search_paths=[fixtures_dir])


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper writing capwalk.toml into a temporary directory."""

    def _write(content: str = ANIMAL_MANIFEST) -> Path:
        path = tmp_path / "capwalk.toml"
        path.write_text(content, encoding="utf-8")
        return path

    return _write
