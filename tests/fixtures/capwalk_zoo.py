"""Real classes exercised by PythonTypeHost tests."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Protocol, runtime_checkable

CONSTANT = "not a class"


class Pet:
    pass


class Animal:
    sound = "..."

    @staticmethod
    def siblings() -> list[str]:
        return []

    @classmethod
    def lineage(cls) -> Iterable[str]:
        return [f"{base.__module__}.{base.__qualname__}" for base in cls.__mro__[1:-1]]

    @staticmethod
    def walk() -> Iterator[str]:
        yield "capwalk_zoo.Cat"

    @staticmethod
    def variants() -> tuple[str, ...] | list[str]:
        return ()

    @staticmethod
    def maybe() -> list[str] | None:
        return None

    def groom(self) -> list[str]:
        return []

    @staticmethod
    def _hidden() -> list[str]:
        return []

    @staticmethod
    def by_name(name: str) -> list[str]:
        return [name]

    @staticmethod
    def count() -> int:
        return 0

    @staticmethod
    def label() -> str:
        return "animal"

    @staticmethod
    def untyped():
        return []


class Dog(Pet, Animal):
    @staticmethod
    def siblings() -> list[str]:
        return ["capwalk_zoo.Cat", "capwalk_zoo.Fish"]


class Cat(Animal):
    pass


class Fish:
    @staticmethod
    def siblings() -> list[str]:
        return ["capwalk_zoo.Dog"]


class Shelter:
    @classmethod
    def residents(cls) -> Iterator[type]:
        yield Dog
        yield Cat


class Ping(Animal):
    @staticmethod
    def siblings() -> list[str]:
        return ["capwalk_zoo.Pong"]


class Pong(Animal):
    @staticmethod
    def siblings() -> list[str]:
        return ["capwalk_zoo.Ping"]


class Broken(Animal):
    @staticmethod
    def siblings() -> list[str]:
        raise RuntimeError("kennel on fire")


class Outer:
    class Inner(Animal):
        pass


@runtime_checkable
class Named(Protocol):
    name: str
