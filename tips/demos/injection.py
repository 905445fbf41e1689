from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass
class Foo:
    bar: str


class FooFactory:
    @staticmethod
    def generate(bar: str) -> Foo:
        return Foo(bar=bar)


@dataclass
class Bar:
    foo: Foo

    @classmethod
    def from_string(cls, bar: str) -> "Bar":
        # Not good: the dependency is built inline and can't be swapped in tests.
        return cls(Foo(bar=bar))

    @classmethod
    def from_factory(cls, bar: str, factory: Callable[[str], Foo] = FooFactory.generate) -> "Bar":
        """Preferred: the caller injects how a Foo gets made."""
        return cls(factory(bar))
