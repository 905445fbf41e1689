from __future__ import annotations

from functools import partial
from typing import Callable, TypeVar


A = TypeVar("A")
B = TypeVar("B")


def combine(value: A, function: Callable[[A], B]) -> Callable[[], B]:
    """Bind `value` to `function`, returning a zero-argument callable.

    Nothing runs at construction time. Prefer this over a lambda that
    captures `self` when building button handlers:

        button.handler = combine(self.product, self.manager.start_checkout)
    """
    return partial(function, value)
