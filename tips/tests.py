from __future__ import annotations

import gc
import threading
import time
from dataclasses import dataclass

import pygame
import pytest
from hypothesis import given, strategies as st

from tips.config import FETCH_RESPONSE, PRIMARY_ACTION
from tips.core.binder import CallbackBinder
from tips.core.events import EventSource
from tips.core.functional import combine
from tips.demos.checkout import Product, ProductManager, Verdict, build_checkout_button
from tips.demos.expectations import (
    Expectation,
    ExpectationTimeout,
    fetch_by_sleeping,
    fetch_from_network,
    fetch_with_expectation,
    wait_for,
)
from tips.demos.injection import Bar, Foo, FooFactory
from tips.ui.widgets import Button


class Counter:
    def __init__(self) -> None:
        self.count = 0

    def bump(self) -> None:
        self.count += 1


class Slotted:
    """Emitter without weakref support."""

    __slots__ = ()

    def add_target(self, event, action) -> None:
        raise AssertionError("should fail before registering")

    def remove_target(self, event, action) -> None:
        raise AssertionError("nothing was registered")


class Named(EventSource):
    def __init__(self, name: str) -> None:
        super().__init__()
        self.name = name

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Named) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)


@dataclass
class Labeled(EventSource):
    label: str

    def __post_init__(self) -> None:
        super().__init__()


class Refusing(EventSource):
    def add_target(self, event, action) -> None:
        raise RuntimeError("registration refused")


def _click(pos: tuple[int, int], button: int = 1) -> pygame.event.Event:
    return pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=pos, button=button)


def test_rebind_replaces_previous_handler() -> None:
    binder = CallbackBinder()
    emitter = EventSource()
    a, b = Counter(), Counter()
    binder.bind(emitter, "tap", a.bump)
    binder.bind(emitter, "tap", b.bump)
    binder.dispatch(emitter, "tap")
    assert a.count == 0
    assert b.count == 1


def test_unbind_then_dispatch_invokes_nothing() -> None:
    binder = CallbackBinder()
    emitter = EventSource()
    c = Counter()
    binder.bind(emitter, "tap", c.bump)
    binder.unbind(emitter, "tap")
    binder.dispatch(emitter, "tap")
    emitter.send_actions("tap")
    assert c.count == 0
    assert emitter.actions_for("tap") == []
    assert binder.handler_for(emitter, "tap") is None


def test_bind_none_detaches() -> None:
    binder = CallbackBinder()
    emitter = EventSource()
    c = Counter()
    binder.bind(emitter, "tap", c.bump)
    binder.bind(emitter, "tap", None)
    emitter.send_actions("tap")
    assert c.count == 0
    assert emitter.actions_for("tap") == []


def test_dispatch_and_unbind_without_bind_are_noops() -> None:
    binder = CallbackBinder()
    emitter = EventSource()
    binder.dispatch(emitter, "tap")
    binder.unbind(emitter, "tap")
    assert binder.bound_count() == 0


def test_counter_dispatched_three_times() -> None:
    binder = CallbackBinder()
    emitter = EventSource()
    c = Counter()
    binder.bind(emitter, "tap", c.bump)
    for _ in range(3):
        emitter.send_actions("tap")
    assert c.count == 3


def test_repeated_bind_registers_one_trampoline_per_event() -> None:
    binder = CallbackBinder()
    emitter = EventSource()
    c = Counter()
    for _ in range(4):
        binder.bind(emitter, "tap", c.bump)
    binder.bind(emitter, "hold", c.bump)
    assert len(emitter.actions_for("tap")) == 1
    assert len(emitter.actions_for("hold")) == 1
    emitter.send_actions("tap")
    assert c.count == 1


def test_handlers_are_scoped_per_emitter() -> None:
    binder = CallbackBinder()
    first, second = EventSource(), EventSource()
    a, b = Counter(), Counter()
    binder.bind(first, "tap", a.bump)
    binder.bind(second, "tap", b.bump)
    binder.unbind(first, "tap")
    first.send_actions("tap")
    second.send_actions("tap")
    assert (a.count, b.count) == (0, 1)


def test_handler_may_rebind_its_own_emitter() -> None:
    binder = CallbackBinder()
    emitter = EventSource()
    c = Counter()

    def first() -> None:
        binder.bind(emitter, "tap", c.bump)

    binder.bind(emitter, "tap", first)
    emitter.send_actions("tap")
    assert c.count == 0
    emitter.send_actions("tap")
    assert c.count == 1


def test_binder_does_not_keep_emitter_alive() -> None:
    binder = CallbackBinder()
    c = Counter()
    emitter = EventSource()
    binder.bind(emitter, "tap", c.bump)
    assert binder.bound_count() == 1
    del emitter
    gc.collect()
    assert binder.bound_count() == 0


def test_bind_rejects_emitter_without_weakref_support() -> None:
    binder = CallbackBinder()
    with pytest.raises(TypeError):
        binder.bind(Slotted(), "tap", lambda: None)
    assert binder.bound_count() == 0


def test_lookups_on_emitter_without_weakref_support_are_noops() -> None:
    binder = CallbackBinder()
    emitter = Slotted()
    binder.unbind(emitter, "tap")
    binder.dispatch(emitter, "tap")
    assert binder.handler_for(emitter, "tap") is None


def test_value_equal_emitters_keep_separate_handlers() -> None:
    binder = CallbackBinder()
    a, b = Named("ok"), Named("ok")
    assert a == b and hash(a) == hash(b)
    seen: list[str] = []
    binder.bind(a, "tap", lambda: seen.append("a"))
    binder.bind(b, "tap", lambda: seen.append("b"))
    a.send_actions("tap")
    b.send_actions("tap")
    assert seen == ["a", "b"]
    binder.unbind(a, "tap")
    a.send_actions("tap")
    b.send_actions("tap")
    assert seen == ["a", "b", "b"]


def test_unhashable_emitter_can_be_bound() -> None:
    binder = CallbackBinder()
    emitter = Labeled("save")
    c = Counter()
    binder.bind(emitter, "tap", c.bump)
    emitter.send_actions("tap")
    assert c.count == 1


def test_failed_registration_stores_nothing() -> None:
    binder = CallbackBinder()
    emitter = Refusing()
    with pytest.raises(RuntimeError):
        binder.bind(emitter, "tap", lambda: None)
    assert binder.handler_for(emitter, "tap") is None
    assert binder.bound_count() == 0


def test_concurrent_binds_keep_one_handler() -> None:
    binder = CallbackBinder()
    emitter = EventSource()
    handlers = [Counter().bump for _ in range(8)]
    start = threading.Barrier(len(handlers) + 1)

    def hammer(handler) -> None:
        start.wait()
        for _ in range(200):
            binder.bind(emitter, "tap", handler)

    def fire() -> None:
        start.wait()
        for _ in range(200):
            binder.dispatch(emitter, "tap")

    threads = [threading.Thread(target=hammer, args=(h,)) for h in handlers]
    threads.append(threading.Thread(target=fire))
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    assert not any(t.is_alive() for t in threads)
    assert len(emitter.actions_for("tap")) == 1
    assert binder.handler_for(emitter, "tap") in handlers


def test_combine_defers_call() -> None:
    calls: list[int] = []
    bound = combine(7, calls.append)
    assert calls == []
    bound()
    bound()
    assert calls == [7, 7]


@given(v=st.integers(-10**6, 10**6))
def test_combine_matches_direct_call(v: int) -> None:
    def f(x: int) -> int:
        return x * 3 - 1

    bound = combine(v, f)
    assert bound() == f(v)
    assert bound() == bound()


@given(s=st.text(max_size=20))
def test_combine_with_method_reference(s: str) -> None:
    assert combine(s, FooFactory.generate)() == Foo(bar=s)


def test_event_source_dedups_and_removes() -> None:
    source = EventSource()
    seen: list[object] = []
    source.add_target("tap", seen.append)
    source.add_target("tap", seen.append)
    source.send_actions("tap")
    assert seen == [source]
    source.remove_target("tap", seen.append)
    source.remove_target("tap", seen.append)
    source.send_actions("tap")
    assert seen == [source]


def test_button_click_fires_handler() -> None:
    button = Button(pygame.Rect(0, 0, 10, 10), "Tap")
    c = Counter()
    button.handler = c.bump
    assert button.handler == c.bump
    button.handle_event(_click((5, 5)))
    button.handle_event(_click((50, 50)))
    button.handle_event(_click((5, 5), button=3))
    assert c.count == 1
    button.enabled = False
    button.handle_event(_click((5, 5)))
    assert c.count == 1


def test_button_handler_none_removes_target() -> None:
    button = Button(pygame.Rect(0, 0, 10, 10), "Tap")
    c = Counter()
    button.handler = c.bump
    button.handler = None
    assert button.handler is None
    assert button.actions_for(PRIMARY_ACTION) == []
    button.handle_event(_click((5, 5)))
    assert c.count == 0


def test_button_hover_tracks_mouse() -> None:
    button = Button(pygame.Rect(0, 0, 10, 10), "Tap")
    button.handle_event(pygame.event.Event(pygame.MOUSEMOTION, pos=(3, 3)))
    assert button.hovered is True
    button.handle_event(pygame.event.Event(pygame.MOUSEMOTION, pos=(30, 3)))
    assert button.hovered is False


def test_button_draw_smoke() -> None:
    # Headless-friendly pygame init.
    import os

    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    pygame.init()
    pygame.display.set_mode((1, 1))

    from tips.ui.theme import Theme

    surface = pygame.Surface((200, 100))
    button = Button(pygame.Rect(10, 10, 100, 40), "Foo")
    theme = Theme()
    button.draw(surface, theme)
    button.enabled = False
    button.draw(surface, theme)


@pytest.mark.parametrize(
    "bar, verdict",
    [(0, Verdict.FAIL), (59, Verdict.FAIL), (60, Verdict.PASS), (89, Verdict.PASS), (100, Verdict.PASS)],
)
def test_checkout_grading(bar: int, verdict: Verdict) -> None:
    manager = ProductManager()
    assert manager.start_checkout(Product(bar=bar)) is verdict
    assert manager.history == [verdict]


@pytest.mark.parametrize("bar", [-1, 101])
def test_checkout_out_of_range_is_hard_failure(bar: int) -> None:
    manager = ProductManager()
    with pytest.raises(ValueError):
        manager.start_checkout(Product(bar=bar))
    assert manager.history == []


def test_checkout_button_uses_preferred_handler_only() -> None:
    manager = ProductManager()
    button = build_checkout_button(Product(bar=42), manager)
    assert len(button.actions_for(PRIMARY_ACTION)) == 1
    button.handle_event(_click(button.rect.center))
    assert manager.history == [Verdict.FAIL]


def test_injection_forms_agree() -> None:
    made: list[str] = []

    def factory(bar: str) -> Foo:
        made.append(bar)
        return Foo(bar=bar.upper())

    assert Bar.from_string("x") == Bar(Foo("x"))
    assert Bar.from_factory("x") == Bar(Foo("x"))
    assert Bar.from_factory("x", factory=factory).foo.bar == "X"
    assert made == ["x"]


def test_async_fetch_with_expectation() -> None:
    exp = Expectation("Async Test")
    result: list[str] = []

    def completion(response: str) -> None:
        result.append(response)
        exp.fulfill()

    started = time.monotonic()
    fetch_from_network(completion, delay=0.05)
    wait_for([exp], timeout=2.0)
    assert result == [FETCH_RESPONSE]
    # Returns when fulfilled, not after the full timeout.
    assert time.monotonic() - started < 1.5


def test_async_fetch_with_sleep_costs_the_full_wait() -> None:
    # Not good: the wait is fixed, whether the response is early or late.
    started = time.monotonic()
    assert fetch_by_sleeping(sleep_s=0.5, delay=0.02) == FETCH_RESPONSE
    assert time.monotonic() - started >= 0.45
    assert fetch_by_sleeping(sleep_s=0.01, delay=0.3) is None


def test_async_fetch_with_expectation_returns_early() -> None:
    # Preferred: same fetch as above, done long before the 0.5s sleep would be.
    started = time.monotonic()
    assert fetch_with_expectation(timeout=2.0, delay=0.02) == FETCH_RESPONSE
    assert time.monotonic() - started < 0.45
    with pytest.raises(ExpectationTimeout):
        fetch_with_expectation(timeout=0.01, delay=0.3)


def test_wait_for_times_out_with_pending_descriptions() -> None:
    done, never = Expectation("done"), Expectation("never")
    done.fulfill()
    with pytest.raises(ExpectationTimeout) as info:
        wait_for([done, never], timeout=0.05)
    assert info.value.pending == ["never"]
    assert isinstance(info.value, TimeoutError)


def test_main_runs_demos() -> None:
    from main import main

    assert main(["checkout"]) == 0
    assert main(["injection", "--bar", "3"]) == 0
    assert main(["checkout", "--bar", "150"]) == 1
    assert main(["expectations", "--delay", "0.01"]) == 0
    assert main(["expectations", "--delay", "0.5", "--timeout", "0.05"]) == 1
