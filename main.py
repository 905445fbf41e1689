from __future__ import annotations

import argparse
import logging
import sys

import pygame

from tips.config import BUTTON_RECT, DEFAULT_BAR, EXPECTATION_TIMEOUT_S, FETCH_DELAY_S, LOG_FORMAT
from tips.demos.checkout import Product, ProductManager, build_checkout_button
from tips.demos.expectations import ExpectationTimeout, fetch_with_expectation
from tips.demos.injection import Bar, FooFactory


LOG = logging.getLogger("tips")


def run_checkout(args: argparse.Namespace) -> None:
    manager = ProductManager()
    button = build_checkout_button(Product(bar=args.bar), manager)
    # Synthesize a click in the middle of the button; no display needed.
    x, y, w, h = BUTTON_RECT
    button.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(x + w // 2, y + h // 2), button=1))
    LOG.info("verdicts: %s", [v.value for v in manager.history])


def run_injection(args: argparse.Namespace) -> None:
    inline = Bar.from_string(str(args.bar))
    injected = Bar.from_factory(str(args.bar), factory=FooFactory.generate)
    LOG.info("inline=%s injected=%s equal=%s", inline, injected, inline == injected)


def run_expectations(args: argparse.Namespace) -> None:
    response = fetch_with_expectation(timeout=args.timeout, delay=args.delay)
    LOG.info("response: %s", response)


DEMOS = {
    "checkout": run_checkout,
    "injection": run_injection,
    "expectations": run_expectations,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run one of the tips demos headlessly")
    parser.add_argument("demo", choices=sorted(DEMOS), help="Demo to run")
    parser.add_argument("--bar", type=int, default=DEFAULT_BAR, help=f"Product score (default: {DEFAULT_BAR})")
    parser.add_argument("--delay", type=float, default=FETCH_DELAY_S, help=f"Simulated fetch delay in seconds (default: {FETCH_DELAY_S})")
    parser.add_argument("--timeout", type=float, default=EXPECTATION_TIMEOUT_S, help=f"Expectation timeout in seconds (default: {EXPECTATION_TIMEOUT_S})")
    parser.add_argument("--verbose", action="store_true", help="Log binder activity")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)
    try:
        DEMOS[args.demo](args)
    except (ValueError, ExpectationTimeout) as exc:
        LOG.error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
