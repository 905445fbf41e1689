from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

import pygame

from tips.config import BAR_MAX, BUTTON_RECT, BUTTON_TITLE, PASS_MIN
from tips.core.functional import combine
from tips.ui.widgets import Button


LOG = logging.getLogger("tips.checkout")


class Verdict(str, Enum):
    FAIL = "fail"
    PASS = "pass"


@dataclass
class Product:
    bar: int


@dataclass
class ProductManager:
    history: list[Verdict] = field(default_factory=list)

    def start_checkout(self, product: Product) -> Verdict:
        """Grade a product. Out-of-range scores are a programmer error."""
        if 0 <= product.bar < PASS_MIN:
            verdict = Verdict.FAIL
        elif PASS_MIN <= product.bar <= BAR_MAX:
            verdict = Verdict.PASS
        else:
            raise ValueError(f"bar out of range 0..{BAR_MAX}: {product.bar}")
        self.history.append(verdict)
        LOG.info("checkout bar=%d -> %s", product.bar, verdict.value)
        return verdict


def build_checkout_button(product: Product, manager: ProductManager) -> Button:
    button = Button(pygame.Rect(*BUTTON_RECT), BUTTON_TITLE)

    # Not good: the closure captures the caller's state just to forward it.
    def checkout() -> None:
        manager.start_checkout(product)

    button.handler = checkout

    # Preferred: replaces the closure above.
    button.handler = combine(product, manager.start_checkout)
    return button
