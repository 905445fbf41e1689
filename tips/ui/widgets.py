from __future__ import annotations

import pygame

from tips.config import PRIMARY_ACTION
from tips.core.binder import Handler, default_binder
from tips.core.events import EventSource
from tips.ui.theme import Theme


class Button(EventSource):
    """System-style text button that fires PRIMARY_ACTION on a left click."""

    def __init__(self, rect: pygame.Rect, text: str) -> None:
        super().__init__()
        self.rect = rect
        self.text = text
        self.hovered = False
        self.enabled = True

    def __repr__(self) -> str:
        return f"Button({self.text!r})"

    @property
    def handler(self) -> Handler | None:
        return default_binder.handler_for(self, PRIMARY_ACTION)

    @handler.setter
    def handler(self, value: Handler | None) -> None:
        default_binder.bind(self, PRIMARY_ACTION, value)

    def handle_event(self, event: pygame.event.Event) -> None:
        if not self.enabled:
            return
        if event.type == pygame.MOUSEMOTION:
            self.hovered = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.send_actions(PRIMARY_ACTION)

    def draw(self, surface: pygame.Surface, theme: Theme) -> None:
        color = theme.colors.accent_hover if self.hovered else theme.colors.accent
        if not self.enabled:
            color = theme.colors.disabled_text
        pygame.draw.rect(surface, theme.colors.border, self.rect, 1, border_radius=4)
        text = theme.render_text(theme.font, self.text, color)
        surface.blit(text, text.get_rect(center=self.rect.center))
