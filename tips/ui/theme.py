from __future__ import annotations

import pygame


class Colors:
    bg = (255, 255, 255)
    border = (70, 80, 90)
    text = (20, 22, 28)
    disabled_text = (170, 170, 170)
    accent = (0, 122, 255)
    accent_hover = (90, 170, 255)


class Theme:
    """Fonts and colors for the demo widgets."""

    def __init__(self) -> None:
        pygame.font.init()
        self.colors = Colors()
        self.font = pygame.font.SysFont("arial", 20)

    def render_text(
        self, font: pygame.font.Font, text: str, color: tuple[int, int, int] | None = None
    ) -> pygame.Surface:
        return font.render(text, True, color or self.colors.text)
