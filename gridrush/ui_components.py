from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import pygame

from .constants import *  # noqa: F401,F403
from .models import ChallengeData

if TYPE_CHECKING:
    from .game import Game


class TimeBar:
    def __init__(self, game: "Game") -> None:
        self.g = game

    def draw(self, seconds: float, label: Optional[str] = None) -> None:
        g = self.g
        ratio = max(0.0, min(1.0, seconds / TIMER_BAR_FULL_SCALE))
        if seconds <= TIMER_BAR_CRIT_TIME:
            fill_color = TIMER_BAR_CRIT_COLOR
        elif seconds <= TIMER_BAR_WARN_TIME:
            fill_color = TIMER_BAR_WARN_COLOR
        else:
            fill_color = TIMER_BAR_FILL

        bar_w = int(g.w * TIMER_BAR_WIDTH_FACTOR)
        bar_h = int(TIMER_BAR_HEIGHT)
        bar_x = (g.w - bar_w) // 2
        bar_y = g.h - int(g.h * TIMER_BOTTOM_MARGIN_FACTOR) - bar_h

        pygame.draw.rect(g.screen, TIMER_BAR_BG, (bar_x, bar_y, bar_w, bar_h), border_radius=UI_RADIUS)
        fill_w = int(bar_w * ratio)
        if fill_w > 0:
            pygame.draw.rect(g.screen, fill_color, (bar_x, bar_y, fill_w, bar_h), border_radius=UI_RADIUS)

        if label:
            surf = g.hud_font.render(label, True, INK)
            g.screen.blit(surf, (bar_x + (bar_w - surf.get_width()) // 2, bar_y - surf.get_height() - 6))


class GridBoard:
    """Lays out the challenge cells and maps clicks back to cell indices."""

    def __init__(self, game: "Game") -> None:
        self.g = game
        self.cells: List[pygame.Rect] = []

    def layout(self, rows: int, cols: int, area: pygame.Rect) -> None:
        gap = int(area.w * GAP)
        size = min((area.w - gap * (cols - 1)) // cols, (area.h - gap * (rows - 1)) // rows)
        total_w = size * cols + gap * (cols - 1)
        total_h = size * rows + gap * (rows - 1)
        x0 = area.x + (area.w - total_w) // 2
        y0 = area.y + (area.h - total_h) // 2
        self.cells = [
            pygame.Rect(x0 + c * (size + gap), y0 + r * (size + gap), size, size)
            for r in range(rows)
            for c in range(cols)
        ]

    def index_at(self, pos: tuple[int, int]) -> Optional[int]:
        for i, rect in enumerate(self.cells):
            if rect.collidepoint(pos):
                return i
        return None

    def draw(
        self,
        challenge: ChallengeData,
        *,
        selected: List[int],
        hidden: List[int],
        reveal: bool,
        show_values: bool,
    ) -> None:
        g = self.g
        for i, rect in enumerate(self.cells):
            if i >= len(challenge.items):
                break
            if i in hidden:
                pygame.draw.rect(g.screen, CELL_HIDDEN, rect, border_radius=UI_RADIUS)
                continue
            color = CELL_BG
            if reveal and i in challenge.correct_indices:
                color = CELL_REVEAL
            elif i in selected:
                color = CELL_SELECTED
            pygame.draw.rect(g.screen, color, rect, border_radius=UI_RADIUS)
            if show_values or i in selected:
                surf = g.cell_font.render(str(challenge.items[i]), True, INK)
                g.screen.blit(surf, surf.get_rect(center=rect.center))


__all__ = ["TimeBar", "GridBoard"]
