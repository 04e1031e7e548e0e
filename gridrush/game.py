from __future__ import annotations

import sys
import time
from typing import List, Optional

import pygame

from .config import CFG
from .constants import *  # noqa: F401,F403
from .enums import SessionPhase
from .events import (
    CellSelected,
    ChallengeReady,
    GameOver,
    NextRound,
    PerkChosen,
    Restart,
    SequenceSelected,
    StartLevel,
)
from .input_queue import InputQueue
from .level_config import rule_text
from .rules import pick_hidden_indices
from .session import GameSession, SessionTuning
from .storage import JsonFileKV, SaveStore
from .ui_components import GridBoard, TimeBar


def _hex_rgb(value: int) -> tuple[int, int, int]:
    return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


class Game:

    # ---- Core lifecycle wiring ----

    def __init__(self, screen: pygame.Surface, session: Optional[GameSession] = None):
        self.screen = screen
        self.cfg = CFG
        self.w, self.h = self.screen.get_size()
        self.clock = pygame.time.Clock()
        self.last_tick = self.now()

        if session is None:
            store = SaveStore(JsonFileKV(SAVE_PATH))
            session = GameSession(store, tuning=SessionTuning.from_cfg(CFG))
        self.session = session

        # --- Font cache ---
        self.hud_font = pygame.font.Font(None, HUD_FONT_SIZE)
        self.cell_font = pygame.font.Font(None, CELL_FONT_SIZE)
        self.banner_font = pygame.font.Font(None, BANNER_FONT_SIZE)

        self.board = GridBoard(self)
        self.time_bar = TimeBar(self)

        # --- Per-challenge presentation state ---
        self.selection: List[int] = []
        self.hidden: List[int] = []
        self.memory_until = 0.0
        self.final_text = ""

    def now(self) -> float:
        return time.time()

    def _set_display_mode(self, fullscreen: bool) -> None:
        if fullscreen:
            self.screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
        else:
            size = tuple(self.cfg.get("display", {}).get("windowed_size", WINDOWED_DEFAULT_SIZE))
            self.screen = pygame.display.set_mode(size, pygame.RESIZABLE)
        self.w, self.h = self.screen.get_size()

    def handle_resize(self, width: int, height: int) -> None:
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        self.w, self.h = self.screen.get_size()
        self._layout_board()

    def _layout_board(self) -> None:
        challenge = self.session.challenge
        if challenge is None:
            return
        grid = self.session.level_cfg.rounds[0].grid_size
        pad = int(self.w * PADDING)
        area = pygame.Rect(pad, int(self.h * 0.18), self.w - 2 * pad, int(self.h * 0.62))
        self.board.layout(grid.rows, grid.cols, area)

    # ---- Input ----

    def handle_event(self, event: pygame.event.Event, iq: InputQueue) -> None:
        if event.type == pygame.VIDEORESIZE:
            self.handle_resize(event.w, event.h)
            return

        phase = self.session.phase
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_ESCAPE, pygame.K_q):
                pygame.quit(); sys.exit(0)
            if phase is SessionPhase.GAME_OVER and event.key == pygame.K_SPACE:
                iq.push(Restart()); return
            if phase is SessionPhase.LEVEL_INTRO and event.key in (pygame.K_RETURN, pygame.K_SPACE):
                iq.push(StartLevel()); return
            if phase is SessionPhase.ROUND_RESOLVED and event.key in (pygame.K_RETURN, pygame.K_SPACE):
                iq.push(NextRound()); return
            if phase is SessionPhase.PERK_SELECTION and pygame.K_1 <= event.key <= pygame.K_9:
                idx = event.key - pygame.K_1
                if idx < len(self.session.offered_perks):
                    iq.push(PerkChosen(self.session.offered_perks[idx].type.value))
                return
            if event.key == pygame.K_r:
                iq.push(Restart()); return

        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if phase is not SessionPhase.ROUND_ACTIVE or self.session.challenge is None:
                return
            if self.now() < self.memory_until:
                return
            idx = self.board.index_at(event.pos)
            if idx is None or idx in self.hidden:
                return
            challenge = self.session.challenge
            if not challenge.multi_select:
                iq.push(CellSelected(idx))
                return
            if idx in self.selection:
                self.selection.remove(idx)
                return
            self.selection.append(idx)
            if len(self.selection) >= challenge.selection_size:
                iq.push(SequenceSelected(tuple(self.selection)))
                self.selection = []

    # ---- Frame update ----

    def update(self, iq: InputQueue) -> None:
        now = self.now()
        dt = now - self.last_tick
        self.last_tick = now
        # the memory preview does not cost the player time
        if now < self.memory_until:
            for signal in iq.pop_all():
                if isinstance(signal, Restart):
                    self.session.handle(signal)
            dt = 0.0
        self.session.update(iq, dt)

        for event in self.session.drain_events():
            if isinstance(event, ChallengeReady):
                self._on_challenge_ready()
            elif isinstance(event, GameOver):
                self.final_text = f"GAME OVER - level {event.final_level}, max combo {event.max_combo}"

    def _on_challenge_ready(self) -> None:
        challenge = self.session.challenge
        self.selection = []
        self.hidden = pick_hidden_indices(challenge)
        self.memory_until = self.now() + MEMORY_PREVIEW_SEC if challenge.memory_phase else 0.0
        self._layout_board()

    # ---- Rendering ----

    def _background(self) -> tuple[int, int, int]:
        cfg = self.session.level_cfg
        return _hex_rgb(cfg.theme.bg_color) if cfg is not None else BG

    def _text(self, text: str, y: int, *, font: Optional[pygame.font.Font] = None, color=INK) -> None:
        font = font or self.hud_font
        surf = font.render(text, True, color)
        self.screen.blit(surf, ((self.w - surf.get_width()) // 2, y))

    def _draw_hud(self) -> None:
        snap = self.session.snapshot()
        left = f"LEVEL {snap.level}  ROUND {snap.round}/{ROUNDS_PER_LEVEL}"
        right = f"COMBO {snap.combo}{'  FEVER' if snap.is_fever else ''}  COINS {self.session.store.coins}"
        self.screen.blit(self.hud_font.render(left, True, INK), (int(self.w * PADDING), 16))
        surf = self.hud_font.render(right, True, ACCENT)
        self.screen.blit(surf, (self.w - surf.get_width() - int(self.w * PADDING), 16))
        if snap.boss_stages_remaining:
            self._text(f"BOSS - {snap.boss_stages_remaining} stage(s) left", 48, color=ACCENT)
        self.time_bar.draw(snap.time, f"{snap.time:0.1f}s")

    def draw(self) -> None:
        self.screen.fill(self._background())
        s = self.session
        phase = s.phase

        if phase is SessionPhase.LEVEL_INTRO:
            cfg = s.level_cfg
            self._text(f"LEVEL {s.state.current_level} - {cfg.theme.name}", self.h // 3, font=self.banner_font)
            stage = 1 if cfg.is_boss else None
            self._text(rule_text(cfg.rounds[0].rule_type, cfg.is_boss, stage), self.h // 3 + 60)
            self._text("ENTER to start", self.h // 3 + 110, color=ACCENT)
        elif phase is SessionPhase.ROUND_ACTIVE and s.challenge is not None:
            self._text(s.challenge.rule_text, int(self.h * 0.1), font=self.banner_font)
            self.board.draw(
                s.challenge,
                selected=self.selection,
                hidden=self.hidden,
                reveal=self.now() < self.memory_until,
                show_values=True,
            )
        elif phase is SessionPhase.ROUND_RESOLVED:
            self._text("ROUND CLEAR - ENTER for the next one", self.h // 2, font=self.banner_font)
        elif phase is SessionPhase.PERK_SELECTION:
            self._text("CHOOSE A PERK", self.h // 4, font=self.banner_font)
            for i, perk in enumerate(s.offered_perks):
                kind = "permanent" if perk.is_permanent else "temporary"
                self._text(f"{i + 1}. {perk.name} ({kind}) - {perk.description}", self.h // 4 + 70 + i * 44)
        elif phase is SessionPhase.GAME_OVER:
            self._text(self.final_text, self.h // 3, font=self.banner_font)
            self._text(f"Best level: {s.store.max_reached_level}", self.h // 3 + 60)
            self._text("SPACE to play again", self.h // 3 + 110, color=ACCENT)

        if phase is not SessionPhase.GAME_OVER:
            self._draw_hud()
        pygame.display.flip()


__all__ = ["Game"]
