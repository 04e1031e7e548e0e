from __future__ import annotations

import logging
import os
import sys

import pygame

from .config import CFG
from .constants import FPS
from .game import Game
from .input_queue import InputQueue


# ============================== MAIN LOOP ============================== #
def main():
    logging.basicConfig(
        level=os.environ.get("GRIDRUSH_LOG", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    pygame.init()
    pygame.key.set_repeat()
    fullscreen = bool(CFG.get("display", {}).get("fullscreen", False))
    screen = pygame.display.set_mode((1, 1))  # placeholder until the real mode is set
    game = Game(screen)
    game._set_display_mode(fullscreen)
    pygame.display.set_caption("Grid Rush")
    iq = InputQueue()

    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit(0)
            game.handle_event(event, iq)
        game.update(iq)
        game.draw()
        game.clock.tick(int(CFG.get("display", {}).get("fps", FPS)))

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pygame.quit(); sys.exit(0)
