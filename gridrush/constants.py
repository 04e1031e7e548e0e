from __future__ import annotations

from .config import CFG


# --- Palette ----------------------------------------------------------------
BG = (8, 10, 12)                 # fallback background when no theme is active
INK = (235, 235, 235)            # primary text colour
ACCENT = (255, 210, 90)          # accent colour for highlights
CELL_BG = (32, 36, 44)
CELL_SELECTED = (70, 110, 170)
CELL_REVEAL = (170, 60, 150)
CELL_HIDDEN = (18, 20, 24)

# --- Layout ----------------------------------------------------------------
PADDING = 0.06
GAP = 0.02
FPS = int(CFG.get("display", {}).get("fps", 60))
WINDOWED_DEFAULT_SIZE = (720, 1280)
UI_RADIUS = 8
HUD_FONT_SIZE = 28
CELL_FONT_SIZE = 34
BANNER_FONT_SIZE = 40

TIMER_BAR_WIDTH_FACTOR = 0.8
TIMER_BAR_HEIGHT = 18
TIMER_BOTTOM_MARGIN_FACTOR = 0.05
TIMER_BAR_BG = (40, 40, 48)
TIMER_BAR_FILL = (90, 200, 255)
TIMER_BAR_WARN_COLOR = (255, 170, 60)
TIMER_BAR_CRIT_COLOR = (235, 60, 60)
TIMER_BAR_WARN_TIME = 20.0       # seconds left
TIMER_BAR_CRIT_TIME = 10.0
TIMER_BAR_FULL_SCALE = 120.0     # seconds mapped to a full bar

# --- Level progression ------------------------------------------------------
ROUNDS_PER_LEVEL = 3
BOSS_EVERY = 5
LEVEL_BONUS_TIME = float(CFG["session"]["level_bonus_time"])

# --- Rewards ----------------------------------------------------------------
BASE_COINS = int(CFG["session"]["base_coins"])
COINS_PER_LEVEL = int(CFG["session"]["coins_per_level"])
BOSS_COIN_FACTOR = int(CFG["session"]["boss_coin_factor"])
FEVER_MULTIPLIER = float(CFG["session"]["fever_multiplier"])
PERK_OPTION_COUNT = int(CFG["session"]["perk_option_count"])
AUTO_ADVANCE_ROUNDS = bool(CFG["session"]["auto_advance_rounds"])
MEMORY_PREVIEW_SEC = float(CFG["session"]["memory_preview_sec"])

# --- Combo brackets ---------------------------------------------------------
COMBO_THRESHOLDS = (10, 20, 30, 50)
COMBO_MULTIPLIERS = (1.0, 1.5, 2.0, 2.5, 3.0)
COMBO_MILESTONE_AFTER_LAST = 100

# --- Persistence ------------------------------------------------------------
SAVE_KEY = "number_game_roguelite_v1"
SAVE_PATH = str(CFG["save"]["path"])
