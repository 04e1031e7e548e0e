from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Union

from .events import PerkApplied, ShieldUsed
from .input_queue import EventQueue

logger = logging.getLogger(__name__)


class PerkType(str, Enum):
    # permanent
    GREEDY_HAND     = "greedy_hand"
    TIME_MASTER     = "time_master"
    SHIELD          = "shield"
    PERFECT_REWARD  = "perfect_reward"
    WINNING_STREAK  = "winning_streak"
    VISUAL_AID      = "visual_aid"
    # temporary
    TEMP_TIME_BONUS = "temp_time_bonus"
    TEMP_COIN_BONUS = "temp_coin_bonus"
    TEMP_SHIELD     = "temp_shield"
    TEMP_HIDE_WRONG = "temp_hide_wrong"
    TEMP_COINS      = "temp_coins"


@dataclass(frozen=True)
class PerkConfig:
    type: PerkType
    name: str
    description: str
    is_permanent: bool
    value: Optional[float] = None


@dataclass
class TempPerkState:
    type: PerkType
    activated: bool
    remaining_uses: Optional[int] = None
    duration: Optional[int] = None


class LevelEndBonus(NamedTuple):
    time_bonus: float
    coin_bonus: float


PERK_CONFIGS: Dict[PerkType, PerkConfig] = {
    cfg.type: cfg
    for cfg in (
        PerkConfig(PerkType.GREEDY_HAND, "Greedy Hand", "Level coin reward +50%", True, 50),
        PerkConfig(PerkType.TIME_MASTER, "Time Master", "Initial time +15s", True, 15),
        PerkConfig(PerkType.SHIELD, "Shield", "Blocks the penalty of one wrong tap per level", True),
        PerkConfig(PerkType.PERFECT_REWARD, "Perfect Reward", "+5s for every level without mistakes", True, 5),
        PerkConfig(PerkType.WINNING_STREAK, "Winning Streak", "+30% coins for every level without mistakes", True, 30),
        PerkConfig(PerkType.VISUAL_AID, "Visual Aid", "Hide 2 wrong cells in every round", True, 2),
        PerkConfig(PerkType.TEMP_TIME_BONUS, "Time Boost", "+10s after three perfect levels in a row", False, 10),
        PerkConfig(PerkType.TEMP_COIN_BONUS, "Golden Trio", "+100% coins after three perfect levels in a row", False, 100),
        PerkConfig(PerkType.TEMP_SHIELD, "Temporary Shield", "Blocks the penalty of 3 wrong taps", False, 3),
        PerkConfig(PerkType.TEMP_HIDE_WRONG, "X-Ray Eyes", "Hide 3 wrong cells in the next round", False, 3),
        PerkConfig(PerkType.TEMP_COINS, "Windfall", "Get 100 coins right away", False, 100),
    )
}

STREAK_PERKS = (PerkType.TEMP_TIME_BONUS, PerkType.TEMP_COIN_BONUS)
STREAK_LENGTH = 3


def perk_value(perk: PerkType) -> float:
    return float(PERK_CONFIGS[perk].value or 0)


class PerkManager:
    """Permanent and temporary modifiers for one player.

    ``reset()`` starts a new run but keeps permanent perks, ``full_reset()``
    forgets everything.
    """

    def __init__(self, events: Optional[EventQueue] = None) -> None:
        self.events = events if events is not None else EventQueue()
        self.permanent_perks: set[PerkType] = set()
        self.temporary_perks: Dict[PerkType, TempPerkState] = {}
        self.perfect_levels = 0
        self.shield_used_this_level = False

    # ---- Acquisition ----

    def apply_perk(self, perk: Union[PerkType, str]) -> int:
        """Install a perk; returns coins to credit immediately (windfall perks)."""
        perk = PerkType(perk)
        config = PERK_CONFIGS[perk]
        coins = 0
        if config.is_permanent:
            self.permanent_perks.add(perk)
        else:
            coins = self._apply_temporary(perk)
        self.events.push(PerkApplied(perk.value, config.is_permanent))
        logger.info("perk applied: %s", perk.value)
        return coins

    def _apply_temporary(self, perk: PerkType) -> int:
        if perk in STREAK_PERKS:
            # pays out only after a run of perfect levels
            self.temporary_perks[perk] = TempPerkState(perk, activated=False, duration=STREAK_LENGTH)
        elif perk is PerkType.TEMP_SHIELD:
            uses = int(perk_value(perk) or 3)
            self.temporary_perks[perk] = TempPerkState(perk, activated=True, remaining_uses=uses)
        elif perk is PerkType.TEMP_HIDE_WRONG:
            self.temporary_perks[perk] = TempPerkState(perk, activated=True, remaining_uses=1)
        elif perk is PerkType.TEMP_COINS:
            return int(perk_value(perk) or 100)
        return 0

    # ---- Queries ----

    def has_perk(self, perk: Union[PerkType, str]) -> bool:
        perk = PerkType(perk)
        return perk in self.permanent_perks or perk in self.temporary_perks

    def has_active_temp_perk(self, perk: Union[PerkType, str]) -> bool:
        state = self.temporary_perks.get(PerkType(perk))
        return state is not None and state.activated

    def initial_time_bonus(self) -> float:
        if PerkType.TIME_MASTER in self.permanent_perks:
            return perk_value(PerkType.TIME_MASTER)
        return 0.0

    def coin_multiplier(self) -> float:
        multiplier = 1.0
        if PerkType.GREEDY_HAND in self.permanent_perks:
            multiplier += perk_value(PerkType.GREEDY_HAND) / 100
        return multiplier

    # ---- Shields ----

    def _temp_shield(self) -> Optional[TempPerkState]:
        state = self.temporary_perks.get(PerkType.TEMP_SHIELD)
        if state and state.remaining_uses and state.remaining_uses > 0:
            return state
        return None

    def can_use_shield(self) -> bool:
        if PerkType.SHIELD in self.permanent_perks and not self.shield_used_this_level:
            return True
        return self._temp_shield() is not None

    def use_shield(self) -> bool:
        temp = self._temp_shield()
        if temp is not None:
            temp.remaining_uses -= 1
            if temp.remaining_uses <= 0:
                del self.temporary_perks[PerkType.TEMP_SHIELD]
            self.events.push(ShieldUsed("temporary"))
            return True
        if PerkType.SHIELD in self.permanent_perks and not self.shield_used_this_level:
            self.shield_used_this_level = True
            self.events.push(ShieldUsed("permanent"))
            return True
        return False

    # ---- Hidden cells ----

    def hide_wrong_count(self) -> int:
        """Cells to hide for the next challenge; consumes one temporary reveal."""
        count = 0
        if PerkType.VISUAL_AID in self.permanent_perks:
            count += int(perk_value(PerkType.VISUAL_AID))
        state = self.temporary_perks.get(PerkType.TEMP_HIDE_WRONG)
        if state and state.remaining_uses and state.remaining_uses > 0:
            count += int(perk_value(PerkType.TEMP_HIDE_WRONG))
            state.remaining_uses -= 1
            if state.remaining_uses <= 0:
                del self.temporary_perks[PerkType.TEMP_HIDE_WRONG]
        return count

    # ---- Level lifecycle ----

    def on_level_end(self, is_perfect: bool) -> LevelEndBonus:
        time_bonus = 0.0
        coin_bonus = 0.0
        self.shield_used_this_level = False

        if not is_perfect:
            self.perfect_levels = 0
            return LevelEndBonus(time_bonus, coin_bonus)

        self.perfect_levels += 1
        if PerkType.PERFECT_REWARD in self.permanent_perks:
            time_bonus += perk_value(PerkType.PERFECT_REWARD)
        if PerkType.WINNING_STREAK in self.permanent_perks:
            coin_bonus += perk_value(PerkType.WINNING_STREAK) / 100

        if self.perfect_levels >= STREAK_LENGTH:
            state = self.temporary_perks.get(PerkType.TEMP_TIME_BONUS)
            if state and not state.activated:
                time_bonus += perk_value(PerkType.TEMP_TIME_BONUS)
                del self.temporary_perks[PerkType.TEMP_TIME_BONUS]
            state = self.temporary_perks.get(PerkType.TEMP_COIN_BONUS)
            if state and not state.activated:
                coin_bonus += perk_value(PerkType.TEMP_COIN_BONUS) / 100
                del self.temporary_perks[PerkType.TEMP_COIN_BONUS]

        return LevelEndBonus(time_bonus, coin_bonus)

    def generate_perk_options(self, count: int = 3, rng=None) -> List[PerkConfig]:
        rng = rng or random
        available = [
            cfg for cfg in PERK_CONFIGS.values()
            if not (cfg.is_permanent and cfg.type in self.permanent_perks)
        ]
        return rng.sample(available, min(count, len(available)))

    def active_perks(self) -> Dict[str, List[PerkConfig]]:
        return {
            "permanent": [PERK_CONFIGS[p] for p in PERK_CONFIGS if p in self.permanent_perks],
            "temporary": [PERK_CONFIGS[p] for p in self.temporary_perks],
        }

    def reset(self) -> None:
        self.temporary_perks.clear()
        self.perfect_levels = 0
        self.shield_used_this_level = False

    def full_reset(self) -> None:
        self.reset()
        self.permanent_perks.clear()


__all__ = [
    "PerkType",
    "PerkConfig",
    "TempPerkState",
    "LevelEndBonus",
    "PERK_CONFIGS",
    "STREAK_PERKS",
    "STREAK_LENGTH",
    "perk_value",
    "PerkManager",
]
