from __future__ import annotations

from typing import Dict, Optional

from .constants import COMBO_MILESTONE_AFTER_LAST, COMBO_MULTIPLIERS, COMBO_THRESHOLDS
from .events import ComboBroken, ComboMilestone, ComboUpdated
from .input_queue import EventQueue


class ComboManager:
    """Consecutive correct-answer streak and the coin multiplier it drives.

    One instance lives for the whole process; the session calls ``reset()``
    at the start of every run so nothing leaks between runs.
    """

    def __init__(self, events: Optional[EventQueue] = None) -> None:
        self.events = events if events is not None else EventQueue()
        self.current_combo = 0
        self.max_combo = 0

    def add_combo(self) -> None:
        self.current_combo += 1
        if self.current_combo > self.max_combo:
            self.max_combo = self.current_combo

        # increments are always +1, so a milestone is only hit by landing on it
        if self.current_combo in COMBO_THRESHOLDS:
            self.events.push(
                ComboMilestone(self.current_combo, self.effect_level, self.coin_multiplier)
            )
        self._push_updated()

    def reset_combo(self) -> None:
        was_combo = self.current_combo > 0
        self.current_combo = 0
        if was_combo:
            self.events.push(ComboBroken(self.max_combo))
        self._push_updated()

    def _push_updated(self) -> None:
        self.events.push(
            ComboUpdated(self.current_combo, self.max_combo, self.coin_multiplier, self.effect_level)
        )

    @property
    def effect_level(self) -> int:
        return sum(1 for t in COMBO_THRESHOLDS if self.current_combo >= t)

    @property
    def coin_multiplier(self) -> float:
        return COMBO_MULTIPLIERS[self.effect_level]

    @property
    def is_fever(self) -> bool:
        return self.effect_level == len(COMBO_THRESHOLDS)

    @property
    def next_milestone(self) -> int:
        for threshold in COMBO_THRESHOLDS:
            if self.current_combo < threshold:
                return threshold
        return COMBO_MILESTONE_AFTER_LAST

    def combo_info(self) -> Dict[str, float]:
        return {
            "current": self.current_combo,
            "max": self.max_combo,
            "multiplier": self.coin_multiplier,
            "effect_level": self.effect_level,
            "next_milestone": self.next_milestone,
        }

    def reset_max_combo(self) -> None:
        self.max_combo = 0

    def reset(self) -> None:
        self.current_combo = 0
        self.max_combo = 0


__all__ = ["ComboManager"]
