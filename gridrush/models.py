from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from .enums import RuleType


@dataclass(frozen=True)
class ThemeConfig:
    name: str
    bg_color: int
    text_color: str
    accent_color: str


@dataclass(frozen=True)
class GridSize:
    rows: int
    cols: int

    @property
    def cells(self) -> int:
        return self.rows * self.cols


@dataclass(frozen=True)
class ValueRange:
    min: int
    max: int


@dataclass
class RoundConfig:
    round_number: int
    grid_size: GridSize
    rule_type: RuleType
    is_boss: bool
    value_range: ValueRange
    boss_stage: Optional[int] = None


@dataclass
class LevelConfig:
    level: int
    rounds: List[RoundConfig]
    is_boss: bool
    theme: ThemeConfig
    bonus_time: float


Item = Union[int, str]


@dataclass
class ChallengeData:
    items: List[Item]
    correct_indices: List[int]
    rule_text: str
    rule_type: Optional[RuleType] = None
    target_value: Optional[int] = None
    memory_phase: bool = False
    sequence_mode: bool = False
    required_sequence: Optional[List[int]] = None
    hide_wrong_count: int = 0

    @property
    def multi_select(self) -> bool:
        return self.memory_phase or self.sequence_mode

    @property
    def selection_size(self) -> int:
        return len(self.correct_indices) if self.multi_select else 1


__all__ = [
    "ThemeConfig",
    "GridSize",
    "ValueRange",
    "RoundConfig",
    "LevelConfig",
    "Item",
    "ChallengeData",
]
