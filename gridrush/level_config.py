from __future__ import annotations

import random
from typing import List, Optional

from .constants import BOSS_EVERY, LEVEL_BONUS_TIME, ROUNDS_PER_LEVEL
from .enums import RuleType
from .models import GridSize, LevelConfig, RoundConfig, ThemeConfig, ValueRange


THEMES = {
    "CYBER":  ThemeConfig("Cyber Space",    0x000B1E, "#00d2ff", "#ff00ff"),
    "STEAM":  ThemeConfig("Steam Works",    0x2C1E14, "#e67e22", "#f1c40f"),
    "MEMORY": ThemeConfig("Memory Maze",    0x2D0A3D, "#e91e63", "#ff6ec7"),
    "ORDER":  ThemeConfig("Order Workshop", 0x0D3D2D, "#00ff9f", "#39cccc"),
    "VOID":   ThemeConfig("Endless Void",   0x0B0014, "#b10dc9", "#f012be"),
}

# (last level of the bracket, value); anything past the table uses the fallback
_THEME_BRACKETS = [(5, "CYBER"), (10, "STEAM"), (15, "MEMORY"), (20, "ORDER")]
_RULE_BRACKETS = [
    (5, RuleType.FIND_NUMBER),
    (10, RuleType.MATH_CHALLENGE),
    (15, RuleType.MEMORY_TEST),
    (20, RuleType.SEQUENCE_ORDER),
]
_GRID_BRACKETS = [(3, (3, 3)), (6, (3, 4)), (10, (4, 4)), (15, (4, 5)), (20, (5, 5)), (30, (5, 6))]
_VALUE_BRACKETS = [(5, (1, 50)), (10, (1, 99)), (20, (1, 199))]


def _check_level(level: int) -> None:
    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")


def is_boss_level(level: int) -> bool:
    return level % BOSS_EVERY == 0


def theme_for_level(level: int) -> ThemeConfig:
    for last, key in _THEME_BRACKETS:
        if level <= last:
            return THEMES[key]
    return THEMES["VOID"]


def rule_type_for_level(level: int, rng=None) -> RuleType:
    """Rule for a level; past the scripted brackets every call draws again."""
    for last, rule in _RULE_BRACKETS:
        if level <= last:
            return rule
    rng = rng or random
    return rng.choice(all_rule_types())


def grid_size_for_level(level: int) -> GridSize:
    for last, (rows, cols) in _GRID_BRACKETS:
        if level <= last:
            return GridSize(rows, cols)
    return GridSize(6, 6)


def value_range_for_level(level: int) -> ValueRange:
    for last, (lo, hi) in _VALUE_BRACKETS:
        if level <= last:
            return ValueRange(lo, hi)
    return ValueRange(1, 999)


def get_level_config(level: int, rng=None) -> LevelConfig:
    _check_level(level)
    boss = is_boss_level(level)
    rule = rule_type_for_level(level, rng)
    grid = grid_size_for_level(level)
    values = value_range_for_level(level)

    rounds = [
        RoundConfig(
            round_number=n,
            grid_size=grid,
            rule_type=rule,
            is_boss=boss,
            value_range=values,
            boss_stage=n if boss else None,
        )
        for n in range(1, ROUNDS_PER_LEVEL + 1)
    ]
    return LevelConfig(
        level=level,
        rounds=rounds,
        is_boss=boss,
        theme=theme_for_level(level),
        bonus_time=LEVEL_BONUS_TIME,
    )


def rule_text(rule_type: RuleType, is_boss: bool = False, stage: Optional[int] = None) -> str:
    if is_boss and stage:
        return _boss_rule_text(rule_type, stage)
    return {
        RuleType.FIND_NUMBER: "Find the largest number",
        RuleType.MATH_CHALLENGE: "Find the equation equal to the target",
        RuleType.MEMORY_TEST: "Remember the flashing numbers",
        RuleType.SEQUENCE_ORDER: "Tap the numbers from smallest to largest",
        RuleType.INVERSE_LOGIC: "Find the second largest number",
    }.get(rule_type, "Complete the challenge")


def _boss_rule_text(rule_type: RuleType, stage: int) -> str:
    if rule_type is RuleType.FIND_NUMBER:
        return f"Find the number ranked {stage} from the top!"
    if rule_type is RuleType.MATH_CHALLENGE:
        return f"Boss {stage}/3: find the equation!"
    if rule_type is RuleType.MEMORY_TEST:
        return "Boss: remember 5 numbers!"
    if rule_type is RuleType.SEQUENCE_ORDER:
        return "Boss: order 5 numbers!"
    if rule_type is RuleType.INVERSE_LOGIC:
        return f"Find the number ranked {stage + 1} from the top!"
    return f"Boss stage {stage}/3"


def all_themes() -> List[ThemeConfig]:
    return list(THEMES.values())


def all_rule_types() -> List[RuleType]:
    return list(RuleType)


__all__ = [
    "THEMES",
    "is_boss_level",
    "theme_for_level",
    "rule_type_for_level",
    "grid_size_for_level",
    "value_range_for_level",
    "get_level_config",
    "rule_text",
    "all_themes",
    "all_rule_types",
]
