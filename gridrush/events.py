from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .enums import SessionPhase


# ---- Inbound signals (presentation -> session) ----

@dataclass(frozen=True)
class StartLevel:
    pass


@dataclass(frozen=True)
class NextRound:
    pass


@dataclass(frozen=True)
class Restart:
    pass


@dataclass(frozen=True)
class CellSelected:
    index: int


@dataclass(frozen=True)
class SequenceSelected:
    indices: Tuple[int, ...]


@dataclass(frozen=True)
class PerkChosen:
    perk: str


# ---- Outbound events (core -> presentation) ----

@dataclass(frozen=True)
class PhaseChanged:
    previous: Optional[SessionPhase]
    phase: SessionPhase


@dataclass(frozen=True)
class ChallengeReady:
    level: int
    round: int
    boss_stage: Optional[int]


@dataclass(frozen=True)
class AnswerChecked:
    correct: bool


@dataclass(frozen=True)
class TimePenalty:
    seconds: float


@dataclass(frozen=True)
class TimeBonus:
    seconds: float


@dataclass(frozen=True)
class ComboUpdated:
    combo: int
    max_combo: int
    multiplier: float
    effect_level: int


@dataclass(frozen=True)
class ComboMilestone:
    combo: int
    level: int
    multiplier: float


@dataclass(frozen=True)
class ComboBroken:
    max_combo: int


@dataclass(frozen=True)
class PerkApplied:
    perk: str
    permanent: bool


@dataclass(frozen=True)
class ShieldUsed:
    kind: str  # "temporary" | "permanent"


@dataclass(frozen=True)
class CoinsAwarded:
    amount: int
    level: int


@dataclass(frozen=True)
class LevelCompleted:
    level: int
    perfect: bool
    coins: int
    time_bonus: float


@dataclass(frozen=True)
class PerkOptionsOffered:
    options: Tuple[str, ...]


@dataclass(frozen=True)
class GameOver:
    final_level: int
    max_combo: int
    coins_earned: int


__all__ = [
    "StartLevel",
    "NextRound",
    "Restart",
    "CellSelected",
    "SequenceSelected",
    "PerkChosen",
    "PhaseChanged",
    "ChallengeReady",
    "AnswerChecked",
    "TimePenalty",
    "TimeBonus",
    "ComboUpdated",
    "ComboMilestone",
    "ComboBroken",
    "PerkApplied",
    "ShieldUsed",
    "CoinsAwarded",
    "LevelCompleted",
    "PerkOptionsOffered",
    "GameOver",
]
