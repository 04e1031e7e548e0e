from enum import Enum


class RuleType(str, Enum):
    FIND_NUMBER    = "find_number"
    MATH_CHALLENGE = "math_challenge"
    MEMORY_TEST    = "memory_test"
    SEQUENCE_ORDER = "sequence_order"
    INVERSE_LOGIC  = "inverse_logic"


class SessionPhase(str, Enum):
    LEVEL_INTRO    = "LEVEL_INTRO"
    ROUND_ACTIVE   = "ROUND_ACTIVE"
    ROUND_RESOLVED = "ROUND_RESOLVED"
    LEVEL_COMPLETE = "LEVEL_COMPLETE"
    PERK_SELECTION = "PERK_SELECTION"
    GAME_OVER      = "GAME_OVER"
