from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from .enums import RuleType
from .models import ChallengeData, RoundConfig, ValueRange

logger = logging.getLogger(__name__)


class UnknownRuleError(LookupError):
    pass


# ---- Shared helpers ----

def generate_random_numbers(rng, count: int, lo: int, hi: int, unique: bool = False) -> List[int]:
    numbers: List[int] = []
    used: set[int] = set()
    span = hi - lo + 1
    for _ in range(count):
        num = rng.randint(lo, hi)
        # once the range is used up duplicates are allowed
        while unique and num in used and len(used) < span:
            num = rng.randint(lo, hi)
        numbers.append(num)
        if unique:
            used.add(num)
    return numbers


def _ranked(numbers: Sequence[int], descending: bool) -> List[int]:
    # sorted() is stable, so equal values keep their grid order
    return sorted(range(len(numbers)), key=lambda i: -numbers[i] if descending else numbers[i])


def find_nth_largest_index(numbers: Sequence[int], n: int) -> int:
    order = _ranked(numbers, descending=True)
    return order[min(max(n, 1), len(order)) - 1]


def find_nth_smallest_index(numbers: Sequence[int], n: int) -> int:
    order = _ranked(numbers, descending=False)
    return order[min(max(n, 1), len(order)) - 1]


def select_random_indices(rng, total: int, count: int) -> List[int]:
    available = list(range(total))
    picked: List[int] = []
    for _ in range(min(count, total)):
        picked.append(available.pop(rng.randint(0, len(available) - 1)))
    return picked


def random_bool(rng) -> bool:
    return rng.random() < 0.5


def evaluate_equation(text: str) -> int:
    for op in ("+", "-", "×"):
        left, sep, right = text.partition(op)
        if sep and left and right:
            a, b = int(left), int(right)
            if op == "+":
                return a + b
            if op == "-":
                return a - b
            return a * b
    raise ValueError(f"not an equation: {text!r}")


def pick_hidden_indices(challenge: ChallengeData, rng=None) -> List[int]:
    """Wrong cells the presentation layer may blank out for the hide-wrong perks."""
    rng = rng or random
    correct = set(challenge.correct_indices)
    wrong = [i for i in range(len(challenge.items)) if i not in correct]
    count = max(0, min(challenge.hide_wrong_count, len(wrong)))
    return sorted(rng.sample(wrong, count)) if count else []


# ---- Rules ----

class RuleBase(ABC):
    type: RuleType

    @abstractmethod
    def generate_challenge(self, config: RoundConfig, hide_wrong_count: int = 0, *, rng=None) -> ChallengeData:
        ...

    @abstractmethod
    def generate_boss_challenge(self, config: RoundConfig, stage: int, *, rng=None) -> ChallengeData:
        ...

    @abstractmethod
    def check_answer(self, user_input, challenge: ChallengeData) -> bool:
        ...


class _SingleCellRule(RuleBase):
    def check_answer(self, user_input, challenge: ChallengeData) -> bool:
        return user_input in challenge.correct_indices


class FindNumberRule(_SingleCellRule):
    type = RuleType.FIND_NUMBER

    def _build(self, config: RoundConfig, rank: int, rng, boss: bool) -> ChallengeData:
        vr = config.value_range
        items = generate_random_numbers(rng, config.grid_size.cells, vr.min, vr.max)
        find_max = random_bool(rng)
        idx = find_nth_largest_index(items, rank) if find_max else find_nth_smallest_index(items, rank)
        word = "largest" if find_max else "smallest"
        if boss:
            text = f"Boss: find the number ranked {rank} {word}!"
        else:
            text = f"Find the {word} number"
        return ChallengeData(items=items, correct_indices=[idx], rule_text=text, rule_type=self.type)

    def generate_challenge(self, config, hide_wrong_count=0, *, rng=None):
        return self._build(config, 1, rng or random, boss=False)

    def generate_boss_challenge(self, config, stage, *, rng=None):
        return self._build(config, stage, rng or random, boss=True)


class InverseLogicRule(_SingleCellRule):
    type = RuleType.INVERSE_LOGIC

    def _build(self, config: RoundConfig, rank: int, rng, boss: bool) -> ChallengeData:
        vr = config.value_range
        items = generate_random_numbers(rng, config.grid_size.cells, vr.min, vr.max)
        find_largest = random_bool(rng)
        if find_largest:
            idx = find_nth_largest_index(items, rank)
        else:
            idx = find_nth_smallest_index(items, rank)
        word = "largest" if find_largest else "smallest"
        if boss:
            text = f"Boss: find the number ranked {rank} {word}!"
        else:
            text = f"Find the number ranked {rank} {word}"
        return ChallengeData(items=items, correct_indices=[idx], rule_text=text, rule_type=self.type)

    def generate_challenge(self, config, hide_wrong_count=0, *, rng=None):
        return self._build(config, 2, rng or random, boss=False)

    def generate_boss_challenge(self, config, stage, *, rng=None):
        # stage 1..3 asks for rank 2..4
        return self._build(config, stage + 1, rng or random, boss=True)


class MathChallengeRule(_SingleCellRule):
    type = RuleType.MATH_CHALLENGE
    operators = ("+", "-", "×")
    target_range = (10, 59)
    boss_target_range = (20, 119)
    distractor_operand_max = 50

    def _build(self, config: RoundConfig, target_range: Tuple[int, int], rng, stage: Optional[int]) -> ChallengeData:
        total = config.grid_size.cells
        target = rng.randint(*target_range)
        correct_index = rng.randint(0, total - 1)
        items: List[str] = []
        for i in range(total):
            if i == correct_index:
                items.append(self.correct_equation(target, config.value_range, rng))
            else:
                items.append(self.wrong_equation(target, rng))
        if stage is None:
            text = f"Find the equation equal to {target}"
        else:
            text = f"Boss {stage}/3: find the equation equal to {target}!"
        return ChallengeData(
            items=items,
            correct_indices=[correct_index],
            rule_text=text,
            rule_type=self.type,
            target_value=target,
        )

    def generate_challenge(self, config, hide_wrong_count=0, *, rng=None):
        return self._build(config, self.target_range, rng or random, None)

    def generate_boss_challenge(self, config, stage, *, rng=None):
        return self._build(config, self.boss_target_range, rng or random, stage)

    @staticmethod
    def factor_pairs(n: int) -> List[Tuple[int, int]]:
        pairs = []
        i = 2
        while i * i <= n:
            if n % i == 0:
                pairs.append((i, n // i))
            i += 1
        return pairs

    @staticmethod
    def _addition(target: int, rng) -> str:
        a = rng.randint(1, max(1, target - 1))
        return f"{a}+{target - a}"

    def correct_equation(self, target: int, value_range: ValueRange, rng) -> str:
        op = rng.choice(self.operators)
        if op == "+":
            return self._addition(target, rng)
        if op == "-":
            b = rng.randint(1, max(1, value_range.max - target))
            return f"{target + b}-{b}"
        pairs = self.factor_pairs(target)
        if not pairs:
            return self._addition(target, rng)
        a, b = rng.choice(pairs)
        return f"{a}×{b}"

    def wrong_equation(self, target: int, rng) -> str:
        while True:
            op = rng.choice(self.operators)
            a = rng.randint(1, self.distractor_operand_max)
            b = rng.randint(1, self.distractor_operand_max)
            text = f"{a}{op}{b}"
            if evaluate_equation(text) != target:
                return text


class MemoryTestRule(RuleBase):
    type = RuleType.MEMORY_TEST
    memory_count = 3
    boss_memory_count = 5

    def _build(self, config: RoundConfig, count: int, rng, boss: bool) -> ChallengeData:
        vr = config.value_range
        total = config.grid_size.cells
        items = generate_random_numbers(rng, total, vr.min, vr.max, unique=True)
        indices = select_random_indices(rng, total, count)
        text = f"Remember the {count} flashing numbers!"
        if boss:
            text = "Boss: " + text
        return ChallengeData(
            items=items,
            correct_indices=indices,
            rule_text=text,
            rule_type=self.type,
            memory_phase=True,
        )

    def generate_challenge(self, config, hide_wrong_count=0, *, rng=None):
        return self._build(config, self.memory_count, rng or random, boss=False)

    def generate_boss_challenge(self, config, stage, *, rng=None):
        return self._build(config, self.boss_memory_count, rng or random, boss=True)

    def check_answer(self, user_input, challenge: ChallengeData) -> bool:
        picked = list(user_input)
        if len(picked) != len(challenge.correct_indices):
            return False
        if len(set(picked)) != len(set(challenge.correct_indices)):
            return False
        return set(picked) == set(challenge.correct_indices)


class SequenceOrderRule(RuleBase):
    type = RuleType.SEQUENCE_ORDER
    sequence_count = 3
    boss_sequence_count = 5

    def _build(self, config: RoundConfig, count: int, rng, boss: bool) -> ChallengeData:
        vr = config.value_range
        items = generate_random_numbers(rng, config.grid_size.cells, vr.min, vr.max)
        ordered = _ranked(items, descending=False)[:count]
        text = f"Tap {count} numbers from smallest to largest"
        if boss:
            text = f"Boss: {text}!"
        return ChallengeData(
            items=items,
            correct_indices=list(ordered),
            rule_text=text,
            rule_type=self.type,
            sequence_mode=True,
            required_sequence=list(ordered),
        )

    def generate_challenge(self, config, hide_wrong_count=0, *, rng=None):
        return self._build(config, self.sequence_count, rng or random, boss=False)

    def generate_boss_challenge(self, config, stage, *, rng=None):
        return self._build(config, self.boss_sequence_count, rng or random, boss=True)

    def check_answer(self, user_input, challenge: ChallengeData) -> bool:
        if not challenge.required_sequence:
            return False
        return list(user_input) == list(challenge.required_sequence)


# ---- Registry ----

class _RuleRegistry:
    def __init__(self) -> None:
        self._rules: Dict[RuleType, RuleBase] = {}

    def register(self, rule: RuleBase) -> None:
        self._rules[rule.type] = rule

    def get(self, rule_type: RuleType) -> Optional[RuleBase]:
        return self._rules.get(rule_type)

    def types(self) -> List[RuleType]:
        return list(self._rules.keys())


RULES = _RuleRegistry()
RULES.register(FindNumberRule())
RULES.register(MathChallengeRule())
RULES.register(MemoryTestRule())
RULES.register(SequenceOrderRule())
RULES.register(InverseLogicRule())


def get_rule(rule_type) -> RuleBase:
    rule = RULES.get(rule_type)
    if rule is None:
        raise UnknownRuleError(f"Unknown rule type: {rule_type!r}")
    return rule


def generate_challenge(config: RoundConfig, hide_wrong_count: int = 0, *, rng=None) -> ChallengeData:
    rule = get_rule(config.rule_type)
    if config.is_boss and config.boss_stage:
        challenge = rule.generate_boss_challenge(config, config.boss_stage, rng=rng)
    else:
        challenge = rule.generate_challenge(config, hide_wrong_count, rng=rng)
    challenge.hide_wrong_count = max(0, int(hide_wrong_count))
    logger.debug(
        "generated %s challenge (round %d, boss stage %s)",
        rule.type.value, config.round_number, config.boss_stage,
    )
    return challenge


def check_answer(rule_type, user_input, challenge: ChallengeData) -> bool:
    return get_rule(rule_type).check_answer(user_input, challenge)


__all__ = [
    "UnknownRuleError",
    "generate_random_numbers",
    "find_nth_largest_index",
    "find_nth_smallest_index",
    "select_random_indices",
    "random_bool",
    "evaluate_equation",
    "pick_hidden_indices",
    "RuleBase",
    "FindNumberRule",
    "MathChallengeRule",
    "MemoryTestRule",
    "SequenceOrderRule",
    "InverseLogicRule",
    "RULES",
    "get_rule",
    "generate_challenge",
    "check_answer",
]
