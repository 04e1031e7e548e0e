import random

import pytest

from conftest import ScriptedRng
from gridrush.enums import RuleType
from gridrush.models import ChallengeData, GridSize, RoundConfig, ValueRange
from gridrush.rules import (
    MathChallengeRule,
    UnknownRuleError,
    check_answer,
    evaluate_equation,
    find_nth_largest_index,
    find_nth_smallest_index,
    generate_challenge,
    generate_random_numbers,
    get_rule,
    pick_hidden_indices,
    select_random_indices,
)


def _round(rule_type: RuleType, *, boss: bool = False, stage=None, grid=(4, 4), values=(1, 99)) -> RoundConfig:
    return RoundConfig(
        round_number=stage or 1,
        grid_size=GridSize(*grid),
        rule_type=rule_type,
        is_boss=boss,
        value_range=ValueRange(*values),
        boss_stage=stage,
    )


def test_nth_extremes_keep_grid_order_on_ties() -> None:
    numbers = [5, 9, 9, 1]
    assert find_nth_largest_index(numbers, 1) == 1
    assert find_nth_largest_index(numbers, 2) == 2
    assert find_nth_largest_index(numbers, 3) == 0
    assert find_nth_smallest_index(numbers, 1) == 3
    assert find_nth_smallest_index(numbers, 2) == 0


def test_nth_extremes_clamp_rank() -> None:
    numbers = [4, 2, 8]
    assert find_nth_largest_index(numbers, 10) == 1
    assert find_nth_largest_index(numbers, 0) == 2
    assert find_nth_smallest_index(numbers, 10) == 2


def test_unique_numbers_allow_duplicates_once_range_is_exhausted(rng) -> None:
    numbers = generate_random_numbers(rng, 10, 1, 3, unique=True)
    assert len(numbers) == 10
    assert set(numbers[:3]) == {1, 2, 3}
    assert all(1 <= n <= 3 for n in numbers)


def test_select_random_indices_distinct_and_capped(rng) -> None:
    picked = select_random_indices(rng, 9, 5)
    assert len(set(picked)) == 5
    assert all(0 <= i < 9 for i in picked)
    assert sorted(select_random_indices(rng, 3, 10)) == [0, 1, 2]


def test_find_number_answer_is_the_extreme() -> None:
    for seed in range(30):
        ch = generate_challenge(_round(RuleType.FIND_NUMBER), rng=random.Random(seed))
        value = ch.items[ch.correct_indices[0]]
        if "largest" in ch.rule_text:
            assert value == max(ch.items)
        else:
            assert value == min(ch.items)
        assert check_answer(RuleType.FIND_NUMBER, ch.correct_indices[0], ch)


def test_find_number_boss_stage_is_the_rank() -> None:
    for stage in (1, 2, 3):
        for seed in range(10):
            ch = generate_challenge(_round(RuleType.FIND_NUMBER, boss=True, stage=stage), rng=random.Random(seed))
            value = ch.items[ch.correct_indices[0]]
            descending = "largest" in ch.rule_text
            assert sorted(ch.items, reverse=descending)[stage - 1] == value


def test_inverse_logic_ranks() -> None:
    for seed in range(20):
        ch = generate_challenge(_round(RuleType.INVERSE_LOGIC), rng=random.Random(seed))
        descending = "largest" in ch.rule_text
        assert sorted(ch.items, reverse=descending)[1] == ch.items[ch.correct_indices[0]]

    for stage in (1, 2, 3):
        ch = generate_challenge(_round(RuleType.INVERSE_LOGIC, boss=True, stage=stage), rng=random.Random(stage))
        descending = "largest" in ch.rule_text
        assert sorted(ch.items, reverse=descending)[stage] == ch.items[ch.correct_indices[0]]


def test_math_correct_cell_hits_target_and_distractors_miss() -> None:
    for seed in range(40):
        for cfg in (_round(RuleType.MATH_CHALLENGE), _round(RuleType.MATH_CHALLENGE, boss=True, stage=2)):
            ch = generate_challenge(cfg, rng=random.Random(seed))
            assert len(ch.items) == 16
            assert len(ch.correct_indices) == 1
            correct = ch.correct_indices[0]
            for i, equation in enumerate(ch.items):
                hits = evaluate_equation(equation) == ch.target_value
                assert hits == (i == correct)


def test_math_target_ranges() -> None:
    for seed in range(25):
        normal = generate_challenge(_round(RuleType.MATH_CHALLENGE), rng=random.Random(seed))
        boss = generate_challenge(_round(RuleType.MATH_CHALLENGE, boss=True, stage=1), rng=random.Random(seed))
        assert 10 <= normal.target_value <= 59
        assert 20 <= boss.target_value <= 119


def test_math_factor_pairs() -> None:
    assert MathChallengeRule.factor_pairs(12) == [(2, 6), (3, 4)]
    assert MathChallengeRule.factor_pairs(49) == [(7, 7)]
    assert MathChallengeRule.factor_pairs(13) == []


def test_math_prime_target_falls_back_to_addition() -> None:
    rule = MathChallengeRule()
    equation = rule.correct_equation(13, ValueRange(1, 99), ScriptedRng(ints=[4], choices=["×"]))
    assert equation == "4+9"


def test_math_subtraction_equation() -> None:
    rule = MathChallengeRule()
    equation = rule.correct_equation(30, ValueRange(1, 99), ScriptedRng(ints=[12], choices=["-"]))
    assert equation == "42-12"
    assert evaluate_equation(equation) == 30


def test_evaluate_equation() -> None:
    assert evaluate_equation("6×7") == 42
    assert evaluate_equation("3-40") == -37
    with pytest.raises(ValueError):
        evaluate_equation("42")


def test_memory_challenge_is_order_insensitive(rng) -> None:
    ch = generate_challenge(_round(RuleType.MEMORY_TEST), rng=rng)
    assert ch.memory_phase and ch.multi_select
    assert len(ch.correct_indices) == 3
    assert len(set(ch.items)) == len(ch.items)

    picked = list(ch.correct_indices)
    assert check_answer(RuleType.MEMORY_TEST, picked, ch)
    assert check_answer(RuleType.MEMORY_TEST, list(reversed(picked)), ch)
    assert not check_answer(RuleType.MEMORY_TEST, picked[:2], ch)
    assert not check_answer(RuleType.MEMORY_TEST, [picked[0], picked[0], picked[1]], ch)


def test_memory_boss_flashes_five(rng) -> None:
    ch = generate_challenge(_round(RuleType.MEMORY_TEST, boss=True, stage=3), rng=rng)
    assert len(ch.correct_indices) == 5
    assert ch.selection_size == 5


def test_sequence_challenge_is_order_sensitive(rng) -> None:
    ch = generate_challenge(_round(RuleType.SEQUENCE_ORDER), rng=rng)
    assert ch.sequence_mode and ch.multi_select
    seq = ch.required_sequence
    assert len(seq) == 3
    values = [ch.items[i] for i in seq]
    assert values == sorted(values)

    assert check_answer(RuleType.SEQUENCE_ORDER, seq, ch)
    assert not check_answer(RuleType.SEQUENCE_ORDER, list(reversed(seq)), ch)
    assert not check_answer(RuleType.SEQUENCE_ORDER, [seq[1], seq[0], seq[2]], ch)
    assert not check_answer(RuleType.SEQUENCE_ORDER, [seq[0], seq[2], seq[1]], ch)
    assert not check_answer(RuleType.SEQUENCE_ORDER, seq[:2], ch)


def test_sequence_picks_the_smallest_numbers() -> None:
    ch = ChallengeData(items=[], correct_indices=[], rule_text="")
    assert not check_answer(RuleType.SEQUENCE_ORDER, [], ch)

    ch = generate_challenge(_round(RuleType.SEQUENCE_ORDER, boss=True, stage=1), rng=random.Random(3))
    chosen = [ch.items[i] for i in ch.required_sequence]
    assert chosen == sorted(ch.items)[:5]


def test_unknown_rule_type() -> None:
    with pytest.raises(UnknownRuleError):
        get_rule("not_a_rule")
    with pytest.raises(UnknownRuleError):
        check_answer("not_a_rule", 0, ChallengeData(items=[1], correct_indices=[0], rule_text=""))


def test_hidden_cells_are_wrong_cells(rng) -> None:
    ch = generate_challenge(_round(RuleType.FIND_NUMBER), 3, rng=rng)
    assert ch.hide_wrong_count == 3
    hidden = pick_hidden_indices(ch, rng)
    assert len(hidden) == 3
    assert not set(hidden) & set(ch.correct_indices)

    small = ChallengeData(items=[1, 2], correct_indices=[1], rule_text="", hide_wrong_count=5)
    assert pick_hidden_indices(small, rng) == [0]
    small.hide_wrong_count = 0
    assert pick_hidden_indices(small, rng) == []
