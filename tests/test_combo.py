from gridrush.events import ComboBroken, ComboMilestone, ComboUpdated
from gridrush.input_queue import EventQueue
from gridrush.managers import ComboManager


def _combo_of(n: int) -> ComboManager:
    combo = ComboManager()
    for _ in range(n):
        combo.add_combo()
    return combo


def test_multiplier_brackets() -> None:
    expected = {0: 1.0, 9: 1.0, 10: 1.5, 19: 1.5, 20: 2.0, 30: 2.5, 49: 2.5, 50: 3.0, 120: 3.0}
    for n, multiplier in expected.items():
        assert _combo_of(n).coin_multiplier == multiplier


def test_fifty_is_fever() -> None:
    combo = _combo_of(50)
    assert combo.coin_multiplier == 3.0
    assert combo.effect_level == 4
    assert combo.is_fever
    assert not _combo_of(49).is_fever


def test_milestones_emitted_when_landing_on_threshold() -> None:
    events = EventQueue()
    combo = ComboManager(events)
    for _ in range(55):
        combo.add_combo()
    milestones = events.of_type(ComboMilestone)
    assert [m.combo for m in milestones] == [10, 20, 30, 50]
    assert [m.level for m in milestones] == [1, 2, 3, 4]
    assert milestones[-1].multiplier == 3.0
    assert len(events.of_type(ComboUpdated)) == 55


def test_reset_emits_broken_and_keeps_max() -> None:
    events = EventQueue()
    combo = ComboManager(events)
    for _ in range(7):
        combo.add_combo()
    events.pop_all()

    combo.reset_combo()
    assert combo.current_combo == 0
    assert combo.max_combo == 7
    assert events.of_type(ComboBroken) == [ComboBroken(7)]

    events.pop_all()
    combo.reset_combo()
    assert events.of_type(ComboBroken) == []
    assert len(events.of_type(ComboUpdated)) == 1


def test_next_milestone_and_info() -> None:
    assert _combo_of(0).next_milestone == 10
    assert _combo_of(25).next_milestone == 30
    assert _combo_of(50).next_milestone == 100

    info = _combo_of(12).combo_info()
    assert info["current"] == 12
    assert info["multiplier"] == 1.5
    assert info["next_milestone"] == 20


def test_full_reset_clears_max() -> None:
    combo = _combo_of(15)
    combo.reset_max_combo()
    assert combo.max_combo == 0
    assert combo.current_combo == 15

    combo.reset()
    assert (combo.current_combo, combo.max_combo) == (0, 0)
