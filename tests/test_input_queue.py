from gridrush.events import CellSelected, StartLevel
from gridrush.input_queue import EventQueue, InputQueue


def test_pop_all_drains_in_order() -> None:
    iq = InputQueue()
    iq.push(StartLevel())
    iq.push(CellSelected(4))
    assert iq.pop_all() == [StartLevel(), CellSelected(4)]
    assert iq.pop_all() == []


def test_of_type_does_not_consume() -> None:
    events = EventQueue()
    events.push(CellSelected(1))
    events.push(StartLevel())
    events.push(CellSelected(2))
    assert events.of_type(CellSelected) == [CellSelected(1), CellSelected(2)]
    assert len(events.pop_all()) == 3
