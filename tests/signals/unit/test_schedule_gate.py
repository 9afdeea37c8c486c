import pytest
from datetime import datetime
from src.signals.domain.schedule_gate import (
    ScheduleGate, GateEdge, UNSET_WINDOW,
    is_within_window, parse_schedule_time, format_window, target_for
)

DAY = (2024, 5, 1)

def at(hour, minute, second=0, microsecond=0):
    return datetime(*DAY, hour, minute, second, microsecond)

@pytest.mark.parametrize("now, expected", [
    (at(8, 30, 0), True),     # exactly 30:00 before
    (at(8, 29, 59), False),   # 30:01 before
    (at(9, 0, 0), True),
    (at(9, 30, 0), True),     # exactly 30:00 after
    (at(9, 30, 1), False),    # 30:01 after
    (at(9, 30, 0, 500000), False),
    (at(12, 0, 0), False),
])
def test_window_boundaries(now, expected):
    assert is_within_window("09:00:00", now) is expected

@pytest.mark.parametrize("schedule", ["", None, "   "])
def test_unset_schedule_is_always_outside(schedule):
    assert parse_schedule_time(schedule) is None
    assert is_within_window(schedule, at(9, 0)) is False

def test_schedule_without_seconds():
    assert parse_schedule_time("09:15") == (9, 15, 0)
    assert is_within_window("09:15", at(9, 45, 0))
    assert not is_within_window("09:15", at(9, 45, 1))

def test_lenient_parts_count_as_zero():
    assert parse_schedule_time("9:xx:5") == (9, 0, 5)
    assert parse_schedule_time("07:30:15") == (7, 30, 15)

def test_out_of_range_parts_overflow():
    assert target_for("00:90:00", at(0, 0)) == at(1, 30)

def test_midnight_window_does_not_wrap():
    # Today's 00:10 is almost a day behind 23:50
    assert not is_within_window("00:10:00", at(23, 50))
    assert is_within_window("00:10:00", at(0, 0))
    assert is_within_window("23:50:00", at(23, 59, 59))
    assert not is_within_window("23:50:00", at(0, 5))

def test_format_window():
    assert format_window("08:00:00", at(12, 0)) == "07:30:00~08:30:00"
    assert format_window("00:10:00", at(12, 0)) == "23:40:00~00:40:00"
    assert format_window("", at(12, 0)) == UNSET_WINDOW

def test_custom_window_width():
    assert is_within_window("09:00:00", at(9, 10), window_minutes=10)
    assert not is_within_window("09:00:00", at(9, 11), window_minutes=10)

def test_gate_reports_edges_only():
    gate = ScheduleGate()
    assert gate.evaluate("09:00:00", at(8, 0)) is GateEdge.NONE
    assert gate.evaluate("09:00:00", at(8, 30)) is GateEdge.OPENED
    assert gate.evaluate("09:00:00", at(8, 31)) is GateEdge.NONE
    assert gate.is_open
    assert gate.evaluate("09:00:00", at(9, 30, 1)) is GateEdge.CLOSED
    assert gate.evaluate("09:00:00", at(9, 31)) is GateEdge.NONE
    assert not gate.is_open

def test_gate_closes_when_schedule_cleared():
    gate = ScheduleGate()
    assert gate.evaluate("09:00:00", at(9, 0)) is GateEdge.OPENED
    assert gate.evaluate("", at(9, 0, 1)) is GateEdge.CLOSED

@pytest.mark.parametrize("schedule", [
    "99999999:00:00",
    "-99999999:00:00",
    "9" * 5000 + ":00:00",
])
def test_unrepresentable_schedule_counts_as_unset(schedule):
    assert target_for(schedule, at(9, 0)) is None
    assert is_within_window(schedule, at(9, 0)) is False
    assert format_window(schedule, at(9, 0)) == UNSET_WINDOW

    gate = ScheduleGate()
    assert gate.evaluate(schedule, at(9, 0)) is GateEdge.NONE
