"""MMI prep/response timer."""
from datetime import datetime, timedelta

import pytest

from medprep.mmi_timer import MmiTimer, PREP, RESPONSE

T0 = datetime(2025, 3, 1, 9, 0, 0)


def at(seconds):
    return T0 + timedelta(seconds=seconds)


def test_defaults():
    timer = MmiTimer()
    assert not timer.enabled
    assert timer.phase == PREP
    assert timer.remaining(T0) == 120
    assert timer.response_remaining(T0) == 180


def test_prep_counts_down_then_hands_over_to_response():
    timer = MmiTimer()
    timer.start(T0)
    assert timer.prep_running
    assert timer.remaining(at(30)) == 90
    timer.refresh(at(130))
    assert timer.phase == RESPONSE
    assert not timer.response_running
    assert timer.remaining(at(130)) == 180


def test_finish_prep_switches_to_response():
    timer = MmiTimer()
    timer.finish()
    assert timer.phase == RESPONSE
    assert timer.prep_seconds == 0
    assert timer.response_seconds == 180


def test_response_start_stop_finish():
    timer = MmiTimer()
    timer.finish()
    timer.start(T0)
    timer.stop(at(50))
    assert timer.remaining(at(500)) == 130
    timer.start(at(500))
    timer.refresh(at(700))
    assert timer.remaining(at(700)) == 0
    assert not timer.response_running
    timer.start(at(701))
    assert not timer.response_running


def test_response_finish_zeroes():
    timer = MmiTimer()
    timer.set_response_duration(240)
    timer.finish()
    assert timer.response_remaining() == 0


def test_duration_changes_select_phase():
    timer = MmiTimer()
    timer.set_response_duration(300)
    assert timer.phase == RESPONSE
    assert timer.remaining(T0) == 300
    timer.set_prep_duration(240)
    assert timer.phase == PREP
    assert timer.remaining(T0) == 240


def test_invalid_duration():
    with pytest.raises(ValueError):
        MmiTimer().set_prep_duration(90)


def test_toggle_resets():
    timer = MmiTimer()
    timer.toggle()
    timer.start(T0)
    timer.finish()
    timer.toggle()
    assert not timer.enabled
    assert timer.phase == PREP
    assert timer.remaining(at(10)) == 120
