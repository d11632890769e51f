"""UCAT session controller: setup rules, answering, timer, summary."""
import random
from datetime import datetime, timedelta

import pytest

from medprep.quiz import (
    QuizSetup,
    QuizSession,
    UcatQuestion,
    question_from_row,
    select_questions,
    format_seconds,
    SETUP,
    IN_PROGRESS,
    SUMMARY,
    TIMED,
    UNTIMED,
)

T0 = datetime(2025, 3, 1, 9, 0, 0)


def make_questions(n):
    return [UcatQuestion(id=i + 1, prompt=f"Q{i + 1}", options=["A", "B", "C", "D"], correct_index=i % 4, section="VR") for i in range(n)]


def ready_setup(mode=UNTIMED, count=3):
    setup = QuizSetup()
    setup.toggle_section("VR")
    setup.set_mode(mode)
    setup.choose_question_count(count)
    if mode == TIMED:
        setup.choose_timer(5)
    return setup


def test_can_start_requires_section_and_count():
    setup = QuizSetup()
    assert not setup.can_start
    setup.toggle_section("QR")
    assert not setup.can_start
    setup.choose_question_count(10)
    assert setup.can_start
    setup.toggle_section("QR")
    assert not setup.can_start


def test_timed_mode_requires_timer():
    setup = ready_setup()
    setup.set_mode(TIMED)
    assert not setup.can_start
    setup.set_custom_minutes("abc")
    assert not setup.can_start
    setup.set_custom_minutes("12")
    assert setup.can_start
    assert setup.timer_minutes == 12


def test_presets_and_custom_values_clear_each_other():
    setup = QuizSetup()
    setup.choose_timer(10)
    setup.set_custom_minutes("7")
    assert setup.selected_timer is None
    setup.choose_timer(15)
    assert setup.custom_minutes == ""
    setup.set_custom_questions("12")
    assert setup.selected_questions is None and setup.total_questions == 12
    setup.set_custom_questions("-3")
    assert setup.total_questions == 0


def test_untimed_clears_timer():
    setup = QuizSetup()
    setup.set_mode(TIMED)
    setup.choose_timer(20)
    setup.set_mode(UNTIMED)
    assert setup.selected_timer is None
    assert setup.timer_minutes == 0


def test_unknown_section_rejected():
    with pytest.raises(ValueError):
        QuizSetup().toggle_section("BMAT")


def test_start_refuses_incomplete_setup():
    with pytest.raises(ValueError):
        QuizSession().start(make_questions(3))


def test_full_untimed_run():
    session = QuizSession(ready_setup())
    session.start(make_questions(3), now=T0)
    assert session.state == IN_PROGRESS
    assert session.time_remaining(T0) is None

    with pytest.raises(ValueError):
        session.next_question()

    session.select_answer(0)  # correct (index 0)
    assert session.next_question() is True
    session.select_answer(0)  # wrong, correct is 1
    assert session.next_question() is False
    assert session.is_last_question
    session.select_answer(2)
    session.next_question()

    assert session.state == SUMMARY
    summary = session.summary()
    assert summary["correct_count"] == 2
    assert summary["total"] == 3
    assert [r["is_correct"] for r in summary["results"]] == [True, False, True]


def test_select_answer_out_of_range():
    session = QuizSession(ready_setup())
    session.start(make_questions(1), now=T0)
    with pytest.raises(ValueError):
        session.select_answer(4)


def test_timer_counts_down_and_finishes_session():
    session = QuizSession(ready_setup(TIMED))
    session.start(make_questions(3), now=T0)
    assert session.time_limit_seconds == 300
    assert session.time_remaining(T0 + timedelta(seconds=61)) == 239
    assert not session.check_timer(T0 + timedelta(seconds=299))
    session.select_answer(0)
    assert session.check_timer(T0 + timedelta(seconds=400))
    assert session.state == SUMMARY
    assert session.time_remaining(T0 + timedelta(seconds=400)) == 0
    # selected but not submitted still counts
    assert session.summary()["results"][0]["is_correct"] is True


def test_custom_fractional_minutes_round():
    setup = ready_setup(TIMED)
    setup.set_custom_minutes("0.001")
    session = QuizSession(setup)
    session.start(make_questions(1), now=T0)
    assert session.time_limit_seconds == 1


def test_reset_keeps_setup():
    setup = ready_setup()
    session = QuizSession(setup)
    session.start(make_questions(2), now=T0)
    session.finish()
    session.reset()
    assert session.state == SETUP
    assert session.questions == []
    assert session.setup.sections == {"VR"}


def test_question_from_row():
    row = {"id": 7, "question": "Which?", "answer 1": "x", "answer 2": "y", "answer 3": None, "correct_answer": 2, "type": "DM"}
    q = question_from_row(row)
    assert q.options == ["x", "y"]
    assert q.correct_index == 1
    assert q.section == "DM"


def test_question_from_row_accepts_legacy_columns_and_rejects_bad_rows():
    assert question_from_row({"question": "Q", "answer1": "a", "answer2": "b", "correct_answer": 1}).options == ["a", "b"]
    assert question_from_row({"question": "Q", "answer 1": "a", "correct_answer": 1}) is None
    assert question_from_row({"question": "Q", "answer 1": "a", "answer 2": "b", "correct_answer": 3}) is None
    assert question_from_row({"question": "", "answer 1": "a", "answer 2": "b", "correct_answer": 1}) is None


def test_select_questions_samples_up_to_count():
    rows = [{"id": i, "question": f"Q{i}", "answer 1": "a", "answer 2": "b", "correct_answer": 1} for i in range(5)]
    assert len(select_questions(rows, 3, random.Random(0))) == 3
    assert len(select_questions(rows, 10, random.Random(0))) == 5


def test_format_seconds():
    assert format_seconds(0) == "0:00"
    assert format_seconds(125) == "2:05"
