"""
UCAT practice session: setup (sections, timer, question count) -> in progress -> summary.
Pure session logic; question rows are fetched by the caller (see db.get_ucat_questions).
"""
import logging
import math
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Optional, Set

from engine import UCAT_SECTIONS, UCAT_MAX_OPTIONS

logger = logging.getLogger(__name__)

SETUP = "setup"
IN_PROGRESS = "in_progress"
SUMMARY = "summary"

TIMED = "timed"
UNTIMED = "untimed"


@dataclass
class UcatQuestion:
    id: Optional[int]
    prompt: str
    options: List[str]
    correct_index: int
    section: Optional[str] = None


def _answer_cell(row: Dict, n: int) -> str:
    # Older rows were written with "answerN" instead of "answer N".
    value = row.get(f"answer {n}")
    if value is None:
        value = row.get(f"answer{n}")
    return (value or "").strip() if isinstance(value, str) else ""


def question_from_row(row: Dict) -> Optional[UcatQuestion]:
    """Build a UcatQuestion from a Ucat row. Returns None if the row is unusable."""
    prompt = (row.get("question") or "").strip()
    options = [_answer_cell(row, n) for n in range(1, UCAT_MAX_OPTIONS + 1)]
    options = [o for o in options if o]
    correct = row.get("correct_answer")
    if not prompt or len(options) < 2 or not isinstance(correct, int):
        return None
    if correct < 1 or correct > len(options):
        return None
    return UcatQuestion(
        id=row.get("id"),
        prompt=prompt,
        options=options,
        correct_index=correct - 1,
        section=row.get("type"),
    )


def select_questions(rows: List[Dict], count: int, rng: Optional[random.Random] = None) -> List[UcatQuestion]:
    """Random sample of up to `count` usable questions."""
    questions = [q for q in (question_from_row(r) for r in rows) if q is not None]
    if len(questions) < count:
        logger.warning("Only %d UCAT questions available, need %d", len(questions), count)
    return (rng or random).sample(questions, min(count, len(questions)))


def _positive_number(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


@dataclass
class QuizSetup:
    """Selections made on the setup screen."""

    sections: Set[str] = field(default_factory=set)
    practice_mode: Optional[str] = None
    selected_timer: Optional[int] = None
    custom_minutes: str = ""
    selected_questions: Optional[int] = None
    custom_questions: str = ""

    def toggle_section(self, section: str) -> None:
        if section not in UCAT_SECTIONS:
            raise ValueError(f"Unknown UCAT section: {section}")
        if section in self.sections:
            self.sections.discard(section)
        else:
            self.sections.add(section)

    def set_mode(self, mode: str) -> None:
        if mode not in (TIMED, UNTIMED):
            raise ValueError(f"Unknown practice mode: {mode}")
        self.practice_mode = mode
        if mode == UNTIMED:
            self.selected_timer = None
            self.custom_minutes = ""

    def choose_timer(self, minutes: int) -> None:
        self.selected_timer = minutes
        self.custom_minutes = ""

    def set_custom_minutes(self, value) -> None:
        self.custom_minutes = str(value)
        self.selected_timer = None

    def choose_question_count(self, count: int) -> None:
        self.selected_questions = count
        self.custom_questions = ""

    def set_custom_questions(self, value) -> None:
        self.custom_questions = str(value)
        self.selected_questions = None

    @property
    def timer_minutes(self) -> float:
        if self.selected_timer is not None:
            return self.selected_timer
        return _positive_number(self.custom_minutes) or 0

    @property
    def total_questions(self) -> int:
        if self.selected_questions is not None:
            return self.selected_questions
        return int(_positive_number(self.custom_questions) or 0)

    @property
    def is_timed(self) -> bool:
        return self.practice_mode == TIMED

    @property
    def can_start(self) -> bool:
        has_timer = self.timer_minutes > 0
        return bool(self.sections) and self.total_questions > 0 and (not self.is_timed or has_timer)


class QuizSession:
    """One UCAT practice run. Holds the setup so it survives a reset."""

    def __init__(self, setup: Optional[QuizSetup] = None):
        self.setup = setup or QuizSetup()
        self.state = SETUP
        self.questions: List[UcatQuestion] = []
        self.current_index = 0
        self.selected_answers: Dict[int, int] = {}
        self.answer_results: Dict[int, bool] = {}
        self.started_at: Optional[datetime] = None
        self.time_limit_seconds: Optional[int] = None

    def start(self, questions: List[UcatQuestion], now: Optional[datetime] = None) -> None:
        if not self.setup.can_start:
            raise ValueError("Select at least one section, a question count, and a timer for timed practice.")
        if not questions:
            raise ValueError("No UCAT questions found for the selected sections.")
        self.questions = list(questions)
        self.current_index = 0
        self.selected_answers = {}
        self.answer_results = {}
        self.started_at = now or datetime.utcnow()
        if self.setup.is_timed:
            self.time_limit_seconds = max(1, math.floor(self.setup.timer_minutes * 60 + 0.5))
        else:
            self.time_limit_seconds = None
        self.state = IN_PROGRESS
        logger.info(
            "UCAT session started: %d questions, sections=%s, limit=%s",
            len(self.questions), sorted(self.setup.sections), self.time_limit_seconds,
        )

    @property
    def current_question(self) -> Optional[UcatQuestion]:
        if self.state != IN_PROGRESS or self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index + 1 >= len(self.questions)

    def select_answer(self, option_index: int) -> None:
        question = self.current_question
        if question is None:
            raise ValueError("No question in progress")
        if not 0 <= option_index < len(question.options):
            raise ValueError(f"Option {option_index} out of range")
        self.selected_answers[self.current_index] = option_index

    def next_question(self) -> bool:
        """Score the current answer and advance. Returns whether it was correct."""
        question = self.current_question
        if question is None:
            raise ValueError("No question in progress")
        if self.current_index not in self.selected_answers:
            raise ValueError("Select an answer first")
        is_correct = self.selected_answers[self.current_index] == question.correct_index
        self.answer_results[self.current_index] = is_correct
        if self.is_last_question:
            self.finish()
        else:
            self.current_index += 1
        return is_correct

    def time_remaining(self, now: Optional[datetime] = None) -> Optional[int]:
        """Seconds left, floored at 0. None for untimed sessions."""
        if self.time_limit_seconds is None or self.started_at is None:
            return None
        elapsed = ((now or datetime.utcnow()) - self.started_at).total_seconds()
        return max(0, self.time_limit_seconds - int(elapsed))

    def check_timer(self, now: Optional[datetime] = None) -> bool:
        """Finish the session when time has run out. Returns True if it did."""
        if self.state == IN_PROGRESS and self.time_remaining(now) == 0:
            logger.info("UCAT session time limit reached")
            self.finish()
            return True
        return False

    def finish(self) -> None:
        self.state = SUMMARY
        summary = self.summary()
        logger.info("UCAT session finished: %d/%d correct", summary["correct_count"], summary["total"])

    def summary(self) -> Dict:
        results = []
        for idx, question in enumerate(self.questions):
            is_correct = self.answer_results.get(idx)
            if is_correct is None:
                is_correct = self.selected_answers.get(idx) == question.correct_index
            results.append({"number": idx + 1, "id": question.id, "section": question.section, "is_correct": is_correct})
        correct = sum(1 for r in results if r["is_correct"])
        total = len(self.questions)
        return {
            "correct_count": correct,
            "total": total,
            "percentage": (correct / total * 100) if total else 0,
            "results": results,
        }

    def reset(self) -> None:
        """Back to setup, keeping the previous selections."""
        self.state = SETUP
        self.questions = []
        self.current_index = 0
        self.selected_answers = {}
        self.answer_results = {}
        self.started_at = None
        self.time_limit_seconds = None


def format_seconds(total_seconds: int) -> str:
    minutes, seconds = divmod(int(total_seconds), 60)
    return f"{minutes}:{seconds:02d}"
