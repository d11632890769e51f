"""Validate single MMI / UCAT submissions and build the row to insert."""
import math
from typing import List, Dict

from engine import UCAT_SECTIONS, UCAT_MAX_OPTIONS


def build_mmi_row(question: str, answer: str) -> Dict:
    question = (question or "").strip()
    answer = (answer or "").strip()
    if not question or not answer:
        raise ValueError("Add both a question and model answer.")
    return {"question": question, "answer": answer}


def build_ucat_row(question: str, answers: List[str], correct, question_type: str) -> Dict:
    """
    `answers` holds up to five option slots (blank = unused); `correct` is the 1-based
    answer number and must fall within the number of filled-in options.
    """
    question = (question or "").strip()
    if not question:
        raise ValueError("Add the UCAT question.")

    slots = [(a or "").strip() for a in list(answers)[:UCAT_MAX_OPTIONS]]
    slots += [""] * (UCAT_MAX_OPTIONS - len(slots))
    filled = [a for a in slots if a]
    if len(filled) < 2:
        raise ValueError("Add at least two answer options.")

    try:
        correct_number = float(correct)
    except (TypeError, ValueError):
        correct_number = math.nan
    if not math.isfinite(correct_number) or correct_number < 1 or correct_number > len(filled):
        raise ValueError("Correct answer must be a number within the options provided.")
    if correct_number != int(correct_number):
        raise ValueError("Correct answer must be a whole number.")

    question_type = (question_type or "").strip()
    if not question_type:
        raise ValueError("Select the UCAT type.")
    if question_type not in UCAT_SECTIONS:
        raise ValueError(f"UCAT type must be one of {', '.join(UCAT_SECTIONS)}.")

    row = {"question": question}
    for n, value in enumerate(slots, start=1):
        row[f"answer {n}"] = value or None
    row["correct_answer"] = int(correct_number)
    row["type"] = question_type
    return row
