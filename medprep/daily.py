"""
Daily MMI question: one deterministic question per calendar day, random question for practice.
The daily index is (day_of_year - 1) % total, so every question comes up once before repeating.
"""
import logging
import random
from datetime import date
from typing import Dict, Optional

from db import count_mmi_questions, get_mmi_question_by_index

logger = logging.getLogger(__name__)


def day_of_year(day: Optional[date] = None) -> int:
    """1 for January 1st."""
    day = day or date.today()
    return day.timetuple().tm_yday


def daily_index(count: int, day: Optional[date] = None) -> Optional[int]:
    if count <= 0:
        return None
    return max(0, day_of_year(day) - 1) % count


def pick_random_question(client=None, rng: Optional[random.Random] = None) -> Optional[Dict]:
    """Uniformly random MMI question, or None when the table is empty."""
    count = count_mmi_questions(client)
    if not count:
        return None
    index = (rng or random).randrange(count)
    return get_mmi_question_by_index(index, client)


def pick_daily_question(client=None, today: Optional[date] = None, rng: Optional[random.Random] = None) -> Optional[Dict]:
    """Today's MMI question. Falls back to a random one if the indexed row is missing."""
    count = count_mmi_questions(client)
    index = daily_index(count, today)
    if index is None:
        return None
    question = get_mmi_question_by_index(index, client)
    if question is None:
        logger.warning("No MMI row at daily index %d (count=%d), using a random question", index, count)
        question = pick_random_question(client, rng)
    return question
