"""
Daily reveal streak, persisted as a local JSON file.

The streak is per install: every Streamlit browser session on this server reads and
updates the same file. Updates are serialized with a process-wide lock and written
atomically (temp file + os.replace), so concurrent reveals do not lose increments.

Stored counters: last reveal date, current streak, best streak, total reveals, and the
last 30 reveal dates (YYYY-MM-DD, local time).
"""
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field, asdict
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from engine import HISTORY_DAYS_KEPT, STREAK_GOAL_DAYS

load_dotenv()

logger = logging.getLogger(__name__)

# Streamlit runs sessions as threads of one process
_write_lock = threading.Lock()

DEFAULT_STATS_PATH = Path(__file__).resolve().parent.parent / "data" / "daily_stats.json"


def stats_path() -> Path:
    return Path(os.environ.get("MEDPREP_STATS_PATH") or DEFAULT_STATS_PATH)


@dataclass
class DailyStats:
    last_date: Optional[str] = None
    streak: int = 0
    best: int = 0
    total: int = 0
    history: List[str] = field(default_factory=list)


def _to_int(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class StreakTracker:
    """Reads and updates DailyStats in a JSON file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else stats_path()

    def read(self) -> DailyStats:
        """Stored stats; anything missing or malformed reads as the default."""
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return DailyStats()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read streak file %s: %s", self.path, e)
            return DailyStats()
        if not isinstance(raw, dict):
            return DailyStats()

        last_date = raw.get("last_date")
        history = raw.get("history")
        return DailyStats(
            last_date=last_date if isinstance(last_date, str) else None,
            streak=_to_int(raw.get("streak")),
            best=_to_int(raw.get("best")),
            total=_to_int(raw.get("total")),
            history=[d for d in history if isinstance(d, str)] if isinstance(history, list) else [],
        )

    def write(self, stats: DailyStats) -> None:
        """Replace the stats file atomically; readers never see a half-written file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".daily_stats.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(asdict(stats), f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def record_reveal(self, today: Optional[date] = None) -> DailyStats:
        """Count one daily reveal and persist the updated stats."""
        today = today or date.today()
        today_str = today.isoformat()
        yesterday_str = (today - timedelta(days=1)).isoformat()
        with _write_lock:
            stats = self.read()

            streak = stats.streak
            if stats.last_date != today_str:
                streak = stats.streak + 1 if stats.last_date == yesterday_str else 1

            history = list(stats.history)
            if today_str not in history:
                history.append(today_str)

            updated = DailyStats(
                last_date=today_str,
                streak=streak,
                best=max(stats.best, streak),
                total=stats.total + 1,
                history=history[-HISTORY_DAYS_KEPT:],
            )
            self.write(updated)
        logger.info("Daily reveal recorded: streak=%d best=%d total=%d", updated.streak, updated.best, updated.total)
        return updated


# --- Dashboard helpers ---

def build_last_days(total_days: int, today: Optional[date] = None) -> List[dict]:
    """Oldest first: [{date: 'YYYY-MM-DD', label: 'Mon'}, ...] ending today."""
    today = today or date.today()
    days = []
    for offset in range(total_days - 1, -1, -1):
        day = today - timedelta(days=offset)
        days.append({"date": day.isoformat(), "label": day.strftime("%a")})
    return days


def streak_progress(stats: DailyStats) -> float:
    """Percent of the way to a 30-day streak, capped at 100."""
    return min(stats.streak / STREAK_GOAL_DAYS * 100, 100)


def is_up_to_date(stats: DailyStats, today: Optional[date] = None) -> bool:
    return stats.last_date == (today or date.today()).isoformat()


def is_best_streak(stats: DailyStats) -> bool:
    return stats.streak > 0 and stats.streak == stats.best


def motivational_line(stats: DailyStats, today: Optional[date] = None) -> str:
    if is_up_to_date(stats, today):
        return "You already checked in today. Keep the momentum rolling."
    return "Reveal today's question to keep your streak alive."
