"""MMI practice timer: a prep countdown followed by a response countdown."""
import logging
from datetime import datetime
from typing import Optional

from engine import (
    PREP_PRESETS_SECONDS,
    RESPONSE_PRESETS_SECONDS,
    DEFAULT_PREP_SECONDS,
    DEFAULT_RESPONSE_SECONDS,
)

logger = logging.getLogger(__name__)

PREP = "prep"
RESPONSE = "response"


class MmiTimer:
    """
    Countdowns are stored as seconds left plus the instant they were started, so the
    remaining time can be read on any rerun without a background ticker.
    When prep reaches zero the timer moves to the response phase, stopped and full.
    """

    def __init__(self, prep_duration: int = DEFAULT_PREP_SECONDS, response_duration: int = DEFAULT_RESPONSE_SECONDS):
        self.enabled = False
        self.prep_duration = prep_duration
        self.response_duration = response_duration
        self._reset()

    def _reset(self) -> None:
        self.phase = PREP
        self.prep_seconds = self.prep_duration
        self.response_seconds = self.response_duration
        self.prep_started_at: Optional[datetime] = None
        self.response_started_at: Optional[datetime] = None

    @staticmethod
    def _left(seconds: int, started_at: Optional[datetime], now: Optional[datetime]) -> int:
        if started_at is None:
            return seconds
        elapsed = ((now or datetime.utcnow()) - started_at).total_seconds()
        return max(0, seconds - int(elapsed))

    @property
    def prep_running(self) -> bool:
        return self.prep_started_at is not None

    @property
    def response_running(self) -> bool:
        return self.response_started_at is not None

    def toggle(self) -> None:
        self.enabled = not self.enabled
        self._reset()

    def set_prep_duration(self, seconds: int) -> None:
        if seconds not in PREP_PRESETS_SECONDS:
            raise ValueError(f"Prep time must be one of {PREP_PRESETS_SECONDS}")
        self.prep_duration = seconds
        self.prep_seconds = seconds
        self.prep_started_at = None
        self.phase = PREP

    def set_response_duration(self, seconds: int) -> None:
        if seconds not in RESPONSE_PRESETS_SECONDS:
            raise ValueError(f"Response time must be one of {RESPONSE_PRESETS_SECONDS}")
        self.response_duration = seconds
        self.response_seconds = seconds
        self.response_started_at = None
        self.phase = RESPONSE

    def _enter_response(self) -> None:
        self.prep_seconds = 0
        self.prep_started_at = None
        self.phase = RESPONSE
        self.response_seconds = self.response_duration
        self.response_started_at = None

    def refresh(self, now: Optional[datetime] = None) -> None:
        """Apply elapsed time: hand over to response when prep runs out, stop response at zero."""
        if self.prep_running and self.prep_remaining(now) == 0:
            logger.debug("Prep countdown finished, switching to response")
            self._enter_response()
        if self.response_running and self.response_remaining(now) == 0:
            self.response_seconds = 0
            self.response_started_at = None

    def prep_remaining(self, now: Optional[datetime] = None) -> int:
        return self._left(self.prep_seconds, self.prep_started_at, now)

    def response_remaining(self, now: Optional[datetime] = None) -> int:
        return self._left(self.response_seconds, self.response_started_at, now)

    def remaining(self, now: Optional[datetime] = None) -> int:
        if self.phase == PREP:
            return self.prep_remaining(now)
        return self.response_remaining(now)

    def start(self, now: Optional[datetime] = None) -> None:
        now = now or datetime.utcnow()
        if self.phase == PREP:
            if not self.prep_running and self.prep_seconds > 0:
                self.prep_started_at = now
        elif not self.response_running and self.response_seconds > 0:
            self.response_started_at = now

    def stop(self, now: Optional[datetime] = None) -> None:
        """Pause the response countdown."""
        if self.phase == RESPONSE and self.response_running:
            self.response_seconds = self.response_remaining(now)
            self.response_started_at = None

    def finish(self) -> None:
        if self.phase == PREP:
            self._enter_response()
        else:
            self.response_seconds = 0
            self.response_started_at = None
