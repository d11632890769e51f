"""Shared constants: tables, UCAT sections, timer and session presets. No UI."""

MMI_TABLE = "MMI"
UCAT_TABLE = "Ucat"

# UCAT sections (stored in Ucat.type)
UCAT_SECTIONS = ("VR", "QR", "DM", "SJT")
SECTION_LABELS = {
    "VR": "Verbal Reasoning",
    "QR": "Quantitative Reasoning",
    "DM": "Decision Making",
    "SJT": "Situational Judgement",
}
UCAT_MAX_OPTIONS = 5

# UCAT practice setup
TIMER_PRESETS_MINUTES = (5, 10, 15, 20)
QUESTION_COUNT_PRESETS = (5, 10, 20, 30)

# MMI prep/response timer (seconds)
PREP_PRESETS_SECONDS = (60, 120, 180, 240)
RESPONSE_PRESETS_SECONDS = (120, 180, 240, 300)
DEFAULT_PREP_SECONDS = 120
DEFAULT_RESPONSE_SECONDS = 180

# Streak tracking
HISTORY_DAYS_KEPT = 30
STREAK_GOAL_DAYS = 30
