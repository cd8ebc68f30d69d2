"""Centralized constants for defcards.

Scheduling numbers, frontmatter keys and queue ceilings live here so every
layer imports from a single source of truth.
"""

# ---------- Time ----------
MS_PER_DAY = 24 * 60 * 60 * 1000

# ---------- SM-2 ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5
HARD_EASE_PENALTY = 0.15
GOOD_EASE_PENALTY = 0.02
EASY_EASE_BONUS = 0.15
HARD_INTERVAL_MULTIPLIER = 1.2
GOOD_FIRST_INTERVAL = 1
EASY_FIRST_INTERVAL = 4
SECOND_INTERVAL = 6
GRADUATION_INTERVAL = 21
GRADUATION_REPETITIONS = 2

# Lower sorts first. Overdue days are subtracted within a tier.
STATUS_PRIORITY = {
    "new": 1000,
    "learning": 2000,
    "review": 3000,
    "graduated": 4000,
}

# ---------- Queue ----------
DEFAULT_DAILY_NEW_CARDS = 20
DEFAULT_DAILY_REVIEW_LIMIT = 100
EXTRA_SESSION_LIMIT = 30

# ---------- Statistics ----------
RECENT_SESSION_WINDOW = 30
WEEK_DAYS = 7

# ---------- Frontmatter ----------
DEF_TYPE_KEY = "def-type"
ALIASES_KEY = "aliases"
FLASHCARD_KEY = "flashcard"

# ---------- Vault ----------
DEFAULT_DEF_FOLDER = "definitions"
MARKDOWN_SUFFIX = ".md"
