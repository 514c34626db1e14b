"""
SafeTrip — News Severity
Keyword classification of road-safety news into alert severities.
"""

from safetrip.models.schemas import NewsSeverity

HIGH_KEYWORDS = (
    "fatal",
    "death",
    "killed",
    "multiple casualties",
    "road closed",
    "highway blocked",
    "major accident",
)

MEDIUM_KEYWORDS = (
    "accident",
    "crash",
    "collision",
    "injured",
    "traffic jam",
    "road block",
)


def classify_news_severity(text: str) -> NewsSeverity:
    lower = (text or "").lower()
    if any(kw in lower for kw in HIGH_KEYWORDS):
        return NewsSeverity.HIGH
    if any(kw in lower for kw in MEDIUM_KEYWORDS):
        return NewsSeverity.MEDIUM
    return NewsSeverity.LOW
