"""Report-based moderation policy.

A review is hidden automatically the moment its number of distinct reporters
reaches the hide threshold. Only an administrator can make it visible again.
"""

import os

REPORT_HIDE_THRESHOLD = 5

ACTIVE = "active"
HIDDEN = "hidden"


def report_hide_threshold() -> int:
    """Return the configured hide threshold.

    Uses ``REPORT_HIDE_THRESHOLD`` unless the ``REVIEW_HIDE_THRESHOLD``
    environment variable overrides it.
    """
    raw = os.environ.get("REVIEW_HIDE_THRESHOLD")
    if raw is None or raw == "":
        return REPORT_HIDE_THRESHOLD

    threshold = int(raw)
    if threshold < 1:
        raise ValueError(f"REVIEW_HIDE_THRESHOLD must be a positive integer, got {raw!r}")
    return threshold


def status_after_report(status: str, report_count: int, threshold: int = REPORT_HIDE_THRESHOLD) -> str:
    """Status a review should have once it carries ``report_count`` reports."""
    if status == ACTIVE and report_count >= threshold:
        return HIDDEN
    return status
