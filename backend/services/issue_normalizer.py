"""Normalization of raw Jira issues into the fields analytics reads."""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

# Tried in order, first non-null value wins
DEFAULT_STORY_POINTS_FIELDS = ("customfield_10016", "customfield_10058")

DONE_STATUSES = {"closed", "done"}

MS_PER_DAY = 1000 * 60 * 60 * 24


@dataclass(frozen=True)
class Assignee:
    display_name: str
    email: str


@dataclass(frozen=True)
class Issue:
    """A single Jira issue reduced to the fields analytics needs."""

    id: str
    key: str
    type: str
    status: str
    assignee: Optional[Assignee]
    created: str
    resolved: Optional[str]
    story_points: float

    @property
    def is_resolved(self) -> bool:
        return self.resolved is not None

    @property
    def is_done(self) -> bool:
        return self.status.lower() in DONE_STATUSES


def round_half_away_from_zero(value: float, digits: int = 0) -> float:
    """Round halves away from zero: 2.5 -> 3, -2.5 -> -3, 2.25 -> 2.3 at one digit.

    The shortest decimal repr of the float is rounded, not its exact binary
    value, so 0.15 rounds to 0.2 even though the stored double is just below it.
    """
    if math.isnan(value) or math.isinf(value):
        return value
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a Jira timestamp into an aware UTC datetime.

    Jira formats: "2024-10-31T12:11:56.289-0400" or "2024-10-31T12:11:56.289+0000".
    Timestamps without an offset are taken as UTC.
    """
    if not value:
        return None

    formats = [
        "%Y-%m-%dT%H:%M:%S.%f%z",  # With milliseconds and timezone
        "%Y-%m-%dT%H:%M:%S%z",      # Without milliseconds, with timezone
        "%Y-%m-%dT%H:%M:%S.%f",     # With milliseconds, no timezone
        "%Y-%m-%dT%H:%M:%S",        # Basic ISO format
        "%Y-%m-%d"                   # Date only
    ]

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+0000"

    for fmt in formats:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    return None


def calculate_resolution_time(created: Optional[str], resolved: Optional[str]) -> float:
    """Days between creation and resolution, rounded to a whole day.

    Returns 0 for unresolved issues. Resolution before creation yields a
    negative count. Unparseable timestamps yield nan.
    """
    if not resolved:
        return 0

    created_at = parse_timestamp(created)
    resolved_at = parse_timestamp(resolved)
    if created_at is None or resolved_at is None:
        return math.nan

    diff_ms = (resolved_at - created_at).total_seconds() * 1000
    return round_half_away_from_zero(diff_ms / MS_PER_DAY)


def get_story_points(fields: dict, story_points_fields=DEFAULT_STORY_POINTS_FIELDS) -> float:
    """Extract story points using the first populated field, defaulting to 0."""
    for field_id in story_points_fields:
        points = fields.get(field_id)
        if points is not None:
            try:
                return float(points)
            except (TypeError, ValueError):
                pass

    return 0


def normalize_issue(raw: dict, story_points_fields=DEFAULT_STORY_POINTS_FIELDS) -> Issue:
    """Build an Issue from a raw Jira issue dict."""
    fields = raw.get("fields") or {}

    assignee = None
    raw_assignee = fields.get("assignee")
    if raw_assignee:
        assignee = Assignee(
            display_name=raw_assignee.get("displayName", "Unknown"),
            email=raw_assignee.get("emailAddress")
        )

    return Issue(
        id=raw.get("id"),
        key=raw.get("key"),
        type=(fields.get("issuetype") or {}).get("name", ""),
        status=(fields.get("status") or {}).get("name", ""),
        assignee=assignee,
        created=fields.get("created"),
        resolved=fields.get("resolutiondate") or None,
        story_points=get_story_points(fields, story_points_fields)
    )
