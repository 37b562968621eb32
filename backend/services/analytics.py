"""Team performance analytics computed from Jira issues.

The report is built in a single synchronous pass over already-fetched issues.
Nothing here talks to Jira; callers fetch issues through JiraClient and pass
them in.
"""

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from services.issue_normalizer import (
    DEFAULT_STORY_POINTS_FIELDS,
    Issue,
    calculate_resolution_time,
    normalize_issue,
    parse_timestamp,
    round_half_away_from_zero,
)

logger = logging.getLogger(__name__)


def _json_number(value):
    """None for nan/inf, which JSON cannot represent."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


@dataclass(frozen=True)
class TeamPerformanceData:
    """Delivery stats for one assignee, keyed by email."""

    display_name: str
    email: str
    issues_completed: int
    story_points_completed: float
    average_resolution_time: float
    issues_by_type: Mapping

    def to_dict(self) -> dict:
        return {
            "user": {
                "displayName": self.display_name,
                "emailAddress": self.email
            },
            "issuesCompleted": self.issues_completed,
            "storyPointsCompleted": _json_number(self.story_points_completed),
            "averageResolutionTime": _json_number(self.average_resolution_time),
            "issuesByType": dict(self.issues_by_type)
        }


@dataclass(frozen=True)
class CompletionPoint:
    date: str
    count: int

    def to_dict(self) -> dict:
        return {"date": self.date, "count": self.count}


@dataclass(frozen=True)
class TeamAnalytics:
    """Analytics report for one query.

    Note the two meanings of "completed": completed_issues and
    completed_story_points count issues whose status is Closed/Done, while
    the per-user numbers count issues that have a resolution date.
    Mappings are read-only views.
    """

    total_issues: int
    total_story_points: float
    completed_story_points: float
    completed_issues: int
    average_resolution_time: float
    user_performance: tuple
    issues_by_type: Mapping
    issues_by_status: Mapping
    completion_trend: tuple

    def to_dict(self) -> dict:
        return {
            "totalIssues": self.total_issues,
            "totalStoryPoints": _json_number(self.total_story_points),
            "completedStoryPoints": _json_number(self.completed_story_points),
            "completedIssues": self.completed_issues,
            "averageResolutionTime": _json_number(self.average_resolution_time),
            "userPerformance": [u.to_dict() for u in self.user_performance],
            "issuesByType": dict(self.issues_by_type),
            "issuesByStatus": dict(self.issues_by_status),
            "completionTrend": [p.to_dict() for p in self.completion_trend]
        }


def _average(values: list) -> float:
    """Mean rounded to one decimal, 0 for no values."""
    if not values:
        return 0
    return round_half_away_from_zero(sum(values) / len(values), 1)


def _count_by(issues: list, attr: str) -> dict:
    counts = {}
    for issue in issues:
        label = getattr(issue, attr)
        counts[label] = counts.get(label, 0) + 1
    return counts


def _resolution_date(issue: Issue) -> Optional[str]:
    """UTC calendar date (YYYY-MM-DD) an issue was resolved on."""
    resolved_at = parse_timestamp(issue.resolved)
    if resolved_at is None:
        return None
    return resolved_at.date().isoformat()


def generate_user_performance(issues: list) -> list:
    """Group issues by assignee email.

    Unassigned issues are skipped. Users come back in the order they were
    first seen; sorting is left to the caller.
    """
    users = {}

    for issue in issues:
        if issue.assignee is None:
            continue

        email = issue.assignee.email
        if email not in users:
            users[email] = {
                "displayName": issue.assignee.display_name,
                "issuesCompleted": 0,
                "storyPointsCompleted": 0,
                "resolutionTimes": [],
                "issuesByType": {}
            }

        user = users[email]
        user["issuesByType"][issue.type] = user["issuesByType"].get(issue.type, 0) + 1

        if issue.is_resolved:
            user["issuesCompleted"] += 1
            user["storyPointsCompleted"] += issue.story_points
            user["resolutionTimes"].append(
                calculate_resolution_time(issue.created, issue.resolved)
            )

    return [
        TeamPerformanceData(
            display_name=user["displayName"],
            email=email,
            issues_completed=user["issuesCompleted"],
            story_points_completed=user["storyPointsCompleted"],
            average_resolution_time=_average(user["resolutionTimes"]),
            issues_by_type=MappingProxyType(user["issuesByType"])
        )
        for email, user in users.items()
    ]


def generate_completion_trend(issues: list) -> list:
    """Count resolved issues per UTC day, ascending by date.

    Days without resolutions are omitted.
    """
    per_day = {}

    for issue in issues:
        if not issue.is_resolved:
            continue

        day = _resolution_date(issue)
        if day is None:
            logger.warning(f"Skipping {issue.key} in completion trend: unparseable resolution date {issue.resolved!r}")
            continue

        per_day[day] = per_day.get(day, 0) + 1

    return [CompletionPoint(date=day, count=count) for day, count in sorted(per_day.items())]


def analyze(issues: list) -> TeamAnalytics:
    """Build the team analytics report from normalized issues."""
    issues = list(issues)

    issues_by_type = _count_by(issues, "type")
    issues_by_status = _count_by(issues, "status")

    total_story_points = sum(issue.story_points for issue in issues)

    completed = [issue for issue in issues if issue.is_done]
    completed_story_points = sum(issue.story_points for issue in completed)
    average_resolution_time = _average([
        calculate_resolution_time(issue.created, issue.resolved)
        for issue in completed
    ])

    user_performance = generate_user_performance(issues)
    completion_trend = generate_completion_trend(issues)

    logger.debug(
        f"Analyzed {len(issues)} issues: {len(completed)} done, "
        f"{len(user_performance)} assignees, {len(completion_trend)} trend days"
    )

    return TeamAnalytics(
        total_issues=len(issues),
        total_story_points=total_story_points,
        completed_story_points=completed_story_points,
        completed_issues=len(completed),
        average_resolution_time=average_resolution_time,
        user_performance=tuple(user_performance),
        issues_by_type=MappingProxyType(issues_by_type),
        issues_by_status=MappingProxyType(issues_by_status),
        completion_trend=tuple(completion_trend)
    )


def analyze_team_performance(raw_issues: list,
                             story_points_fields=DEFAULT_STORY_POINTS_FIELDS) -> TeamAnalytics:
    """Normalize raw Jira issue dicts and analyze them."""
    issues = [normalize_issue(raw, story_points_fields) for raw in raw_issues]
    return analyze(issues)
