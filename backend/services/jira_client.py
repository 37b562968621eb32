"""Jira REST API client for projects, boards, sprints and issue search."""

import logging
from typing import Optional

import requests

from services.issue_normalizer import DEFAULT_STORY_POINTS_FIELDS

logger = logging.getLogger(__name__)

BASE_ISSUE_FIELDS = [
    "summary", "status", "assignee", "issuetype",
    "created", "updated", "resolutiondate"
]


class JiraApiError(Exception):
    """Raised when Jira rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response, fallback: str) -> str:
    """Pull the most useful error message out of a Jira error response."""
    try:
        body = response.json()
    except ValueError:
        return fallback

    if not isinstance(body, dict):
        return fallback

    messages = body.get("errorMessages") or []
    if messages:
        return messages[0]
    return body.get("message") or fallback


def build_project_jql(project_key: str, start_date: str = None, end_date: str = None) -> str:
    """Build the JQL used to fetch a project's issues within a created-date range."""
    jql = f"project = {project_key}"

    if start_date:
        jql += f' AND created >= "{start_date}"'

    if end_date:
        jql += f' AND created <= "{end_date}"'

    return jql


class JiraClient:
    """Thin wrapper over the Jira REST and Agile APIs."""

    def __init__(self, server: str, email: str, token: str,
                 story_points_fields=DEFAULT_STORY_POINTS_FIELDS, timeout: int = 30):
        self.server = server.rstrip("/")
        self.email = email
        self.token = token
        self.story_points_fields = list(story_points_fields)
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, params: Optional[dict] = None,
                 json: Optional[dict] = None, fallback: str = "An error occurred while communicating with JIRA"):
        """Make authenticated request to Jira API."""
        try:
            response = requests.request(
                method,
                f"{self.server}{endpoint}",
                auth=(self.email, self.token),
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                params=params,
                json=json,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            raise JiraApiError("Connection to Jira timed out", 504)
        except requests.exceptions.RequestException as e:
            raise JiraApiError(f"Failed to connect to Jira: {str(e)}")

        if response.status_code >= 400:
            message = _error_message(response, fallback)
            logger.warning(f"Jira {method} {endpoint} failed with {response.status_code}: {message}")
            raise JiraApiError(message, response.status_code)

        return response.json()

    def get_myself(self) -> dict:
        """Fetch the user the credentials belong to."""
        return self._request("GET", "/rest/api/2/myself", fallback="Failed to validate JIRA credentials")

    def get_projects(self) -> list:
        return self._request("GET", "/rest/api/2/project", fallback="Failed to fetch JIRA projects")

    def get_users(self) -> list:
        return self._request("GET", "/rest/api/2/users", fallback="Failed to fetch JIRA users")

    def get_boards(self, project_key: str) -> list:
        data = self._request(
            "GET", "/rest/agile/1.0/board",
            params={"projectKeyOrId": project_key},
            fallback="Failed to fetch JIRA boards"
        )
        return data.get("values", [])

    def get_sprints(self, board_id) -> list:
        data = self._request(
            "GET", f"/rest/agile/1.0/board/{board_id}/sprint",
            fallback="Failed to fetch JIRA sprints"
        )
        return data.get("values", [])

    def get_sprint_issues(self, sprint_id) -> list:
        """Get all issues in a sprint."""
        all_issues = []
        start_at = 0
        max_results = 100

        while True:
            data = self._request(
                "GET", f"/rest/agile/1.0/sprint/{sprint_id}/issue",
                params={
                    "startAt": start_at,
                    "maxResults": max_results,
                    "fields": ",".join(self.issue_fields())
                },
                fallback="Failed to fetch sprint issues"
            )

            issues = data.get("issues", [])
            all_issues.extend(issues)

            if len(issues) < max_results:
                break

            start_at += max_results

        return all_issues

    def issue_fields(self) -> list:
        """Fields requested for every issue search, story point fields included."""
        fields = list(BASE_ISSUE_FIELDS)
        for sp_field in self.story_points_fields:
            if sp_field not in fields:
                fields.append(sp_field)
        return fields

    def search_issues(self, jql: str, fields: list = None,
                      start_at: int = 0, max_results: int = 100) -> tuple:
        """Run a JQL search, returning (issues, total)."""
        data = self._request(
            "POST", "/rest/api/2/search",
            json={
                "jql": jql,
                "fields": fields or self.issue_fields(),
                "startAt": start_at,
                "maxResults": max_results
            },
            fallback="Failed to search JIRA issues"
        )
        return data.get("issues", []), data.get("total", 0)

    def fetch_all_issues(self, project_key: str,
                         start_date: str = None, end_date: str = None) -> list:
        """Fetch every issue in a project, created within the optional range."""
        jql = build_project_jql(project_key, start_date, end_date)

        all_issues = []
        start_at = 0
        max_results = 100

        while True:
            issues, total = self.search_issues(jql, start_at=start_at, max_results=max_results)
            all_issues.extend(issues)
            start_at += len(issues)

            if not issues or start_at >= total:
                break

        logger.info(f"Fetched {len(all_issues)} issues for {jql}")
        return all_issues

    def find_story_points_fields(self) -> list:
        """Find fields in this Jira instance that might hold story points."""
        fields = self._request("GET", "/rest/api/2/field", fallback="Failed to fetch JIRA fields")

        candidates = []
        for field in fields:
            name = field.get("name", "").lower()

            if field.get("schema", {}).get("type") != "number":
                continue

            if any(term in name for term in ["story point", "points", "estimate", "sizing"]):
                candidates.append({
                    "id": field.get("id", ""),
                    "name": field.get("name"),
                    "custom": field.get("custom", False)
                })

        return candidates
