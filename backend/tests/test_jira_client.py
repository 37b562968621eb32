"""Tests for JiraClient."""

from unittest.mock import Mock, patch

import pytest
import requests

from services.jira_client import JiraApiError, JiraClient, build_project_jql


class TestJiraClientInit:
    """Test client initialization."""

    def test_init_strips_trailing_slash(self):
        client = JiraClient(
            server="https://test.atlassian.net/",
            email="test@example.com",
            token="token123"
        )
        assert client.server == "https://test.atlassian.net"

    def test_issue_fields_include_story_points_fields(self, mock_jira_credentials):
        client = JiraClient(**mock_jira_credentials, story_points_fields=["customfield_10002"])
        fields = client.issue_fields()

        assert "resolutiondate" in fields
        assert "assignee" in fields
        assert fields[-1] == "customfield_10002"


class TestBuildProjectJql:
    """Test JQL construction."""

    def test_project_only(self):
        assert build_project_jql("PROJ") == "project = PROJ"

    def test_with_date_range(self):
        jql = build_project_jql("PROJ", "2024-01-01", "2024-03-31")
        assert jql == 'project = PROJ AND created >= "2024-01-01" AND created <= "2024-03-31"'

    def test_with_end_date_only(self):
        assert build_project_jql("PROJ", end_date="2024-03-31") == 'project = PROJ AND created <= "2024-03-31"'


class TestRequestErrors:
    """Test translation of HTTP failures into JiraApiError."""

    @patch("services.jira_client.requests.request")
    def test_uses_jira_error_message(self, mock_request, mock_jira_credentials):
        mock_request.return_value = Mock(
            status_code=400,
            json=lambda: {"errorMessages": ["The value 'NOPE' does not exist for the field 'project'."]}
        )
        client = JiraClient(**mock_jira_credentials)

        with pytest.raises(JiraApiError) as exc_info:
            client.search_issues("project = NOPE")

        assert exc_info.value.status_code == 400
        assert "does not exist" in exc_info.value.message

    @patch("services.jira_client.requests.request")
    def test_falls_back_to_generic_message(self, mock_request, mock_jira_credentials):
        mock_request.return_value = Mock(status_code=500, json=Mock(side_effect=ValueError()))
        client = JiraClient(**mock_jira_credentials)

        with pytest.raises(JiraApiError) as exc_info:
            client.get_projects()

        assert exc_info.value.message == "Failed to fetch JIRA projects"
        assert exc_info.value.status_code == 500

    @patch("services.jira_client.requests.request")
    def test_timeout(self, mock_request, mock_jira_credentials):
        mock_request.side_effect = requests.exceptions.Timeout()
        client = JiraClient(**mock_jira_credentials)

        with pytest.raises(JiraApiError) as exc_info:
            client.get_myself()

        assert exc_info.value.status_code == 504

    @patch("services.jira_client.requests.request")
    def test_connection_error(self, mock_request, mock_jira_credentials):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")
        client = JiraClient(**mock_jira_credentials)

        with pytest.raises(JiraApiError) as exc_info:
            client.get_projects()

        assert exc_info.value.status_code is None
        assert "Failed to connect to Jira" in exc_info.value.message


class TestSearchIssues:
    """Test issue search and pagination."""

    @patch("services.jira_client.requests.request")
    def test_posts_jql_search(self, mock_request, mock_jira_credentials, sample_issues):
        mock_request.return_value = Mock(
            status_code=200,
            json=lambda: {"issues": sample_issues, "total": 5}
        )
        client = JiraClient(**mock_jira_credentials)

        issues, total = client.search_issues("project = PROJ")

        assert total == 5
        assert len(issues) == 5
        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://test.atlassian.net/rest/api/2/search")
        assert kwargs["json"]["jql"] == "project = PROJ"
        assert kwargs["json"]["startAt"] == 0
        assert "customfield_10016" in kwargs["json"]["fields"]
        assert kwargs["auth"] == ("test@example.com", "test-token-123")

    def test_fetch_all_issues_paginates(self, mock_jira_credentials):
        client = JiraClient(**mock_jira_credentials)
        pages = [
            ([{"key": "P-1"}, {"key": "P-2"}], 3),
            ([{"key": "P-3"}], 3),
        ]

        with patch.object(client, "search_issues", side_effect=pages) as mock_search:
            issues = client.fetch_all_issues("PROJ", start_date="2024-01-01")

        assert [i["key"] for i in issues] == ["P-1", "P-2", "P-3"]
        assert mock_search.call_count == 2
        assert mock_search.call_args_list[1].kwargs["start_at"] == 2
        assert mock_search.call_args_list[0].args[0] == 'project = PROJ AND created >= "2024-01-01"'

    def test_fetch_all_issues_stops_on_empty_page(self, mock_jira_credentials):
        client = JiraClient(**mock_jira_credentials)

        with patch.object(client, "search_issues", side_effect=[([], 10)]) as mock_search:
            issues = client.fetch_all_issues("PROJ")

        assert issues == []
        assert mock_search.call_count == 1

    @patch("services.jira_client.requests.request")
    def test_sprint_issues_paginate(self, mock_request, mock_jira_credentials):
        first = [{"key": f"P-{i}"} for i in range(100)]
        second = [{"key": "P-100"}]
        mock_request.side_effect = [
            Mock(status_code=200, json=lambda: {"issues": first}),
            Mock(status_code=200, json=lambda: {"issues": second}),
        ]
        client = JiraClient(**mock_jira_credentials)

        issues = client.get_sprint_issues(42)

        assert len(issues) == 101
        assert mock_request.call_args_list[1].kwargs["params"]["startAt"] == 100


class TestFindStoryPointsFields:
    """Test story point field discovery."""

    @patch("services.jira_client.requests.request")
    def test_only_numeric_candidates(self, mock_request, mock_jira_credentials):
        mock_request.return_value = Mock(status_code=200, json=lambda: [
            {"id": "customfield_10016", "name": "Story point estimate", "custom": True, "schema": {"type": "number"}},
            {"id": "customfield_10058", "name": "Story Points", "custom": True, "schema": {"type": "number"}},
            {"id": "customfield_10099", "name": "Points of contact", "custom": True, "schema": {"type": "string"}},
            {"id": "summary", "name": "Summary", "schema": {"type": "string"}},
        ])
        client = JiraClient(**mock_jira_credentials)

        candidates = client.find_story_points_fields()

        assert [c["id"] for c in candidates] == ["customfield_10016", "customfield_10058"]
