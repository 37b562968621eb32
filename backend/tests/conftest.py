"""Shared fixtures for Jira Team Dashboard tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture
def mock_jira_credentials():
    """Mock Jira credentials for testing."""
    return {
        "server": "https://test.atlassian.net",
        "email": "test@example.com",
        "token": "test-token-123"
    }


@pytest.fixture
def jira_headers(mock_jira_credentials):
    """Request headers carrying Jira credentials."""
    return {
        "X-Jira-Server": mock_jira_credentials["server"],
        "X-Jira-Email": mock_jira_credentials["email"],
        "X-Jira-Token": mock_jira_credentials["token"]
    }


@pytest.fixture
def alice():
    return {"displayName": "Alice Example", "emailAddress": "alice@example.com"}


@pytest.fixture
def bob():
    return {"displayName": "Bob Example", "emailAddress": "bob@example.com"}


@pytest.fixture
def sample_issue_completed(alice):
    """Done story with points, resolved 8 days after creation."""
    return {
        "id": "10123",
        "key": "PROJ-123",
        "fields": {
            "summary": "Implement feature X",
            "issuetype": {"name": "Story"},
            "status": {"name": "Done"},
            "assignee": alice,
            "created": "2024-01-02T10:00:00.000+0000",
            "updated": "2024-01-10T15:30:00.000+0000",
            "resolutiondate": "2024-01-10T15:30:00.000+0000",
            "customfield_10016": 5.0
        }
    }


@pytest.fixture
def sample_issue_incomplete(bob):
    """Unresolved bug still in progress."""
    return {
        "id": "10124",
        "key": "PROJ-124",
        "fields": {
            "summary": "Fix bug Y",
            "issuetype": {"name": "Bug"},
            "status": {"name": "In Progress"},
            "assignee": bob,
            "created": "2024-01-05T10:00:00.000+0000",
            "updated": "2024-01-06T10:00:00.000+0000",
            "resolutiondate": None,
            "customfield_10016": 3.0
        }
    }


@pytest.fixture
def sample_bug_completed(alice):
    """Done bug resolved about two days after creation."""
    return {
        "id": "10126",
        "key": "PROJ-126",
        "fields": {
            "summary": "Fix login issue",
            "issuetype": {"name": "Bug"},
            "status": {"name": "Done"},
            "assignee": alice,
            "created": "2024-01-04T10:00:00.000+0000",
            "updated": "2024-01-06T14:00:00.000+0000",
            "resolutiondate": "2024-01-06T14:00:00.000+0000",
            "customfield_10016": 2.0
        }
    }


@pytest.fixture
def sample_issue_no_points():
    """Closed, unassigned task without story points."""
    return {
        "id": "10125",
        "key": "PROJ-125",
        "fields": {
            "summary": "Research task",
            "issuetype": {"name": "Task"},
            "status": {"name": "Closed"},
            "assignee": None,
            "created": "2024-01-03T10:00:00.000+0000",
            "updated": "2024-01-08T12:00:00.000+0000",
            "resolutiondate": "2024-01-08T12:00:00.000+0000"
        }
    }


@pytest.fixture
def sample_issue_resolved_not_done(bob):
    """Resolved story whose status is not Closed/Done, pointed via the secondary field."""
    return {
        "id": "10127",
        "key": "PROJ-127",
        "fields": {
            "summary": "Ship config change",
            "issuetype": {"name": "Story"},
            "status": {"name": "Resolved"},
            "assignee": bob,
            "created": "2024-01-07T09:00:00.000+0000",
            "updated": "2024-01-10T09:00:00.000+0000",
            "resolutiondate": "2024-01-10T09:00:00.000+0000",
            "customfield_10058": 8
        }
    }


@pytest.fixture
def sample_issues(sample_issue_completed, sample_issue_incomplete, sample_bug_completed,
                  sample_issue_no_points, sample_issue_resolved_not_done):
    """Collection of issues for a project."""
    return [
        sample_issue_completed,
        sample_issue_incomplete,
        sample_bug_completed,
        sample_issue_no_points,
        sample_issue_resolved_not_done
    ]


@pytest.fixture
def settings_store():
    from services.settings_store import InMemorySettingsStore
    return InMemorySettingsStore()


@pytest.fixture
def app(settings_store):
    """Create Flask test app."""
    from dashboard import create_app
    app = create_app(config={"TESTING": True}, settings_store=settings_store)
    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()
