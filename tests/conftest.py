"""Shared fixtures: settings and an in-memory stand-in for RedmineClient."""

import threading
from datetime import date

import pytest
import requests

from redmine_autotrack import Settings, TimeRecord, WorkItem

TODAY = date(2026, 10, 19)


class FakeRedmineClient:
    """Records every call; reads and writes can be told to fail."""

    def __init__(self, entries=None, issues=None, entries_error=None,
                 issues_error=None, failing_issue_ids=()):
        self.entries = list(entries or [])
        self.issues = list(issues or [])
        self.entries_error = entries_error
        self.issues_error = issues_error
        self.failing_issue_ids = set(failing_issue_ids)
        self.entry_reads = 0
        self.issue_reads = 0
        self.created = []
        self._lock = threading.Lock()

    def get_my_time_entries(self):
        self.entry_reads += 1
        if self.entries_error:
            raise self.entries_error
        return list(self.entries)

    def get_my_issues(self):
        self.issue_reads += 1
        if self.issues_error:
            raise self.issues_error
        return list(self.issues)

    def create_time_entry(self, issue_id, spent_on, hours, activity_id):
        with self._lock:
            self.created.append({
                'issue_id': issue_id,
                'spent_on': spent_on,
                'hours': hours,
                'activity_id': activity_id,
            })
        if issue_id in self.failing_issue_ids:
            raise requests.exceptions.HTTPError(
                "422 Client Error: Unprocessable Entity"
            )


def record(hours, spent_on=TODAY, record_id=1, issue_id=100):
    return TimeRecord(id=record_id, issue_id=issue_id, spent_on=spent_on,
                      hours=hours)


def issues(*ids):
    return [WorkItem(id=i, subject=f"Issue {i}") for i in ids]


@pytest.fixture
def settings():
    return Settings(
        host='redmine.example.com',
        api_key='secret',
        today=TODAY,
        work_hours=8.0,
    )
