"""Tests for the Redmine REST client."""

import json
from datetime import date

import pytest
import requests

from redmine_autotrack import (
    PAGE_SIZE,
    RedmineClient,
    RedmineError,
    Settings,
    STATUS_ALREADY_TRACKED,
    TimeRecord,
    TimeTrackingAutomation,
    WorkItem,
)


class FakeResponse:

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ''
        self.text = text

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(
                f"{self.status_code} Error", response=self
            )


class FakeSession:
    """Collects requests and replies from a queue of FakeResponses."""

    def __init__(self, responses=()):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def _reply(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.responses.pop(0)

    def get(self, url, **kwargs):
        return self._reply('GET', url, **kwargs)

    def post(self, url, **kwargs):
        return self._reply('POST', url, **kwargs)


def make_client(*responses, host='redmine.example.com'):
    session = FakeSession(responses)
    client = RedmineClient(host, 'secret', timeout=12,
                           session_factory=lambda: session)
    return client, session


ISSUE = {
    'id': 101,
    'subject': 'Fix login',
    'project': {'id': 1, 'name': 'Portal'},
    'tracker': {'id': 1, 'name': 'Bug'},
    'status': {'id': 2, 'name': 'In Progress'},
    'priority': {'id': 2, 'name': 'Normal'},
    'author': {'id': 3, 'name': 'Sam Doe'},
    'assigned_to': {'id': 4, 'name': 'Alex Roe'},
    'custom_fields': [{'id': 1, 'name': 'Sprint', 'value': '42'}],
}

ENTRY = {
    'id': 9001,
    'project': {'id': 1, 'name': 'Portal'},
    'issue': {'id': 101},
    'user': {'id': 4, 'name': 'Alex Roe'},
    'activity': {'id': 9, 'name': 'Development'},
    'hours': 2.5,
    'spent_on': '2026-10-19',
}


class TestReads:

    def test_get_my_issues_request(self):
        client, session = make_client(FakeResponse(payload={'issues': []}))

        client.get_my_issues()

        method, url, kwargs = session.calls[0]
        assert method == 'GET'
        assert url == 'https://redmine.example.com/issues.json'
        assert kwargs['params'] == {
            'assigned_to_id': 'me', 'limit': PAGE_SIZE, 'key': 'secret'
        }
        assert kwargs['timeout'] == 12

    def test_api_key_header_is_set(self):
        _, session = make_client()
        assert session.headers['X-Redmine-API-Key'] == 'secret'
        assert session.headers['Content-Type'] == 'application/json'

    def test_trailing_slash_is_stripped(self):
        client, _ = make_client(host='redmine.example.com/')
        assert client.base_url == 'https://redmine.example.com'

    def test_get_my_issues_parses_and_keeps_order(self):
        second = dict(ISSUE, id=7, subject='Second')
        client, _ = make_client(
            FakeResponse(payload={'issues': [ISSUE, second]})
        )

        items = client.get_my_issues()

        assert [i.id for i in items] == [101, 7]
        first = items[0]
        assert isinstance(first, WorkItem)
        assert first.subject == 'Fix login'
        assert first.project == 'Portal'
        assert first.status == 'In Progress'
        assert first.assigned_to == 'Alex Roe'
        assert first.raw['custom_fields'][0]['value'] == '42'

    def test_get_my_time_entries_request(self):
        client, session = make_client(
            FakeResponse(payload={'time_entries': [ENTRY]})
        )

        entries = client.get_my_time_entries()

        _, url, kwargs = session.calls[0]
        assert url == 'https://redmine.example.com/time_entries.json'
        assert kwargs['params'] == {
            'user_id': 'me', 'sort': 'spent_on:desc',
            'limit': PAGE_SIZE, 'key': 'secret',
        }
        assert entries == [
            TimeRecord(id=9001, issue_id=101,
                       spent_on=date(2026, 10, 19), hours=2.5)
        ]

    def test_time_entry_without_issue(self):
        entry = dict(ENTRY)
        del entry['issue']
        client, _ = make_client(FakeResponse(payload={'time_entries': [entry]}))

        assert client.get_my_time_entries()[0].issue_id is None

    def test_http_error_propagates(self):
        client, _ = make_client(FakeResponse(status_code=401, text='Unauthorized'))

        with pytest.raises(requests.exceptions.HTTPError):
            client.get_my_time_entries()

    def test_non_json_body_raises_redmine_error(self):
        client, _ = make_client(FakeResponse(text='<html>oops</html>'))

        with pytest.raises(RedmineError):
            client.get_my_issues()

    def test_missing_list_field_raises_redmine_error(self):
        client, _ = make_client(FakeResponse(payload={'errors': ['nope']}))

        with pytest.raises(RedmineError):
            client.get_my_time_entries()

    @pytest.mark.parametrize("broken", [
        dict(ENTRY, spent_on='19/10/2026'),
        dict(ENTRY, hours='lots'),
        dict(ENTRY, hours=-1),
        dict(ENTRY, hours=None),
        {'id': 1},
        'not an object',
    ])
    def test_malformed_time_entry_is_skipped(self, broken):
        client, _ = make_client(
            FakeResponse(payload={'time_entries': [ENTRY, broken]})
        )

        entries = client.get_my_time_entries()

        assert [e.id for e in entries] == [9001]

    def test_malformed_issue_raises_redmine_error(self):
        client, _ = make_client(
            FakeResponse(payload={'issues': [{'subject': 'no id'}]})
        )

        with pytest.raises(RedmineError):
            client.get_my_issues()


class TestCreateTimeEntry:

    def test_request_body(self):
        client, session = make_client(FakeResponse(status_code=201, payload={}))

        client.create_time_entry(101, date(2026, 10, 19), 2.8, 9)

        method, url, kwargs = session.calls[0]
        assert method == 'POST'
        assert url == 'https://redmine.example.com/time_entries.json'
        assert kwargs['params'] == {'key': 'secret'}
        assert kwargs['json'] == {
            'time_entry': {
                'issue_id': 101,
                'spent_on': '2026-10-19',
                'hours': 2.8,
                'activity_id': 9,
            }
        }
        assert kwargs['timeout'] == 12

    def test_non_2xx_raises(self):
        client, _ = make_client(
            FakeResponse(status_code=422, payload={'errors': ['Hours is invalid']})
        )

        with pytest.raises(requests.exceptions.HTTPError):
            client.create_time_entry(101, date(2026, 10, 19), 0.0, 9)


class TestLedgerThroughClient:
    """Tracked hours read through the real client."""

    def test_malformed_entry_from_another_day_does_not_reset_tracked(self):
        other_day = dict(ENTRY, id=9002, hours=None, spent_on='2026-10-01')
        today = dict(ENTRY, hours=8.0)
        client, session = make_client(
            FakeResponse(payload={'time_entries': [today, other_day]})
        )
        settings = Settings(host='redmine.example.com', api_key='secret',
                            today=date(2026, 10, 19), work_hours=8.0)

        result = TimeTrackingAutomation(settings, client=client).sync_daily()

        assert result.tracked == 8.0
        assert result.status == STATUS_ALREADY_TRACKED
        assert [call[0] for call in session.calls] == ['GET']
