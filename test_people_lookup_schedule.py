from datetime import datetime, timezone

import pytest
from celery.schedules import crontab

from app.celery_app import PERSON_LOOKUP_TASK, celery_app
from app.schemas.people import Person
from app.services.scheduling.cron import (
    compute_next_run,
    format_cron_human_readable,
    to_crontab,
    validate_cron,
)
from app.tasks import people as people_tasks


class StubService:
    def __init__(self, people=None, error=None):
        self.people = people or []
        self.error = error
        self.calls = 0

    def lookup_and_save_new_person(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.people


def test_beat_schedule_runs_lookup_every_five_minutes():
    entry = celery_app.conf.beat_schedule["lookup-new-people"]

    assert entry["task"] == PERSON_LOOKUP_TASK
    schedule = entry["schedule"]
    assert isinstance(schedule, crontab)
    assert schedule.minute == set(range(0, 60, 5))
    assert schedule.hour == set(range(24))


def test_lookup_task_is_registered():
    assert PERSON_LOOKUP_TASK in celery_app.tasks


def test_run_person_lookup_invokes_service_synchronously():
    service = StubService(people=[Person(id=1, name="A"), Person(id=2, name="B")])

    result = people_tasks.run_person_lookup(service)

    assert service.calls == 1
    assert result == {"status": "completed", "domain": "people_lookup", "saved": 2}


def test_run_person_lookup_propagates_failures():
    from app.errors import TransportError

    service = StubService(error=TransportError("Connection refused"))

    with pytest.raises(TransportError):
        people_tasks.run_person_lookup(service)


class StubDirectoryClient:
    instances = []

    def __init__(self):
        self.closed = False
        StubDirectoryClient.instances.append(self)

    def close(self):
        self.closed = True


def _patch_default_collaborators(monkeypatch, service):
    StubDirectoryClient.instances = []
    monkeypatch.setattr("app.directory_client.DirectoryClient", StubDirectoryClient)

    def build_service(directory_client=None):
        service.directory_client = directory_client
        return service

    monkeypatch.setattr("app.services.people.PersonService", build_service)


def test_task_apply_uses_default_service(monkeypatch):
    service = StubService(people=[Person(id=3, name="C")])
    _patch_default_collaborators(monkeypatch, service)

    result = people_tasks.lookup_and_save_new_person_task.apply().get()

    assert result["saved"] == 1
    assert service.calls == 1
    assert service.directory_client is StubDirectoryClient.instances[0]


def test_run_person_lookup_closes_its_directory_client(monkeypatch):
    service = StubService(people=[Person(id=4, name="D")])
    _patch_default_collaborators(monkeypatch, service)

    for _ in range(3):
        people_tasks.run_person_lookup()

    assert len(StubDirectoryClient.instances) == 3
    assert all(client.closed for client in StubDirectoryClient.instances)


def test_run_person_lookup_closes_client_when_lookup_fails(monkeypatch):
    from app.errors import TransportError

    service = StubService(error=TransportError("Connection refused"))
    _patch_default_collaborators(monkeypatch, service)

    with pytest.raises(TransportError):
        people_tasks.run_person_lookup()

    assert StubDirectoryClient.instances[0].closed is True


def test_compute_next_run_every_five_minutes():
    now = datetime(2026, 10, 19, 10, 2, 30, tzinfo=timezone.utc)

    assert compute_next_run("*/5 * * * *", "UTC", now) == datetime(2026, 10, 19, 10, 5, tzinfo=timezone.utc)


def test_compute_next_run_respects_timezone():
    # 02:00 UTC is 05:00 in Moscow; next 06:00 Moscow is 03:00 UTC
    now = datetime(2026, 10, 19, 2, 0, tzinfo=timezone.utc)

    assert compute_next_run("0 6 * * *", "Europe/Moscow", now) == datetime(2026, 10, 19, 3, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("expr", ["not a cron", "* * * *", "61 * * * *"])
def test_invalid_cron_is_rejected(expr):
    with pytest.raises(ValueError):
        validate_cron(expr)


def test_to_crontab_splits_fields():
    schedule = to_crontab("30 3 * * 1")

    assert schedule.minute == {30}
    assert schedule.hour == {3}
    assert schedule.day_of_week == {1}


@pytest.mark.parametrize(
    "expr,expected",
    [
        ("*/5 * * * *", "every 5 minutes"),
        ("* * * * *", "* * * * *"),
        ("*/1 * * * *", "every minute"),
        ("0 */4 * * *", "every 4 hours"),
        ("30 3 * * *", "daily at 03:30"),
    ],
)
def test_format_cron_human_readable(expr, expected):
    assert format_cron_human_readable(expr) == expected
