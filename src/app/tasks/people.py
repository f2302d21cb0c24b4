"""Celery task for the scheduled person lookup."""

from __future__ import annotations

from typing import Any, Dict, Optional

from app.celery_app import PERSON_LOOKUP_TASK, celery_app


def _summary(saved) -> Dict[str, Any]:
    return {"status": "completed", "domain": "people_lookup", "saved": len(saved)}


def run_person_lookup(service: Optional[Any] = None) -> Dict[str, Any]:
    """Run one lookup synchronously; the beat schedule is only the trigger.

    A service passed in keeps its own directory client. Otherwise a client is
    built for this run and closed when the run ends.
    """
    if service is not None:
        return _summary(service.lookup_and_save_new_person())

    from app.directory_client import DirectoryClient
    from app.services.people import PersonService

    client = DirectoryClient()
    try:
        saved = PersonService(directory_client=client).lookup_and_save_new_person()
    finally:
        client.close()
    return _summary(saved)


@celery_app.task(name=PERSON_LOOKUP_TASK)
def lookup_and_save_new_person_task() -> Dict[str, Any]:
    return run_person_lookup()
