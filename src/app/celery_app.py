"""Common Celery app for Beat and Worker."""

import importlib
import pkgutil
from typing import List

from celery import Celery
from celery.signals import setup_logging

from app import settings
from app.logging_setup import configure_logging
from app.services.scheduling.cron import to_crontab

PERSON_LOOKUP_TASK = "app.tasks.people.lookup_and_save_new_person"

celery_app = Celery(
    "people",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

# Celery Beat schedule
celery_app.conf.beat_schedule = {
    # Poll the external directory for new people (default: every 5th minute).
    # Runs are not guarded against overlap.
    "lookup-new-people": {
        "task": PERSON_LOOKUP_TASK,
        "schedule": to_crontab(settings.PERSON_LOOKUP_CRON),
        "options": {"queue": "celery"},
    },
}

celery_app.conf.timezone = settings.TZ


@setup_logging.connect
def _setup_celery_logging(**_kwargs) -> None:
    configure_logging()


def _import_all_task_modules() -> List[str]:
    """Import all modules under `app.tasks.*` so Celery registers task decorators.

    This avoids manual imports in `app/tasks/__init__.py` and automatically picks up
    new task modules when they are added.
    """
    imported: List[str] = []
    try:
        import app.tasks as tasks_pkg
    except Exception as e:
        raise RuntimeError(
            "Celery startup failed: cannot import task package 'app.tasks'"
        ) from e

    try:
        for module_info in pkgutil.walk_packages(
            tasks_pkg.__path__,
            prefix=f"{tasks_pkg.__name__}.",
        ):
            name = module_info.name
            importlib.import_module(name)
            imported.append(name)
    except Exception as e:
        raise RuntimeError(
            "Celery startup failed: error while importing task modules under 'app.tasks.*'"
        ) from e
    return imported


# Auto-import tasks for both worker and beat processes.
_import_all_task_modules()
