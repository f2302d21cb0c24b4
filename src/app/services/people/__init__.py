"""Person service and its default wiring."""

from app.services.people.service import PersonService

__all__ = ["PersonService"]
