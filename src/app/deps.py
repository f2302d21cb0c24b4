"""Dependencies for FastAPI endpoints."""

from app.services.people import PersonService

_person_service: PersonService | None = None


def get_person_service() -> PersonService:
    """Shared PersonService; the engine pool and HTTP client are safe to share."""
    global _person_service
    if _person_service is None:
        _person_service = PersonService()
    return _person_service
