"""Exceptions raised by the people service and its collaborators."""


class PeopleServiceError(Exception):
    """Base class for errors raised by this application."""


class ReportError(PeopleServiceError):
    """Report template could not be loaded, compiled, filled or exported."""


class TransportError(PeopleServiceError):
    """The external person directory could not be reached or read."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DirectoryPayloadError(TransportError):
    """The directory answered, but the body is not a JSON array of people."""


class InvalidSortError(ValueError):
    """Sort expression names an unknown field or direction."""
