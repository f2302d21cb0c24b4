import json
import logging
from typing import Any, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from app import settings
from app.errors import DirectoryPayloadError, TransportError
from app.schemas.people import Person

_PEOPLE_ADAPTER = TypeAdapter(List[Person])


class DirectoryClient:
    """Client for the external "new people" directory.

    One GET, no auth and no custom headers, JSON array body. No retries: the
    next scheduled lookup is the only recovery.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        client: Optional[httpx.Client] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.url = url or settings.PERSON_LOOKUP_URL
        self.timeout_seconds = (
            float(timeout_seconds) if timeout_seconds is not None else settings.PERSON_LOOKUP_TIMEOUT
        )
        self.logger = logger or logging.getLogger("people.directory")
        self._client = client or httpx.Client(timeout=self.timeout_seconds)

    def close(self) -> None:
        self._client.close()

    def _get_json(self) -> Any:
        self.logger.debug("GET %s", self.url)
        try:
            response = self._client.get(self.url, headers={})
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Request to {self.url} failed: {type(exc).__name__}: {exc}",
                url=self.url,
            ) from exc

        status = response.status_code
        if not 200 <= status < 300:
            raise TransportError(
                f"Directory returned HTTP {status} for {self.url}",
                url=self.url,
                status_code=status,
            )

        if not response.content or not response.content.strip():
            self.logger.info("OK %s empty body", self.url)
            return None

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DirectoryPayloadError(
                f"Directory body is not valid JSON: {exc}",
                url=self.url,
                status_code=status,
            ) from exc

        self.logger.info("OK %s bytes=%s", self.url, len(response.content))
        return data

    def fetch_people(self) -> List[Person]:
        """GET the directory and return its people; `null` or empty body yields []."""
        data = self._get_json()
        if data is None:
            return []
        if not isinstance(data, list):
            raise DirectoryPayloadError(
                f"Directory body must be a JSON array, got {type(data).__name__}",
                url=self.url,
            )
        try:
            return _PEOPLE_ADAPTER.validate_python(data)
        except ValidationError as exc:
            raise DirectoryPayloadError(
                f"Directory body does not match the person shape: {exc}",
                url=self.url,
            ) from exc
