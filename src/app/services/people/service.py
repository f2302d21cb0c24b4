"""Person service: CRUD passthrough, report generation, scheduled lookup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from app import settings
from app.db_people import PersonRepository
from app.directory_client import DirectoryClient
from app.errors import TransportError
from app.pagination import Page, PageRequest
from app.reports import (
    XlsxExportConfiguration,
    compile_template,
    export_pdf,
    export_xlsx,
    fill_report,
    load_template,
)
from app.reports.filling import FilledReport
from app.schemas.people import Person

logger = logging.getLogger(__name__)


class PersonService:
    """Orchestrates the record store, the report renderer and the directory client.

    Collaborators are injected so tests (and the Celery task) can swap them.
    """

    def __init__(
        self,
        repository: Optional[PersonRepository] = None,
        directory_client: Optional[DirectoryClient] = None,
        template_path: Optional[Path] = None,
        created_by: Optional[str] = None,
    ) -> None:
        self.repository = repository or PersonRepository()
        self._directory_client = directory_client
        self.template_path = template_path
        self.created_by = created_by or settings.REPORT_CREATED_BY

    @property
    def directory_client(self) -> DirectoryClient:
        # created on first lookup
        if self._directory_client is None:
            self._directory_client = DirectoryClient()
        return self._directory_client

    def save(self, person: Person) -> Person:
        logger.debug("Request to save Person : %s", person)
        return self.repository.save(person)

    def find_all(self, page_request: PageRequest) -> Page[Person]:
        logger.debug("Request to get all People: %s", page_request)
        return self.repository.find_page(page_request)

    def find_one(self, person_id: int) -> Optional[Person]:
        logger.debug("Request to get Person : %s", person_id)
        return self.repository.find_by_id(person_id)

    def delete(self, person_id: int) -> None:
        logger.debug("Request to delete Person : %s", person_id)
        self.repository.delete_by_id(person_id)

    def _report_parameters(self) -> Dict[str, Any]:
        return {"createdBy": self.created_by}

    def _fill_person_report(self) -> FilledReport:
        """Load, compile and fill the bundled template with every stored person.

        Nothing is cached: each call re-reads the template and the records.
        """
        template = load_template(self.template_path)
        compiled = compile_template(template, Person)
        people = self.repository.find_all()
        return fill_report(compiled, self._report_parameters(), people)

    def create_pdf_report(self) -> bytes:
        return export_pdf(self._fill_person_report())

    def create_xls_report(self) -> bytes:
        config = XlsxExportConfiguration(one_page_per_sheet=True, detect_cell_type=True)
        return export_xlsx(self._fill_person_report(), config)

    def lookup_new_people(self) -> List[Person]:
        logger.debug("Lookup new people. Call external resource %s", self.directory_client.url)
        return self.directory_client.fetch_people()

    def lookup_and_save_new_person(self) -> List[Person]:
        """Fetch people from the external directory and save all of them.

        No de-duplication: records already stored are saved again (updated when
        their id exists, inserted otherwise). Failures abort the run before
        anything is written.
        """
        try:
            people = self.lookup_new_people()
        except TransportError as exc:
            logger.error("Person lookup failed, nothing saved: %s", exc)
            raise

        logger.info("Found %s person(s). Saving.", len(people))
        return self.repository.save_all(people)
