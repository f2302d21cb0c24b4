"""People router: CRUD, reports and the external lookup trigger."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from app import settings
from app.deps import get_person_service
from app.errors import InvalidSortError, ReportError
from app.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PageRequest
from app.reports import PDF_CONTENT_TYPE, XLSX_CONTENT_TYPE
from app.schemas.people import (
    Person,
    PersonListResponse,
    PersonLookupResponse,
    PersonLookupScheduleResponse,
)
from app.services.people import PersonService
from app.services.scheduling.cron import compute_next_run, format_cron_human_readable

router = APIRouter(prefix="/api/v1/people", tags=["people"])

logger = logging.getLogger(__name__)


def _report_response(data: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/reports/pdf", summary="People report as PDF")
def get_pdf_report(service: PersonService = Depends(get_person_service)) -> Response:
    try:
        data = service.create_pdf_report()
    except ReportError as e:
        logger.error("PDF report failed: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate PDF report: {e}",
        ) from e
    return _report_response(data, PDF_CONTENT_TYPE, "people.pdf")


@router.get("/reports/xlsx", summary="People report as XLSX")
def get_xlsx_report(service: PersonService = Depends(get_person_service)) -> Response:
    try:
        data = service.create_xls_report()
    except (ReportError, OSError) as e:
        logger.error("XLSX report failed: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate XLSX report: {e}",
        ) from e
    return _report_response(data, XLSX_CONTENT_TYPE, "people.xlsx")


@router.post(
    "/lookup",
    response_model=PersonLookupResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Trigger the external person lookup now",
)
def trigger_lookup() -> PersonLookupResponse:
    from app.tasks.people import lookup_and_save_new_person_task

    result = lookup_and_save_new_person_task.delay()
    return PersonLookupResponse(
        status="started",
        task="lookup_and_save_new_person",
        task_id=getattr(result, "id", None),
    )


@router.get("/lookup/schedule", response_model=PersonLookupScheduleResponse)
def get_lookup_schedule() -> PersonLookupScheduleResponse:
    next_run = compute_next_run(settings.PERSON_LOOKUP_CRON, settings.TZ, datetime.now(timezone.utc))
    return PersonLookupScheduleResponse(
        task="lookup_and_save_new_person",
        cron=settings.PERSON_LOOKUP_CRON,
        description=format_cron_human_readable(settings.PERSON_LOOKUP_CRON),
        timezone=settings.TZ,
        next_run_at=next_run.isoformat(),
    )


@router.post("", response_model=Person, status_code=status.HTTP_201_CREATED)
def create_person(
    person: Person,
    service: PersonService = Depends(get_person_service),
) -> Person:
    """Create a new person. The id is assigned by the store."""
    if person.id is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A new person cannot already have an id",
        )
    return service.save(person)


@router.put("/{person_id}", response_model=Person)
def update_person(
    person: Person,
    person_id: int = Path(..., description="Person ID"),
    service: PersonService = Depends(get_person_service),
) -> Person:
    if person.id is not None and person.id != person_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Person id in body does not match the path",
        )
    if service.find_one(person_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Person not found",
        )
    return service.save(person.model_copy(update={"id": person_id}))


@router.get("", response_model=PersonListResponse)
def list_people(
    response: Response,
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
    sort: Optional[List[str]] = Query(None, description="Sort as field,asc|desc; repeatable"),
    service: PersonService = Depends(get_person_service),
) -> PersonListResponse:
    """List people one page at a time."""
    try:
        page_request = PageRequest.of(page=page, size=size, sort=sort)
    except InvalidSortError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    result = service.find_all(page_request)
    response.headers["X-Total-Count"] = str(result.total)
    return PersonListResponse(
        people=list(result.content),
        total=result.total,
        page=page_request.page,
        size=page_request.size,
    )


@router.get("/{person_id}", response_model=Person)
def get_person(
    person_id: int = Path(..., description="Person ID"),
    service: PersonService = Depends(get_person_service),
) -> Person:
    person = service.find_one(person_id)
    if person is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Person not found",
        )
    return person


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_person(
    person_id: int = Path(..., description="Person ID"),
    service: PersonService = Depends(get_person_service),
) -> Response:
    service.delete(person_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
