"""Data-access helpers for the `people` table.

This module provides PersonRepository with:
- save(person): insert or update one row
- find_page(page_request): one page plus the total count
- find_by_id(id) / delete_by_id(id)
- find_all(): every row, unpaginated (report data source)
- save_all(people): batch insert/update in a single transaction

Constraints:
- Raw SQL via sqlalchemy.text
- Every write runs in one engine.begin() block: commit on success, rollback on error
- Schema is created by Alembic migrations, not at runtime
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from app.pagination import Page, PageRequest
from app.schemas.people import Person

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = "id, name, city"


def _row_to_person(row) -> Person:
    return Person(id=row[0], name=row[1], city=row[2])


class PersonRepository:
    """Relational store for Person rows."""

    def __init__(self, engine: Optional[Engine] = None) -> None:
        if engine is None:
            from app.db import engine as default_engine

            engine = default_engine
        self.engine = engine

    def _exists(self, conn: Connection, person_id: int) -> bool:
        result = conn.execute(
            text("SELECT 1 FROM people WHERE id = :id"),
            {"id": person_id},
        )
        return result.fetchone() is not None

    def _save(self, conn: Connection, person: Person) -> Person:
        params: Dict[str, Any] = {"name": person.name, "city": person.city}

        if person.id is not None and self._exists(conn, person.id):
            params["id"] = person.id
            conn.execute(
                text("UPDATE people SET name = :name, city = :city WHERE id = :id"),
                params,
            )
            return Person(id=person.id, name=person.name, city=person.city)

        # New row, or an id the store does not know: the store assigns the id
        result = conn.execute(
            text("INSERT INTO people (name, city) VALUES (:name, :city) RETURNING id"),
            params,
        )
        new_id = result.scalar_one()
        return Person(id=new_id, name=person.name, city=person.city)

    def save(self, person: Person) -> Person:
        with self.engine.begin() as conn:
            return self._save(conn, person)

    def save_all(self, people: Optional[Iterable[Person]]) -> List[Person]:
        """Save every person in one transaction; a failure rolls back the whole batch."""
        batch = list(people or [])
        if not batch:
            return []

        saved: List[Person] = []
        with self.engine.begin() as conn:
            for person in batch:
                saved.append(self._save(conn, person))

        logger.info("save_all: saved %s people", len(saved))
        return saved

    def find_by_id(self, person_id: int) -> Optional[Person]:
        with self.engine.connect() as conn:
            result = conn.execute(
                text(f"SELECT {_SELECT_COLUMNS} FROM people WHERE id = :id"),
                {"id": person_id},
            )
            row = result.fetchone()
            if row:
                return _row_to_person(row)
            return None

    def find_page(self, page_request: PageRequest) -> Page[Person]:
        with self.engine.connect() as conn:
            total = conn.execute(text("SELECT COUNT(*) FROM people")).scalar_one()
            result = conn.execute(
                text(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM people
                    ORDER BY {page_request.order_by_sql()}
                    LIMIT :limit OFFSET :offset
                    """
                ),
                {"limit": page_request.size, "offset": page_request.offset},
            )
            content = [_row_to_person(row) for row in result]
        return Page(content=content, total=total, request=page_request)

    def find_all(self) -> List[Person]:
        with self.engine.connect() as conn:
            result = conn.execute(
                text(f"SELECT {_SELECT_COLUMNS} FROM people ORDER BY id ASC")
            )
            return [_row_to_person(row) for row in result]

    def delete_by_id(self, person_id: int) -> None:
        with self.engine.begin() as conn:
            result = conn.execute(
                text("DELETE FROM people WHERE id = :id"),
                {"id": person_id},
            )
            if result.rowcount == 0:
                logger.debug("delete_by_id: no person with id=%s", person_id)

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM people")).scalar_one()
