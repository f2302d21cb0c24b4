"""Page request / page result types used by the person listing.

Sort expressions follow the `field,direction` form, e.g. `name,desc`.
Ordering always ends with `id ASC` unless id is already sorted on, which keeps
page walks stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterable, List, Sequence, Tuple, TypeVar

from app.errors import InvalidSortError

T = TypeVar("T")

SORTABLE_FIELDS: Tuple[str, ...] = ("id", "name", "city")
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 500


@dataclass(frozen=True)
class SortOrder:
    field: str
    direction: str = "asc"

    @classmethod
    def parse(cls, expr: str) -> "SortOrder":
        parts = [p.strip() for p in expr.split(",") if p.strip()]
        if not parts or len(parts) > 2:
            raise InvalidSortError(f"Invalid sort expression: {expr!r}")
        name = parts[0]
        direction = parts[1].lower() if len(parts) == 2 else "asc"
        if name not in SORTABLE_FIELDS:
            raise InvalidSortError(
                f"Cannot sort by {name!r}; allowed fields: {', '.join(SORTABLE_FIELDS)}"
            )
        if direction not in ("asc", "desc"):
            raise InvalidSortError(f"Invalid sort direction: {direction!r}")
        return cls(field=name, direction=direction)

    def to_sql(self) -> str:
        # Field and direction are whitelisted in parse()
        return f"{self.field} {self.direction.upper()}"


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE
    sort: Tuple[SortOrder, ...] = ()

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if self.size < 1:
            raise ValueError("size must be >= 1")

    @classmethod
    def of(cls, page: int = 0, size: int = DEFAULT_PAGE_SIZE, sort: Iterable[str] | None = None) -> "PageRequest":
        orders = tuple(SortOrder.parse(expr) for expr in (sort or []))
        return cls(page=page, size=min(size, MAX_PAGE_SIZE), sort=orders)

    @property
    def offset(self) -> int:
        return self.page * self.size

    def order_by_sql(self) -> str:
        clauses: List[str] = [order.to_sql() for order in self.sort]
        if not any(order.field == "id" for order in self.sort):
            clauses.append("id ASC")
        return ", ".join(clauses)


@dataclass
class Page(Generic[T]):
    content: Sequence[T]
    total: int
    request: PageRequest = field(default_factory=PageRequest)

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return (self.total + self.request.size - 1) // self.request.size
