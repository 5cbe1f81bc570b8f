# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Page/filter request → query plan.

A ``PageQuery`` subclass declares the filterable fields next to the two
paging fields.  ``build_page_plan`` turns it into a ``PagePlan`` holding one
predicate list that both the data query and the count query are built from,
so the reported ``total`` always describes the same rows the page was cut
from.

* Fields listed in *like_fields* match by substring (``LIKE %value%``).
* Every other non-null field matches by equality.
* Pages are 1-indexed: ``offset = (page_number - 1) * page_size``.
* Rows are ordered by primary key so consecutive pages never overlap.
"""

from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, inspect
from sqlalchemy.orm import Query, Session

from core.errors import InvalidArgument

T = TypeVar("T")

PAGINATION_FIELDS = {"page_number", "page_size"}


# -- Request / response ----------------------------------------------------


class PageQuery(BaseModel):
    page_number: int = 1
    page_size: int = 10

    def filters(self) -> dict:
        """Non-paging fields that carry a value."""
        return self.model_dump(exclude=PAGINATION_FIELDS, exclude_none=True)


class Pagination(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page_size: int
    page_number: int


# -- Plan ------------------------------------------------------------------


@dataclass
class PagePlan:
    model: type
    criteria: list = field(default_factory=list)
    offset: int = 0
    limit: int = 10

    def _order_by(self):
        return [col for col in inspect(self.model).primary_key]

    def select(self, q: Query) -> Query:
        """Apply predicate, deterministic order and the page slice to *q*."""
        return (
            q.filter(*self.criteria)
            .order_by(*self._order_by())
            .offset(self.offset)
            .limit(self.limit)
        )

    def count(self, db: Session) -> int:
        """Row count under the same predicate, without the page slice."""
        pk = self._order_by()[0]
        return db.query(func.count(pk)).filter(*self.criteria).scalar() or 0


def build_page_plan(model, query: PageQuery, like_fields: Sequence[str] = ("name",)) -> PagePlan:
    """
    Validate *query* and build the plan for *model*.

    Raises ``InvalidArgument`` for a page size or page number below 1, or a
    filter field that is not a column of *model*.
    """
    if query.page_size < 1:
        raise InvalidArgument(f"page_size must be >= 1, got {query.page_size}")
    if query.page_number < 1:
        raise InvalidArgument(f"page_number must be >= 1, got {query.page_number}")

    columns = inspect(model).columns
    criteria = []
    for name, value in query.filters().items():
        if name not in columns:
            raise InvalidArgument(f"Cannot filter {model.__name__} by {name!r}")
        column = getattr(model, name)
        if name in like_fields:
            criteria.append(column.contains(value, autoescape=True))
        else:
            criteria.append(column == value)

    return PagePlan(
        model=model,
        criteria=criteria,
        offset=(query.page_number - 1) * query.page_size,
        limit=query.page_size,
    )
