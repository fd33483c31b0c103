"""
Query-string driven filtering for the newspaper catalogue.

Turns ``?publisher=X&priceMonthly[lte]=200&sort=-ratingsAverage,name
&fields=name,priceMonthly&page=2&limit=10`` into a SQLAlchemy select.
Unknown filter and sort keys are ignored.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import Select, String, cast
from sqlalchemy.sql.elements import ColumnElement

from api.utils import escape_like
from core.exceptions import BadRequest
from infrastructure.database.models import Newspaper
from infrastructure.database.models.base import json_serializer

DEFAULT_SORT = "-createdAt"
DEFAULT_LIMIT = 100
MAX_LIMIT = 100

RESERVED_PARAMS = {"page", "sort", "limit", "fields"}

_RANGE_KEY = re.compile(r"^(?P<field>\w+)\[(?P<op>gte|gt|lte|lt)\]$")

NUMERIC_FIELDS = {
    "priceMonthly": Newspaper.price_monthly,
    "priceQuarterly": Newspaper.price_quarterly,
    "priceYearly": Newspaper.price_yearly,
    "ratingsAverage": Newspaper.ratings_average,
    "ratingsQuantity": Newspaper.ratings_quantity,
}

SORTABLE_FIELDS = {
    **NUMERIC_FIELDS,
    "name": Newspaper.name,
    "publisher": Newspaper.publisher,
    "createdAt": Newspaper.created_at,
}

# Public wire names accepted by ``fields``
SELECTABLE_FIELDS = {
    "name",
    "description",
    "publisher",
    "languages",
    "categories",
    "price",
    "priceMonthly",
    "priceQuarterly",
    "priceYearly",
    "coverImage",
    "images",
    "isActive",
    "ratingsAverage",
    "ratingsQuantity",
    "createdAt",
    "updatedAt",
}


def _number(field_name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise BadRequest(f"Invalid value for {field_name}: {raw}")


def _json_list_contains(column, value: str) -> ColumnElement[bool]:
    # JSON arrays are stored as text like ["daily", "मराठी"]; match one encoded element
    pattern = f"%{escape_like(json_serializer(value))}%"
    return cast(column, String).like(pattern, escape="\\")


@dataclass
class NewspaperQuery:
    """Parsed listing parameters."""

    conditions: list[ColumnElement[bool]] = field(default_factory=list)
    order_by: list = field(default_factory=list)
    fields: list[str] | None = None
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def apply(self, query: Select) -> Select:
        if self.conditions:
            query = query.where(*self.conditions)
        return query.order_by(*self.order_by).offset(self.offset).limit(self.limit)


def _positive_int(name: str, raw: str | None, default: int) -> int:
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise BadRequest(f"{name} must be an integer")
    return value if value > 0 else default


def parse_sort(raw: str | None) -> list:
    order_by = []
    for token in (raw or DEFAULT_SORT).split(","):
        token = token.strip()
        descending = token.startswith("-")
        column = SORTABLE_FIELDS.get(token.lstrip("-"))
        if column is None:
            continue
        order_by.append(column.desc() if descending else column.asc())
    if not order_by:
        order_by.append(Newspaper.created_at.desc())
    # Stable pagination across equal sort keys
    order_by.append(Newspaper.id.asc())
    return order_by


def parse_fields(raw: str | None) -> list[str] | None:
    if not raw:
        return None
    selected = [f.strip() for f in raw.split(",") if f.strip() in SELECTABLE_FIELDS]
    return selected or None


def parse_newspaper_query(params: Iterable[tuple[str, str]]) -> NewspaperQuery:
    """
    Build a :class:`NewspaperQuery` from raw query-string pairs.

    Args:
        params: ``(key, value)`` pairs, e.g. ``request.query_params.multi_items()``

    Raises:
        BadRequest: If a numeric filter or paging value is malformed
    """
    params = list(params)
    reserved = {key: value for key, value in params if key in RESERVED_PARAMS}

    query = NewspaperQuery(
        page=_positive_int("page", reserved.get("page"), 1),
        limit=min(_positive_int("limit", reserved.get("limit"), DEFAULT_LIMIT), MAX_LIMIT),
        order_by=parse_sort(reserved.get("sort")),
        fields=parse_fields(reserved.get("fields")),
    )

    conditions = query.conditions
    conditions.append(Newspaper.is_active.is_(True))

    for key, value in params:
        if key in RESERVED_PARAMS:
            continue

        match = _RANGE_KEY.match(key)
        if match:
            column = NUMERIC_FIELDS.get(match["field"])
            if column is None:
                continue
            number = _number(match["field"], value)
            op = match["op"]
            if op == "gte":
                conditions.append(column >= number)
            elif op == "gt":
                conditions.append(column > number)
            elif op == "lte":
                conditions.append(column <= number)
            else:
                conditions.append(column < number)
        elif key in NUMERIC_FIELDS:
            conditions.append(NUMERIC_FIELDS[key] == _number(key, value))
        elif key == "publisher":
            conditions.append(Newspaper.publisher == value)
        elif key in ("category", "categories"):
            conditions.append(_json_list_contains(Newspaper.categories, value))
        elif key in ("language", "languages"):
            conditions.append(_json_list_contains(Newspaper.languages, value))

    return query
