"""Sort orders for list views.

Sort clauses are rendered in PocketBase's ``sort`` syntax: a comma separated
list of fields, each prefixed with ``-`` for descending. Every clause ends with
a tie-break column so paging over equal keys is stable.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortColumn:
    field: str
    direction: SortDirection = SortDirection.ASC

    def render(self) -> str:
        return f"-{self.field}" if self.direction is SortDirection.DESC else self.field


def build_sort_clause(columns: Iterable[SortColumn], tie_break: SortColumn) -> str:
    """Render columns followed by the tie-break column.

    The tie-break is not repeated if it is already the last column.
    """
    cols = list(columns)
    if not cols or cols[-1] != tie_break:
        cols.append(tie_break)
    return ",".join(col.render() for col in cols)


@dataclass(frozen=True)
class SortOptions:
    """Named sort orders for one entity.

    ``columns`` maps the names accepted from requests to source fields.
    """

    columns: Mapping[str, str]
    default: tuple[SortColumn, ...]
    tie_break: SortColumn = SortColumn("id")

    def resolve(self, name: str | None, direction: str | None = None) -> tuple[SortColumn, ...]:
        """Turn request parameters into sort columns.

        Raises:
            ValueError: If the column name or direction is not recognised.
        """
        if not name:
            return self.default
        field = self.columns.get(name)
        if field is None:
            raise ValueError(f"Unknown sort column: {name}")
        try:
            sort_direction = SortDirection((direction or SortDirection.ASC).lower())
        except ValueError as e:
            raise ValueError(f"Unknown sort direction: {direction}") from e
        return (SortColumn(field, sort_direction),)

    def clause(self, name: str | None = None, direction: str | None = None) -> str:
        return build_sort_clause(self.resolve(name, direction), self.tie_break)


DIVE = SortOptions(
    columns={
        "number": "number",
        "date": "date_time_in",
        "max_depth": "max_depth",
        "bottom_time": "bottom_time",
        "site": "dive_site.name",
    },
    default=(SortColumn("number", SortDirection.DESC),),
)

DIVE_SITE = SortOptions(
    columns={
        "name": "name",
        "location": "location",
        "country": "country.name",
        "max_depth": "max_depth",
    },
    default=(SortColumn("name"),),
)

BUDDY = SortOptions(
    columns={"name": "name", "agency": "agency.common_name"},
    default=(SortColumn("name"),),
)

TRIP = SortOptions(
    columns={"name": "name", "start_date": "start_date", "end_date": "end_date"},
    default=(SortColumn("start_date", SortDirection.DESC),),
)

CERTIFICATION = SortOptions(
    columns={"course": "course.name", "start_date": "start_date", "end_date": "end_date"},
    default=(SortColumn("start_date", SortDirection.DESC),),
)

OPERATOR = SortOptions(
    columns={"name": "name", "type": "operator_type.name", "country": "country.name"},
    default=(SortColumn("name"),),
)
