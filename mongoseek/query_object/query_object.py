""" Query Object: the object you can paginate with """

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union, TypedDict

from mongoseek import exc


class QueryObjectDict(TypedDict, total=False):
    """ Dict representation of a query object """
    filter: Optional[dict]
    sort: Optional[list[str]]
    select: Optional[Union[list[str], dict[str, Any]]]

    # Pager
    limit: Optional[int]
    cursor: Optional[str]


@dataclass
class QueryObject:
    """ Query Object: a parsed Query Object

    Every field of the input is parsed and validated into a Query Input:
    filter, sort, select, limit, cursor.

    Use `Query.from_query_object()` to get a query configured with it.
    """
    filter: FilterQuery
    sort: SortQuery
    select: SelectQuery

    # Pager
    limit: LimitQuery
    cursor: CursorQuery

    __slots__ = 'filter', 'sort', 'select', 'limit', 'cursor'

    @classmethod
    def from_query_object(cls, query_object: QueryObjectDict):
        """ Construct a Query Object from a query object dict

        Args:
            query_object: A query object dict you might've gotten from the client's request

        Raises:
            exc.QueryObjectError: invalid input
        """
        return QueryObject(
            filter=FilterQuery.from_query_object(
                filter=query_object.get('filter') or {},
            ),
            sort=SortQuery.from_query_object(
                sort=query_object.get('sort') or [],
            ),
            select=SelectQuery.from_query_object(
                select=query_object.get('select'),
            ),
            limit=LimitQuery.from_query_object(limit=query_object.get('limit')),
            cursor=CursorQuery.from_query_object(cursor=query_object.get('cursor')),
        )

    @classmethod
    def ensure_query_object(cls, input: Optional[Union[QueryObject, QueryObjectDict]]) -> QueryObject:
        """ Construct a Query Object from any valid input """
        if input is None:
            return cls.from_query_object({})
        elif isinstance(input, QueryObject):
            return input
        elif isinstance(input, dict):
            return QueryObject.from_query_object(input)  # type: ignore[arg-type]
        else:
            raise exc.QueryObjectError(f'QueryObject must be an object, "{type(input).__name__}" given')

    def dict(self) -> QueryObjectDict:
        """ Convert the Query Object back into JSON dict """
        return QueryObjectDict(
            filter=self.filter.export(),
            sort=self.sort.export(),
            select=self.select.export(),
            limit=self.limit.export(),
            cursor=self.cursor.export(),
        )


# Import structures for individual fields
from .filter import FilterQuery
from .sort import SortQuery
from .select import SelectQuery
from .pager import LimitQuery, CursorQuery
