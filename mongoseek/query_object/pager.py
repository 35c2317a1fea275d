""" Query Object: pager operations """

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mongoseek import exc

from .base import OperationInputBase


@dataclass
class LimitQuery(OperationInputBase):
    """ Query Object operation: the "limit" operation """
    # Limit: the number of objects per page. `None` or `0`: unlimited
    limit: Optional[int]

    @classmethod
    def from_query_object(cls, limit: Optional[int]):  # type: ignore[override]
        if limit is None or (isinstance(limit, int) and not isinstance(limit, bool)):
            return cls(limit=limit)
        else:
            raise exc.QueryObjectError(f'"limit" must be an integer')

    def export(self) -> Optional[int]:
        return self.limit



@dataclass
class CursorQuery(OperationInputBase):
    """ Query Object operation: the "cursor" operation """
    # Opaque cursor: the last index entry that was already returned
    cursor: Optional[str]

    @classmethod
    def from_query_object(cls, cursor: Optional[str]):  # type: ignore[override]
        if cursor is None or isinstance(cursor, str):
            return cls(cursor=cursor or None)
        else:
            raise exc.QueryObjectError(f'"cursor" must be a string')

    def export(self) -> Optional[str]:
        return self.cursor
