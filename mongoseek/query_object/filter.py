""" Query Object: the "filter" operation """

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mongoseek import exc

from .base import OperationInputBase


@dataclass
class FilterQuery(OperationInputBase):
    """ Query Object operation: the "filter" operation

    The filter is a MongoDB query predicate. It's opaque to us: the database validates it.

    Example:
        { country: 'US', age: { $gt: 18 } }
    """
    # MongoDB query predicate
    filter: dict[str, Any]

    def __bool__(self):
        return bool(self.filter)

    @classmethod
    def from_query_object(cls, filter: dict):  # type: ignore[override]
        # Check types
        if not isinstance(filter, dict):
            raise exc.QueryObjectError(f'"filter" must be an object')

        # Construct
        return cls(filter=filter)

    def export(self) -> dict:
        return self.filter
