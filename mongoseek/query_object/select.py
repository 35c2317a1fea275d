""" Query Object: the "select" operation """

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from mongoseek import exc

from .base import OperationInputBase


@dataclass
class SelectQuery(OperationInputBase):
    """ Query Object operation: the "select" operation

    Selects which fields are returned: a MongoDB projection.
    `None` means all fields.

    NOTE: when you use a projection, you have to include all the fields that are part of the cursor,
    even if you don't intend to use them directly. Otherwise the cursor will be missing some values.
    """
    # MongoDB projection: { field: 1 | 0 | expression }
    projection: Optional[Any]

    @classmethod
    def from_query_object(cls, select: Optional[Union[list[str], dict[str, Any]]]):  # type: ignore[override]
        # Check types
        if select is None or isinstance(select, dict):
            pass
        elif isinstance(select, list):
            if not all(isinstance(name, str) for name in select):
                raise exc.QueryObjectError(f'"select" must be an array of strings')
        else:
            raise exc.QueryObjectError(f'"select" must be an array or an object')

        # Construct
        return cls.from_projection(select or None)

    @classmethod
    def from_projection(cls, projection: Optional[Any]) -> SelectQuery:
        """ Construct from a projection: a mapping, or a list of field names to include

        Anything else is passed to the database as is: it's the database that validates projections.
        """
        if isinstance(projection, (list, tuple)):
            projection = {name: 1 for name in projection}
        return cls(projection=projection)

    def export(self) -> Optional[Any]:
        return self.projection
