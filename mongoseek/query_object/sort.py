""" Query Object: the "sort" operation """

from __future__ import annotations

from collections import abc
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pymongo
from bson.son import SON

from mongoseek import exc

from .base import OperationInputBase


@dataclass
class SortQuery(OperationInputBase):
    """ Query Object operation: the "sort" operation

    Field names are given with an optional direction prefix:

        ['name', '+country', '-ctime']

    Supports:
    * Fields
    * Sub-documents and array elements (via dot-notation)
    """
    # The list of fields and directions to sort with
    # Note that the list is an ordered collection: order matters here
    fields: list[SortingField]

    def __bool__(self):
        return bool(self.fields)

    @classmethod
    def from_query_object(cls, sort: abc.Sequence[str]):  # type: ignore[override]
        # Check types
        if not isinstance(sort, (list, tuple)):
            raise exc.QueryObjectError(f'"sort" must be an array')
        if not all(isinstance(field, str) for field in sort):
            raise exc.QueryObjectError(f'"sort" must be an array of strings')

        # Construct
        return cls.from_fields(sort)

    @classmethod
    def from_fields(cls, fields: abc.Iterable[str]) -> SortQuery:
        """ Parse field names with optional "+" and "-" prefixes. Empty names are ignored. """
        parsed = (cls._parse_input_field(field) for field in fields)
        return cls(fields=[field for field in parsed if field is not None])

    def export(self) -> list[str]:
        return [
            field.export()
            for field in self.fields
        ]

    def export_spec(self) -> SON:
        """ Export as a MongoDB sort specification: { field: 1 | -1 } """
        return SON([
            (field.path, field.direction.order)
            for field in self.fields
        ])

    @staticmethod
    def _parse_input_field(field: str) -> Optional[SortingField]:
        """ Parse a field string into a SortingField object """
        # Look at the starting character
        start_c = field[:1]

        # If there's a sorting character, use it
        if start_c == '-' or start_c == '+':
            name = field[1:]
            direction = SortingDirection(start_c)
        # Otherwise, use default sorting
        else:
            name = field
            direction = SortingDirection.ASC

        # Empty field names are ignored
        if not name:
            return None

        # Construct
        return SortingField(path=name, direction=direction)


@dataclass
class SortingField:
    # Field path, in dot-notation
    path: str
    direction: SortingDirection

    __slots__ = 'path', 'direction'

    def export(self) -> str:
        return f'{self.direction.value}{self.path}'


class SortingDirection(Enum):
    ASC = '+'
    DESC = '-'

    @property
    def order(self) -> int:
        """ MongoDB sort order: 1 or -1 """
        return pymongo.ASCENDING if self is SortingDirection.ASC else pymongo.DESCENDING
