""" Tools for parsing the Query Object

These classes only represent the internal structure of the Query Object.
They do not interact with the database in any way.
"""

from .query_object import QueryObject, QueryObjectDict

from .base import OperationInputBase
from .filter import FilterQuery
from .sort import SortQuery, SortingField, SortingDirection
from .select import SelectQuery
from .pager import LimitQuery, CursorQuery
