from typing import Optional, Any

import fastapi
import yaml

from mongoseek import QueryObject
from mongoseek import exc


def query_object(*,
        filter: Optional[str] = fastapi.Query(
            None,
            title='Filter criteria.',
            description='MongoDB format. Example: `{ age: { $gt: 18 } }`. JSON or YAML.'
        ),
        sort: Optional[str] = fastapi.Query(
            None,
            title='Sorting order',
            description='List of fields with optional `+` or `-` prefix. Example: `[ "name", "-ctime" ]`. JSON or YAML.',
        ),
        select: Optional[str] = fastapi.Query(
            None,
            title='The list of fields to select.',
            description='Example: `[_id, name]`. JSON or YAML.',
        ),
        limit: Optional[int] = fastapi.Query(
            None,
            title='Pagination. The number of items per page.'
        ),
        cursor: Optional[str] = fastapi.Query(
            None,
            title='Pagination. The cursor to continue from, as returned with the previous page.'
        ),
) -> Optional[QueryObject]:
    """ Get the Query Object from the request parameters

    Example:
        /api/?filter={ country: US }&sort=[name, _id]&limit=10&cursor=...

    Raises:
        exc.QueryObjectError
    """
    # Empty?
    if not filter and not sort and not select and not limit and not cursor:
        return None

    # Query Object dict
    try:
        query_object_dict = dict(
            filter=parse_serialized_argument('filter', filter),
            sort=parse_serialized_argument('sort', sort),
            select=parse_serialized_argument('select', select),
            limit=limit,
            cursor=cursor,
        )
    except ArgumentValueError as e:
        raise exc.QueryObjectError(f'Query Object `{e.argument_name}` parsing failed: {e}') from e

    # Parse
    return QueryObject.from_query_object(query_object_dict)  # type: ignore[arg-type]


class ArgumentValueError(ValueError):
    """ Query object field parse error """
    def __init__(self, argument_name: str, error: str):
        self.argument_name = argument_name
        super().__init__(error)


def parse_serialized_argument(name: str, value: Optional[str]) -> Any:
    """ Parse a flattened QueryObject field as YAML

    YAML is a superset of JSON, so JSON works as well.
    """
    # None passthrough
    if value is None:
        return None

    # Parse the string
    try:
        return yaml.load(value, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise ArgumentValueError(name, str(e))
