from collections import abc
from typing import Any, Optional


# Marker for values that are not found in a document
MISSING = object()


def parse_dot_notation(input: str) -> tuple[str, Optional[tuple[str, ...]]]:
    """ Parse dot-notation

    Example:
        parse_dot_notation('a') #-> 'a', None
        parse_dot_notation('a.b.c') #-> 'a', ('b', 'c')
    """
    name, _, sub_path = input.partition('.')
    sub_path_tuple = tuple(sub_path.split('.')) if sub_path else None
    return name, sub_path_tuple


def strip_direction(field: str) -> str:
    """ Remove the sorting direction marker from a field name

    Example:
        strip_direction('-ctime') #-> 'ctime'
    """
    if field[:1] in ('+', '-'):
        return field[1:]
    else:
        return field


def get_dotted_path(document: abc.Mapping, path: str) -> Any:
    """ Get a value from a document by its dot-notation path

    Sub-documents are accessed by key, arrays are accessed by numeric index.

    Example:
        get_dotted_path({'boss': {'name': 'Alice'}}, 'boss.name') #-> 'Alice'
        get_dotted_path({'tags': ['a', 'b']}, 'tags.1') #-> 'b'

    Returns:
        The value, or MISSING
    """
    name, sub_path = parse_dot_notation(path)
    value = document.get(name, MISSING)

    for key in sub_path or ():
        if isinstance(value, abc.Mapping):
            value = value.get(key, MISSING)
        elif isinstance(value, (list, tuple)) and key.isdigit() and int(key) < len(value):
            value = value[int(key)]
        else:
            return MISSING

    return value
