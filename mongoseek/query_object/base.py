from typing import Any


class OperationInputBase:
    """ Base class for Query Object inputs: filter, sort, select, limit, cursor

    An input is a parsed and validated field of a Query Object
    """

    @classmethod
    def from_query_object(cls) -> Any:
        """ Parse the input value

        Raises:
            exc.QueryObjectError: invalid input
        """
        raise NotImplementedError

    def export(self) -> Any:
        """ Export the input back into some jsonable value """
        raise NotImplementedError
