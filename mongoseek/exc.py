
class BaseMongoseekException(Exception):
    pass


class QueryObjectError(BaseMongoseekException):
    """ Invalid input provided by the User

    Reported when there's something wrong with the Query Object
    """

    def __init__(self, err: str):
        super().__init__(f'Query object error: {err}')


class CursorError(BaseMongoseekException):
    """ Something is wrong with a cursor """


class CursorDecodingError(CursorError):
    """ The cursor string could not be parsed

    Reported when the cursor is not validly encoded, or contains garbage.
    Users may tamper with cursors, so this is a user error.
    """


class CursorEncodingError(CursorError):
    """ Failed to generate a cursor string from an index entry """


class CommandExecutionError(BaseMongoseekException):
    """ The database command has failed

    This covers network errors, authentication errors, malformed filters, projections, etc.
    The original driver error is available as `__cause__`
    """


class ResultDecodingError(BaseMongoseekException):
    """ A returned document could not be decoded into the target type """
