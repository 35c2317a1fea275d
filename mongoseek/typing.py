from collections import abc
from typing import Any, Mapping, Protocol, Union

from bson.codec_options import CodecOptions
from bson.raw_bson import RawBSONDocument


# Index entry: an ordered tuple of (field name, value) pairs.
# Order matters: it must match the order of fields in the database index.
# Example:
#   (('name', 'Alice'), ('_id', ObjectId(...)))
IndexEntry = tuple[tuple[str, Any], ...]

# A MongoDB document, as returned by the database
Document = Mapping[str, Any]

# A document, as returned by the database: raw BSON, or already decoded
RawDocument = Union[RawBSONDocument, Document]

# Index hint: either an index name, or an index key pattern
IndexHint = Union[str, Mapping[str, int], abc.Sequence[tuple[str, int]]]


class Database(Protocol):
    """ A database capable of running commands

    `pymongo.database.Database` implements this protocol.
    """

    def command(self, command: Mapping[str, Any], *, codec_options: CodecOptions, session: Any = None) -> Mapping[str, Any]:
        """ Run a database command, return the reply

        `session` is a `pymongo.client_session.ClientSession`, or `None`.
        It is `None` unless the query drains a server cursor with `getMore`.

        Raises:
            pymongo.errors.PyMongoError: the command has failed
        """
