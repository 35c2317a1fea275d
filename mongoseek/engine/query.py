""" Query: paginates a MongoDB query using cursors """

from __future__ import annotations

import contextlib
import copy
import logging
from collections import abc
from functools import partial
from typing import Any, ContextManager, NamedTuple, Optional, Union

import bson
from bson.codec_options import CodecOptions
from bson.int64 import Int64
from bson.raw_bson import RawBSONDocument
from bson.son import SON
from pymongo.errors import ConfigurationError, PyMongoError

from mongoseek import exc
from mongoseek.codec import CursorCodec
from mongoseek.query_object import QueryObject, QueryObjectDict
from mongoseek.query_object import FilterQuery, SortQuery, SelectQuery, LimitQuery
from mongoseek.typing import Database, IndexEntry, IndexHint, RawDocument
from mongoseek.util.expressions import MISSING, get_dotted_path, strip_direction

from .settings import QuerySettings

logger = logging.getLogger(__name__)


# Run commands with these options: result documents are kept as raw BSON and decoded on demand.
# This way, the extra look-ahead document is never decoded.
RAW_CODEC_OPTIONS = CodecOptions(document_class=RawBSONDocument)


class PageInfo(NamedTuple):
    """ Information about the page that was just loaded """
    # Cursor to the next page.
    # When there are no more results, it's the same cursor that was used for the query.
    cursor: str

    # Do we have any next page?
    has_more: bool


class Page(NamedTuple):
    """ A page of results """
    # Result documents
    items: list

    # Cursor to the next page
    cursor: str

    # Do we have any next page?
    has_more: bool


class Query:
    """ Query: a MongoDB query that supports cursors to continue listing documents where we left off

    If a cursor is set, it specifies the last index entry that was already returned,
    and result documents will be listed after it. The database seeks right to that index entry
    instead of skipping documents one by one, so every page costs the same.

    Example:
        q = Query(db, 'users', {'country': 'US'}).sort('name', '_id').limit(10)

        # If this is not the first page, set the cursor
        q.cursor(last_cursor)

        users = []
        cursor, has_more = q.execute(users, 'name', '_id')

    NOTE: the query must be backed by an index that matches the sort order.
    Cursor fields must follow the order of fields in this index.

    NOTE: without an explicit `hint`, the sort is sent as the index hint, and cursor fields must equal the sort fields.
    If they differ (e.g. sort by `name, _id` within one country, cursor from `country, name, _id`),
    pass the index as `hint=`: otherwise the database rejects `min` as inconsistent with the index.

    NOTE: when using select(), include all cursor fields into the projection,
    otherwise the cursor will be missing their values.

    NOTE: not thread-safe. Use copy() to get an independent query for every cursor stream.
    """
    # Default settings, used when none are provided
    DEFAULT_SETTINGS = QuerySettings()

    # The database to run commands against
    database: Database

    # Collection name
    collection: str

    # The Query settings
    settings: QuerySettings

    # Inputs: filter, sort, projection, limit
    filter_query: FilterQuery
    sort_query: SortQuery
    select_query: SelectQuery
    limit_query: LimitQuery

    # Index to use: name or key pattern
    index_hint: Optional[IndexHint]

    # The codec to parse and create cursors with
    cursor_codec: CursorCodec

    # The cursor string used for the query. Empty when not set
    cursor_value: str

    # Index entry to start from: the decoded cursor
    seek_boundary: Optional[IndexEntry]

    # Cursor parsing error. Reported by execute()
    cursor_error: Optional[exc.CursorDecodingError]

    def __init__(self, database: Database, collection: str, filter: Optional[dict] = None, *,
                 hint: Optional[IndexHint] = None,
                 settings: Optional[QuerySettings] = None):
        """ Prepare to paginate documents from a collection

        Args:
            database: The database to run the `find` command against. Example: pymongo Database
            collection: Collection name
            filter: MongoDB query predicate
            hint: The index to seek on: name or key pattern. Default: the sort specification.
                Required when cursor fields are not the same as the sort fields.
            settings: Query settings
        """
        self.database = database
        self.collection = collection
        self.settings = settings or self.DEFAULT_SETTINGS

        # Inputs
        self.filter_query = FilterQuery(filter=filter or {})
        self.sort_query = SortQuery(fields=[])
        self.select_query = SelectQuery(projection=None)
        self.limit_query = LimitQuery(limit=None)
        self.index_hint = hint

        # Cursor
        self.cursor_codec = self.settings.codec
        self.cursor_value = ''
        self.seek_boundary = None
        self.cursor_error = None

    @classmethod
    def prepare(cls, database: Database, collection: str, settings: Optional[QuerySettings] = None):
        """ Prepare to make queries against the provided collection

        Example:
            users_settings = QuerySettings(max_limit=100)
            query_users = Query.prepare(db, 'users', users_settings)
            q = query_users({'country': 'US'})
        """
        return partial(cls, database, collection, settings=settings)

    @classmethod
    def from_query_object(cls, database: Database, collection: str, query: Union[QueryObject, QueryObjectDict, None], *,
                          hint: Optional[IndexHint] = None,
                          settings: Optional[QuerySettings] = None) -> Query:
        """ Make a query configured with a Query Object

        Raises:
            exc.QueryObjectError: Query object syntax error
        """
        query = QueryObject.ensure_query_object(query)

        q = cls(database, collection, query.filter.filter, hint=hint, settings=settings)
        q.sort_query = query.sort
        q.select_query = query.select
        q.limit_query = query.limit
        return q.cursor(query.cursor.cursor)

    # ### Configuration

    def sort(self, *fields: str) -> Query:
        """ Order returned documents by these fields

        Prefix a field with "+" for ascending order (the default) or "-" for descending.
        Empty field names are ignored. Every call replaces the previous sort.

        Example:
            q.sort('name', '-ctime')
        """
        self.sort_query = SortQuery.from_fields(fields)
        return self

    def select(self, projection: Optional[Union[abc.Mapping[str, Any], abc.Sequence[str]]]) -> Query:
        """ Select which fields to retrieve. `None` means all fields

        Example:
            q.select(['name', '_id'])
            q.select({'name': 1, '_id': 1})
        """
        self.select_query = SelectQuery.from_projection(projection)
        return self

    def limit(self, n: Optional[int]) -> Query:
        """ Set the page size. `None` or `n <= 0`: unlimited """
        self.limit_query = LimitQuery(limit=n)
        return self

    def cursor(self, cursor: Optional[str]) -> Query:
        """ Set the cursor: the last index entry that was already returned

        Documents will be listed after it.
        An empty cursor resets the pagination to the beginning.

        Parsing the cursor may fail. The error is not reported here: execute() will fail with it.
        """
        self.cursor_value = cursor or ''
        self.seek_boundary = None
        self.cursor_error = None

        if self.cursor_value:
            try:
                self.seek_boundary = self._decode_cursor(self.cursor_value)
            except exc.CursorDecodingError as e:
                self.cursor_error = e

        return self

    def codec(self, codec: CursorCodec) -> Query:
        """ Use a different codec to parse and create cursors """
        self.cursor_codec = codec
        return self

    def copy(self) -> Query:
        """ Get an independent copy of this query """
        return copy.copy(self)

    @property
    def final_limit(self) -> Optional[int]:
        """ Get the final page size, after the settings are applied. `None` if unlimited """
        return self.settings.get_final_limit(self.limit_query.limit)

    # ### Execution

    def command(self) -> SON:
        """ Build the `find` command that loads the page """
        limit = self.final_limit

        command: SON[str, Any] = SON([('find', self.collection)])
        if self.filter_query:
            command['filter'] = self.filter_query.filter
        if self.sort_query:
            command['sort'] = self.sort_query.export_spec()
        if self.select_query.projection is not None:
            command['projection'] = self.select_query.projection

        hint = self._get_index_hint()
        if hint is not None:
            command['hint'] = hint

        # Load one more document to check if there's a next page.
        # Everything comes in one batch: no server cursor is left open.
        # Without a limit, the server cursor is drained with `getMore`
        if limit is not None:
            command['limit'] = limit + 1
            command['batchSize'] = limit + 1
            command['singleBatch'] = True

        # `min` is inclusive: skip the first document. It's the last one from the previous page.
        if self.seek_boundary is not None:
            command['min'] = SON(self.seek_boundary)
            command['skip'] = 1

        return command

    def execute(self, result: list, *cursor_fields: str) -> PageInfo:
        """ Load a page of documents into `result`

        Args:
            result: The list to put decoded documents into. It is cleared first.
            cursor_fields: Names of fields, in order, to build the next cursor from.
                They must match the fields of the index. Direction prefixes ("+", "-") are ignored.

        Returns:
            The cursor to the next page, and whether there are more results.
            When there are no cursor fields, the cursor is empty.

        Raises:
            exc.CursorDecodingError: the cursor is invalid. Nothing is loaded.
            exc.CommandExecutionError: the database command has failed
            exc.ResultDecodingError: a document could not be decoded. `result` may be partially filled.
            exc.CursorEncodingError: failed to create the next cursor. `result` is already filled.
        """
        # Cursor parsing failed? Report it now
        if self.cursor_error is not None:
            raise self.cursor_error

        # Load
        limit = self.final_limit
        command = self.command()
        logger.debug(f'Loading a page from {self.collection!r}: {command!r}')
        batch = self._run_command(command)

        # No more results. Use the same cursor that was used for the query:
        # the last document may have been returned previously, and there are no more.
        if not batch:
            result.clear()
            logger.debug(f'No more documents in {self.collection!r}')
            return PageInfo(cursor=self.cursor_value, has_more=False)

        # We've loaded one extra document. If it's there, there's a next page. Now remove it.
        has_more = limit is not None and len(batch) >= limit + 1
        if has_more:
            batch = batch[:-1]

        # Decode the documents. The last one defines the cursor
        last_document = self._decode_documents(batch, result)

        # Create the cursor
        if cursor_fields:
            cursor = self._encode_cursor(make_index_entry(last_document, cursor_fields))
        else:
            cursor = ''

        logger.debug(f'Loaded {len(batch)} documents from {self.collection!r}, {has_more=}')
        return PageInfo(cursor=cursor, has_more=has_more)

    def fetch(self, *cursor_fields: str) -> Page:
        """ Load a page of documents into a new list

        See: execute()
        """
        items: list = []
        cursor, has_more = self.execute(items, *cursor_fields)
        return Page(items=items, cursor=cursor, has_more=has_more)

    def pages(self, *cursor_fields: str) -> abc.Iterator[Page]:
        """ Iterate over pages, starting from the current cursor, until there are no more

        The query's cursor advances with every page.

        Example:
            for page in q.pages('name', '_id'):
                send(page.items)
        """
        if not cursor_fields:
            raise ValueError('Cannot iterate over pages without cursor fields')

        while True:
            page = self.fetch(*cursor_fields)
            yield page

            if not page.has_more:
                break
            self.cursor(page.cursor)

    def _run_command(self, command: SON) -> list[RawDocument]:
        """ Run the command and get all documents it returns

        With `singleBatch`, everything comes in the first batch.
        Otherwise, the server cursor is drained with `getMore` in the same session.
        """
        if command.get('singleBatch'):
            documents, _ = self._get_batch(self._command(command), 'firstBatch')
            return documents

        with self._start_session() as session:
            documents, cursor_id = self._get_batch(self._command(command, session), 'firstBatch')

            try:
                while cursor_id:
                    get_more = SON([('getMore', cursor_id), ('collection', self.collection)])
                    batch, cursor_id = self._get_batch(self._command(get_more, session), 'nextBatch')
                    documents.extend(batch)
            except exc.CommandExecutionError:
                self._kill_cursor(cursor_id, session)
                raise

        return documents

    def _command(self, command: SON, session: Any = None) -> abc.Mapping:
        """ Run a database command, check the reply """
        name = next(iter(command))
        try:
            reply = self.database.command(command, codec_options=RAW_CODEC_OPTIONS, session=session)
        except PyMongoError as e:
            raise exc.CommandExecutionError(f'The "{name}" command has failed: {e}') from e

        if not reply.get('ok'):
            raise exc.CommandExecutionError(f'The "{name}" command has failed: {reply.get("errmsg")}')

        return reply

    def _get_batch(self, reply: abc.Mapping, batch_name: str) -> tuple[list[RawDocument], Int64]:
        """ Get documents from a command reply, and the id of the server cursor. 0 when it's closed """
        try:
            cursor = reply['cursor']
            return list(cursor[batch_name]), Int64(cursor.get('id') or 0)
        except (KeyError, TypeError, AttributeError) as e:
            raise exc.CommandExecutionError(f'Unexpected reply from the database: no {e}') from e

    def _start_session(self) -> ContextManager:
        """ Start a session: `getMore` has to run in the session that created the cursor """
        client = getattr(self.database, 'client', None)
        if client is None:
            return contextlib.nullcontext()

        try:
            return client.start_session()
        # The deployment does not support sessions
        except ConfigurationError:
            return contextlib.nullcontext()
        except PyMongoError as e:
            raise exc.CommandExecutionError(f'Failed to start a session: {e}') from e

    def _kill_cursor(self, cursor_id: Int64, session: Any):
        """ Close the server cursor. A failure is logged: the original error is reported instead """
        if not cursor_id:
            return

        kill_cursors = SON([('killCursors', self.collection), ('cursors', [cursor_id])])
        try:
            self.database.command(kill_cursors, codec_options=RAW_CODEC_OPTIONS, session=session)
        except PyMongoError as e:
            logger.warning(f'Failed to kill cursor {cursor_id} on {self.collection!r}: {e}')

    def _decode_documents(self, batch: list[RawDocument], result: list) -> dict:
        """ Decode documents into the `result` list; return the last decoded document """
        result.clear()

        document: dict = {}
        for raw_document in batch:
            try:
                document = decode_raw_document(raw_document, self.settings.codec_options)
                result.append(self.settings.decode_document(document))
            except Exception as e:
                raise exc.ResultDecodingError(f'Failed to decode a document from {self.collection!r}: {e}') from e

        return document

    def _decode_cursor(self, cursor: str) -> IndexEntry:
        """ Parse the cursor with the codec """
        try:
            entry = self.cursor_codec.decode(cursor)
        except exc.CursorDecodingError:
            raise
        except Exception as e:
            raise exc.CursorDecodingError(f'Invalid cursor: {e}') from e

        if isinstance(entry, abc.Mapping):
            return tuple(entry.items())
        else:
            return tuple((name, value) for name, value in entry)

    def _encode_cursor(self, entry: IndexEntry) -> str:
        """ Create a cursor string with the codec """
        try:
            return self.cursor_codec.encode(entry)
        except exc.CursorEncodingError:
            raise
        except Exception as e:
            raise exc.CursorEncodingError(f'Cannot encode the cursor: {e}') from e

    def _get_index_hint(self) -> Optional[Union[str, SON]]:
        """ Get the index to seek on """
        # Explicit hint
        if self.index_hint is not None:
            if isinstance(self.index_hint, str):
                return self.index_hint
            elif isinstance(self.index_hint, abc.Mapping):
                return SON(self.index_hint.items())
            else:
                return SON(self.index_hint)

        # MongoDB won't seek without a hint. The sort specification is the key pattern of the index.
        if self.seek_boundary is not None and self.settings.hint_sort and self.sort_query:
            return self.sort_query.export_spec()

        return None

    def __repr__(self):
        return f'{type(self).__name__}({self.collection!r}, sort={self.sort_query.export()!r}, limit={self.limit_query.limit!r})'


def make_index_entry(document: abc.Mapping, cursor_fields: abc.Iterable[str]) -> IndexEntry:
    """ Build an index entry from the document's values

    Args:
        document: The document to take values from
        cursor_fields: Field names, in index order. Dot-notation is supported. Direction prefixes are ignored.
    """
    entry = []
    for field in cursor_fields:
        name = strip_direction(field)
        value = get_dotted_path(document, name)

        # Most likely, the field is not included into the projection
        if value is MISSING:
            logger.warning(f'Cursor field {name!r} is missing from the document. Is it included into the projection?')
            value = None

        entry.append((name, value))
    return tuple(entry)


def decode_raw_document(document: RawDocument, codec_options: CodecOptions) -> dict:
    """ Decode a document returned by the database """
    if isinstance(document, RawBSONDocument):
        return bson.decode(document.raw, codec_options=codec_options)
    else:
        return dict(document)
