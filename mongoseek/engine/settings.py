from __future__ import annotations

import dataclasses
from collections import abc
from typing import Any, Optional

from bson.codec_options import CodecOptions, DEFAULT_CODEC_OPTIONS
from bson.son import SON

from mongoseek.codec import CursorCodec, BsonCursorCodec, DEFAULT_CODEC


@dataclasses.dataclass
class QuerySettings:
    """ Settings for Query

    This object defines additional behavior that may be used with queries:
    limit result sets, customize cursors, decode documents into your types, etc
    """
    # The `limit` you get by default, if not specified
    default_limit: Optional[int] = None

    # The max number of items you get, regardless of the limit
    max_limit: Optional[int] = None

    # The codec every new query starts with.
    # Replace it to encrypt or sign your cursors.
    # The default codec decodes cursor values with `codec_options`, so that tz-aware datetimes stay tz-aware.
    codec: CursorCodec = DEFAULT_CODEC

    # Codec options used to decode result documents. Example: tz_aware=True
    codec_options: CodecOptions = DEFAULT_CODEC_OPTIONS

    # When seeking, MongoDB requires an index hint. If none was given, use the sort specification as one.
    hint_sort: bool = True

    # Convert every result document into this type: a class, or any callable that accepts a dict
    # Example: document_type=lambda doc: User(**doc)
    document_type: Optional[abc.Callable[[dict], Any]] = None

    def __post_init__(self):
        if self.codec is DEFAULT_CODEC and self.codec_options is not DEFAULT_CODEC_OPTIONS:
            self.codec = BsonCursorCodec(self.codec_options.with_options(document_class=SON))

    # ### Callbacks for Query
    # Query will use these methods to apply the settings

    def get_final_limit(self, limit: Optional[int]) -> Optional[int]:
        """ Callback that fine-tunes the `limit` of a query by applying default and max limits

        Returns:
            The limit, or `None` for unlimited
        """
        # Apply default limit
        if not limit or limit < 0:
            limit = self.default_limit

        # Apply max limit
        if limit and self.max_limit:
            limit = min(limit, self.max_limit)

        # Done
        return limit if limit and limit > 0 else None

    def decode_document(self, document: dict) -> Any:
        """ Callback that converts a decoded result document into the target type

        Default behavior: use `document_type`, if set.
        You can override this method for custom behavior

        Raises:
            Exception: anything. It will be reported as ResultDecodingError
        """
        if self.document_type is None:
            return document
        else:
            return self.document_type(document)
