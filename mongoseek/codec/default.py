""" The default cursor codec: BSON + URL-safe base64 """

from __future__ import annotations

import base64
import binascii
import re
from collections import abc

import bson
from bson.codec_options import CodecOptions
from bson.errors import BSONError
from bson.son import SON

from mongoseek import exc
from mongoseek.typing import IndexEntry


# Characters allowed in a cursor string: URL-safe base64 alphabet, no padding
URLSAFE_BASE64_RE = re.compile(r'[A-Za-z0-9_-]*')

# Decode cursors as ordered documents
CURSOR_CODEC_OPTIONS = CodecOptions(document_class=SON)

# The index entry is stored as a sub-document under this key.
# BSON encoders move `_id` to the front of a top-level document; sub-documents keep their field order.
ENTRY_KEY = 'e'


class BsonCursorCodec:
    """ Cursor codec that produces web-safe cursor strings

    Index entries are marshaled as a BSON document, then encoded with URL-safe base64 without padding.
    The resulting cursor string is safe to include in URL queries without escaping.

    `codec_options` are used to decode values. Use `tz_aware=True` if your datetimes are timezone-aware:
    otherwise they come back naive.
    """

    __slots__ = 'codec_options',

    def __init__(self, codec_options: CodecOptions = CURSOR_CODEC_OPTIONS):
        self.codec_options = codec_options

    def encode(self, entry: IndexEntry) -> str:
        try:
            data = bson.encode({ENTRY_KEY: SON(entry)})
        except (BSONError, TypeError, ValueError) as e:
            raise exc.CursorEncodingError(f'Cannot encode the cursor: {e}') from e

        return encode_urlsafe_base64(data)

    def decode(self, cursor: str) -> IndexEntry:
        data = decode_urlsafe_base64(cursor)

        try:
            document = bson.decode(data, codec_options=self.codec_options)
        except (BSONError, ValueError) as e:
            raise exc.CursorDecodingError(f'Invalid cursor: {e}') from e

        # A valid BSON document, but not a cursor
        entry = document.get(ENTRY_KEY)
        if not isinstance(entry, abc.Mapping):
            raise exc.CursorDecodingError('Invalid cursor: not an index entry')

        return tuple(entry.items())

    def __repr__(self):
        return f'{type(self).__name__}()'


def encode_urlsafe_base64(data: bytes) -> str:
    """ Encode bytes as URL-safe base64, no padding """
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def decode_urlsafe_base64(value: str) -> bytes:
    """ Decode URL-safe base64 without padding

    Raises:
        exc.CursorDecodingError: invalid characters or length
    """
    # b64decode() is tolerant to characters out of the alphabet: check them first
    if not isinstance(value, str) or not URLSAFE_BASE64_RE.fullmatch(value):
        raise exc.CursorDecodingError('Invalid cursor: unexpected characters')

    # Restore the padding
    padded = value + '=' * (-len(value) % 4)

    try:
        return base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise exc.CursorDecodingError(f'Invalid cursor: {e}') from e


# The default codec.
# It has no state, so it's safe to share it.
DEFAULT_CODEC = BsonCursorCodec()
