from __future__ import annotations

from typing import Protocol, runtime_checkable

from mongoseek.typing import IndexEntry


@runtime_checkable
class CursorCodec(Protocol):
    """ A symmetric pair of functions that convert an index entry into a cursor string, and back

    Implement it to encrypt, sign, or otherwise customize your cursors.
    A codec must be round-trip consistent: decode(encode(entry)) == entry
    """

    def encode(self, entry: IndexEntry) -> str:
        """ Create a cursor string from an index entry

        Raises:
            exc.CursorEncodingError
        """

    def decode(self, cursor: str) -> IndexEntry:
        """ Parse a cursor string into an index entry

        Raises:
            exc.CursorDecodingError
        """
