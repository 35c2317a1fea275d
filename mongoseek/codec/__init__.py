""" Cursor codecs: convert index entries to opaque cursor strings and back """

from .base import CursorCodec
from .default import BsonCursorCodec, DEFAULT_CODEC
