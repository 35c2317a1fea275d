import binascii
import datetime

import bson
import pytest
from bson.codec_options import CodecOptions
from bson.objectid import ObjectId
from bson.son import SON

from mongoseek import exc, QuerySettings
from mongoseek.codec import CursorCodec, BsonCursorCodec, DEFAULT_CODEC
from mongoseek.codec.default import encode_urlsafe_base64


@pytest.mark.parametrize('entry', [
    # Empty
    (),
    # Ints, strings, dates
    (('a', 1), ('b', '2'), ('c', datetime.datetime(2003, 1, 1, 12, 30, 15, 123000))),
    # Field order is preserved
    (('c', 3), ('a', 1), ('b', 2)),
    # `_id` is not moved to the front
    (('name', 'Chloe'), ('_id', 4)),
    # ObjectId, big ints, None, sub-documents
    (('name', 'Alice'), ('_id', ObjectId('5f1d7f8a9b1e8a3d2c4b6a10'))),
    (('n', 2 ** 40), ('x', None)),
    (('boss', {'name': 'Dakota', 'country': 'US'}),),
])
def test_default_codec_roundtrip(entry: tuple):
    """ Test: decode(encode(entry)) == entry """
    cursor = DEFAULT_CODEC.encode(entry)
    assert DEFAULT_CODEC.decode(cursor) == entry


def test_default_codec_urlsafe():
    """ Test: cursors are safe to put into URLs """
    entry = (('v', '\xfb\xff\xbf>?'), ('n', 0xfbff))
    cursor = DEFAULT_CODEC.encode(entry)

    assert '+' not in cursor
    assert '/' not in cursor
    assert '=' not in cursor
    assert DEFAULT_CODEC.decode(cursor) == entry


@pytest.mark.parametrize('cursor', [
    # Characters out of the alphabet
    '%^&',
    '(INVALID)',
    'abc=',
    'ab+/',
    # Valid base64, but not a BSON document
    'ValidBas64ButInvalidCursor',
    # Impossible length
    'abcde',
])
def test_default_codec_invalid(cursor: str):
    """ Test: invalid cursors are rejected """
    with pytest.raises(exc.CursorDecodingError):
        DEFAULT_CODEC.decode(cursor)


@pytest.mark.parametrize('document', [
    {'a': 1},
    {'e': 1},
    {'e': [1, 2]},
])
def test_default_codec_not_an_entry(document: dict):
    """ Test: a BSON document, but not an index entry """
    with pytest.raises(exc.CursorDecodingError):
        DEFAULT_CODEC.decode(encode_urlsafe_base64(bson.encode(document)))


def test_default_codec_encoding_error():
    """ Test: values that BSON can't serialize """
    with pytest.raises(exc.CursorEncodingError):
        DEFAULT_CODEC.encode((('a', object()),))


def test_default_codec_tz_aware():
    """ Test: datetimes keep their timezone when the codec is tz-aware """
    utc = datetime.timezone.utc
    entry = (('ctime', datetime.datetime(2020, 1, 1, tzinfo=utc)), ('_id', 1))

    codec = BsonCursorCodec(CodecOptions(document_class=SON, tz_aware=True))
    assert codec.decode(codec.encode(entry)) == entry

    # The settings' codec follows the settings' codec options
    settings = QuerySettings(codec_options=CodecOptions(tz_aware=True))
    assert settings.codec.decode(settings.codec.encode(entry)) == entry
    assert QuerySettings().codec is DEFAULT_CODEC

    # The default codec is naive
    assert DEFAULT_CODEC.decode(DEFAULT_CODEC.encode(entry))[0][1].tzinfo is None


def test_codec_protocol():
    """ Test: codecs are interchangeable without a common base class """
    assert isinstance(DEFAULT_CODEC, CursorCodec)
    assert isinstance(BsonCursorCodec(), CursorCodec)
    assert isinstance(HexCodec(), CursorCodec)

    entry = (('a', 1), ('b', 'x'))
    assert HexCodec().decode(HexCodec().encode(entry)) == entry


class HexCodec:
    """ A custom codec: hex instead of base64 """
    def encode(self, entry):
        return DEFAULT_CODEC.encode(entry).encode().hex()

    def decode(self, cursor):
        try:
            return DEFAULT_CODEC.decode(bytes.fromhex(cursor).decode())
        except (ValueError, binascii.Error) as e:
            raise exc.CursorDecodingError(str(e)) from e
