__version__ = __import__('importlib.metadata').metadata.version('mongoseek')

from .engine import Query, Page, PageInfo
from .engine.settings import QuerySettings
from .query_object import QueryObject, QueryObjectDict
from .codec import CursorCodec, BsonCursorCodec, DEFAULT_CODEC

from . import query_object
from . import exc
