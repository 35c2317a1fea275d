from .query import Query, Page, PageInfo
from .settings import QuerySettings
