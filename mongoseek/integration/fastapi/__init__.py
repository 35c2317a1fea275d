""" FastAPI integration: get the Query Object from URL parameters """

from .query_object import query_object
