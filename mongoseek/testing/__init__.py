""" Tools for testing """

from .fake_database import FakeDatabase
