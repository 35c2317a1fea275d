import os
import pytest
import pymongo
import pymongo.database
import pymongo.errors

from mongoseek.testing import FakeDatabase


@pytest.fixture(scope='function')
def database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture(scope='function')
def mongodb() -> pymongo.database.Database:
    """ A real MongoDB database. Tests are skipped if the server is unreachable """
    client: pymongo.MongoClient = pymongo.MongoClient(MONGODB_URL, serverSelectionTimeoutMS=500)
    try:
        client.admin.command('ping')
    except pymongo.errors.PyMongoError as e:
        client.close()
        pytest.skip(f'MongoDB is not available: {e}')

    db = client.get_default_database()
    try:
        yield db
    finally:
        client.drop_database(db.name)
        client.close()


# URL of the database to connect to
MONGODB_URL = os.getenv('MONGODB_URL', 'mongodb://localhost/test_mongoseek')
