from typing import Optional

import pytest
from fastapi import FastAPI
from fastapi import Depends
from fastapi.testclient import TestClient

from mongoseek import Query, QueryObject
from mongoseek import exc
from mongoseek.integration.fastapi import query_object
from mongoseek.testing import FakeDatabase

from .test_query import insert_users


EMPTY_QUERY_OBJECT = dict(
    filter={},
    sort=[],
    select=None,
    limit=None,
    cursor=None,
)


def query(**fields):
    return {
        **EMPTY_QUERY_OBJECT,
        **fields
    }


@pytest.mark.parametrize(('uri_params', 'expected_result'), [
    ('?select=["a","b","c"]', query(select={'a': 1, 'b': 1, 'c': 1})),
    ('?select={"password":0}', query(select={'password': 0})),
    ('?sort=["a","%2Bb","-c"]', query(sort=['+a', '+b', '-c'])),
    ('?sort=[a, -c]', query(sort=['+a', '-c'])),
    ('?filter={"age":{"$gt":18}}', query(filter={'age': {'$gt': 18}})),
    ('?filter={ country: US }', query(filter={'country': 'US'})),
    ('?limit=2&cursor=abc', query(limit=2, cursor='abc')),
])
def test_query_object_parameter(app: FastAPI, client: TestClient, uri_params: str, expected_result: Optional[dict]):
    """ FastAPI: get Query Object as URL parameters """
    # Prepare an API endpoint
    @app.get('/api')
    def api(query_object: Optional[QueryObject] = Depends(query_object)):
        return {'q': query_object.dict() if query_object else None}

    # Query Object: Empty
    res = client.request('GET', '/api')
    assert res.json() == {'q': None}

    # Query Object: with parameters
    res = client.request('GET', f'/api{uri_params}')
    assert res.json() == {'q': expected_result}


def test_query_object_parameter_error(app: FastAPI, client: TestClient):
    """ FastAPI: invalid input """
    @app.get('/api')
    def api(query_object: Optional[QueryObject] = Depends(query_object)):
        return {'q': query_object.dict() if query_object else None}

    # Malformed YAML
    with pytest.raises(exc.QueryObjectError, match='`filter` parsing failed'):
        client.request('GET', '/api?filter={ a: [ }')

    # Wrong type
    with pytest.raises(exc.QueryObjectError, match='"sort" must be an array'):
        client.request('GET', '/api?sort=name')


def test_query_object_pagination(app: FastAPI, client: TestClient):
    """ FastAPI: paginate with cursors from the URL """
    database = FakeDatabase()
    insert_users(database)

    @app.get('/users')
    def list_users(query_object: Optional[QueryObject] = Depends(query_object)):
        q = Query.from_query_object(database, 'users', query_object)
        page = q.fetch('name', '_id')
        return {'users': [user['_id'] for user in page.items], 'next': page.cursor if page.has_more else None}

    res = client.get('/users', params={'filter': '{country: US}', 'sort': '[name, _id]', 'limit': 3})
    assert res.json()['users'] == [2, 3, 4]

    res = client.get('/users', params={'filter': '{country: US}', 'sort': '[name, _id]', 'limit': 3, 'cursor': res.json()['next']})
    assert res.json()['users'] == [5, 6, 7]

    res = client.get('/users', params={'filter': '{country: US}', 'sort': '[name, _id]', 'limit': 3, 'cursor': res.json()['next']})
    assert res.json() == {'users': [8], 'next': None}


@pytest.fixture()
def app() -> FastAPI:
    return FastAPI()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    with TestClient(app) as c:
        yield c
