"""
DynamoDB Local integration tests for the database service adapter.

Environment Variables:
- AWS_REGION: AWS region
- DYNAMODB_ENDPOINT: DynamoDB Local endpoint URL
"""

import os
from types import SimpleNamespace

import pytest

from dynamodb_adapter.data.dynamodb import DynamoDbAdapter


pytestmark = pytest.mark.skipif(
    not (os.getenv('AWS_REGION') and os.getenv('DYNAMODB_ENDPOINT')),
    reason="DynamoDB Local not configured. Set AWS_REGION and DYNAMODB_ENDPOINT environment variables."
)


def test_insert_then_find_by_id(adapter):
    entity = {'id': 'a1', 'name': 'Alice', 'age': 30, 'score': 1.5}

    adapter.insert(entity)
    found = adapter.find_by_id('a1')

    assert adapter.entity_to_object(found) == entity


def test_find_with_limit_returns_at_most_limit(adapter):
    adapter.insert_many([{'id': f"u{i}", 'status': 'open'} for i in range(5)])

    items = adapter.find({'query': {'status': 'open'}, 'limit': 2})

    assert len(items) == 2


def test_find_filters_on_query(adapter):
    adapter.insert_many([
        {'id': 'o1', 'status': 'open'},
        {'id': 'c1', 'status': 'closed'},
    ])

    items = adapter.find({'query': {'status': 'open'}})

    assert [item.id for item in items] == ['o1']


def test_find_one(adapter):
    adapter.insert({'id': 'x', 'status': 'open'})

    assert adapter.find_one({'query': {'status': 'open'}}).id == 'x'
    assert adapter.find_one({'query': {'status': 'missing'}}) is None


def test_find_by_ids(adapter):
    adapter.insert_many([{'id': 'a'}, {'id': 'b'}, {'id': 'c'}])

    items = adapter.find_by_ids(['a', 'c'])

    assert sorted(item.id for item in items) == ['a', 'c']


def test_update_by_id(adapter):
    adapter.insert({'id': 'a', 'name': 'old', 'age': 1})

    updated = adapter.update_by_id('a', {'$set': {'name': 'new'}})

    assert adapter.entity_to_object(updated) == {'id': 'a', 'name': 'new', 'age': 1}


def test_remove_by_id(adapter):
    adapter.insert({'id': 'a', 'name': 'gone'})

    removed = adapter.remove_by_id('a')

    assert removed.name == 'gone'
    assert adapter.find_by_id('a') is None


def test_count_and_clear(adapter):
    adapter.insert_many([{'id': f"u{i}", 'status': 'open' if i % 2 else 'closed'} for i in range(6)])

    assert adapter.count({'query': {'status': 'open'}}) == 3
    assert adapter.count() == 6

    adapter.clear()

    assert adapter.count() == 0


def test_connect_with_existing_table(adapter, model):
    second = DynamoDbAdapter(aws=adapter.aws, should_create_table=True)
    second.init(None, SimpleNamespace(schema={'model': model}))

    second.connect()

    assert second.connected
