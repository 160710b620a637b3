"""
Shared pytest fixtures for the DynamoDB Local integration tests.

Required env vars:
- AWS_REGION
- DYNAMODB_ENDPOINT

Optional env vars:
- AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY (DynamoDB Local accepts any value)
"""

import os
from types import SimpleNamespace
from uuid import uuid4

import pytest
from pynamodb.attributes import NumberAttribute, UnicodeAttribute
from pynamodb.models import Model

from dynamodb_adapter.data.dynamodb import DynamoDbAdapter


def get_dynamodb_config():
    """
    Returns the adapter's aws settings, or None if any required env var is missing.
    """
    required_vars = ['AWS_REGION', 'DYNAMODB_ENDPOINT']
    if not all(os.getenv(var) for var in required_vars):
        return None

    return {
        'region_name': os.getenv('AWS_REGION'),
        'aws_access_key_id': os.getenv('AWS_ACCESS_KEY_ID', 'test'),
        'aws_secret_access_key': os.getenv('AWS_SECRET_ACCESS_KEY', 'test'),
        'endpoint_url': os.getenv('DYNAMODB_ENDPOINT')
    }


def build_model(table_name):
    """A PynamoDB model for a throwaway table keyed on `id`."""
    return type('IntegrationUser', (Model,), {
        'Meta': type('Meta', (), {'table_name': table_name}),
        'id': UnicodeAttribute(hash_key=True),
        'name': UnicodeAttribute(null=True),
        'status': UnicodeAttribute(null=True),
        'age': NumberAttribute(null=True),
        'score': NumberAttribute(null=True),
        '__module__': __name__
    })


@pytest.fixture
def model():
    """A fresh table per test so runs never see each other's data."""
    return build_model(f"integration_{uuid4().hex}")


@pytest.fixture
def adapter(model):
    """A connected adapter whose table is created on connect and deleted afterwards."""
    adapter = DynamoDbAdapter(aws=get_dynamodb_config(), should_create_table=True)
    adapter.init(None, SimpleNamespace(schema={'model': model}))
    adapter.connect()
    yield adapter
    adapter.disconnect()
    adapter.model.delete_table()
