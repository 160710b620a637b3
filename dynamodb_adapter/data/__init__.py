"""data module"""

from .base import DbAdapter
from .dynamodb import DynamoDbAdapter, entity_to_dict
