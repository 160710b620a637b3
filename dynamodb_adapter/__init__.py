"""DynamoDB adapter for generic database services"""

from .config import AdapterConfig, AwsConfig, ConfigurationError
from .data import DbAdapter, DynamoDbAdapter, entity_to_dict
