from copy import deepcopy
from functools import reduce
from math import ceil
from numbers import Number
from operator import and_
from typing import Any, Dict, List, Mapping, Optional, Type, Union
import logging

from pynamodb.attributes import MapAttribute
from pynamodb.exceptions import DoesNotExist, TableError
from pynamodb.models import Model

from dynamodb_adapter.config import AdapterConfig, AwsConfig, ConfigurationError
from dynamodb_adapter.data.base import DbAdapter

logger = logging.getLogger(__name__)


def entity_to_dict(entity: Any) -> Any:
    """Model instances become a dict of their attribute values; anything else passes through."""
    if isinstance(entity, Model):
        return {name: entity_to_dict(value) for name, value in entity.attribute_values.items()}
    if isinstance(entity, MapAttribute):
        return entity.as_dict()
    return entity


class DynamoDbAdapter(DbAdapter):
    """DynamoDB adapter delegating every operation to the service's PynamoDB model."""

    def __init__(
        self,
        aws: Union[AwsConfig, Mapping[str, Any]] = None,
        should_create_table: bool = False,
        hash_key: Optional[str] = None,
        range_key: Optional[str] = None,
        indexes: Optional[List[Dict[str, Any]]] = None
    ):
        """
        Args:
            aws: Connection settings (region, credentials, endpoint) for the model's connection.
            should_create_table (bool): Create the model's table on connect.
            hash_key (str): Name of the hash key attribute. Defaults to the model's.
            range_key (str): Name of the range key attribute. Defaults to the model's.
            indexes (list): Secondary index definitions.

        Raises:
            ConfigurationError: If no aws settings are given.
        """
        if not aws:
            raise ConfigurationError("aws config should be provided")

        self.aws = aws if isinstance(aws, AwsConfig) else AwsConfig.from_dict(aws)
        self.should_create_table = should_create_table
        self._hash_key = hash_key
        self._range_key = range_key
        self._indexes = indexes

        self.broker = None
        self.service = None
        self.model: Optional[Type[Model]] = None
        self.hash_key: Optional[str] = None
        self.range_key: Optional[str] = None
        self.indexes: Optional[List[Dict[str, Any]]] = None
        self.connected = False

    @classmethod
    def from_config(cls, config: AdapterConfig) -> 'DynamoDbAdapter':
        config.validate_env_vars()
        return cls(
            aws=config.get_aws_config(),
            should_create_table=config.should_create_table(),
            hash_key=config.get_hash_key(),
            range_key=config.get_range_key(),
            indexes=config.get_indexes()
        )

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.disconnect()

    def init(self, broker: Any, service: Any):
        self.broker = broker
        self.service = service

        schema = getattr(service, 'schema', None)
        if isinstance(schema, Mapping):
            model = schema.get('model')
        else:
            model = getattr(schema, 'model', None)

        if model is None:
            raise ConfigurationError("Missing `model` or definition in schema of service!")
        if not (isinstance(model, type) and issubclass(model, Model)):
            raise ConfigurationError("`model` in schema of service must be a PynamoDB Model class")

        self.model = model

    def _scoped_model(self, model: Type[Model]) -> Type[Model]:
        """Subclass of the service's model whose Meta carries this adapter's connection settings."""
        meta = type('Meta', (model.Meta,), self.aws.meta_attributes())
        return type(model.__name__, (model,), {
            'Meta': meta,
            '_connection': None,
            '__module__': model.__module__
        })

    def _key_name(self, is_range: bool) -> Optional[str]:
        for name, attr in self.model.get_attributes().items():
            if getattr(attr, 'is_range_key' if is_range else 'is_hash_key', False):
                return name
        return None

    def connect(self):
        """
        Binds the model to this adapter's connection settings.

        Creates the table first when should_create_table is set; an existing
        table is not an error.
        """
        if self.model is None:
            raise ConfigurationError("init must be called with a service before connect")

        self.model = self._scoped_model(self.model)

        if self.should_create_table:
            meta = self.model.Meta
            kwargs = {}
            if not getattr(meta, 'read_capacity_units', None) and not getattr(meta, 'billing_mode', None):
                kwargs['billing_mode'] = 'PAY_PER_REQUEST'
            try:
                self.model.create_table(wait=True, **kwargs)
            except TableError as e:
                if e.cause_response_code != 'ResourceInUseException':
                    raise
                logger.info("Table %s already exists", meta.table_name)

        self.hash_key = self._hash_key or self._key_name(is_range=False)
        self.range_key = self._range_key or self._key_name(is_range=True)
        self.indexes = self._indexes
        self.connected = True
        logger.info("Connected to DynamoDB table %s (region %s)", self.model.Meta.table_name, self.aws.region_name)

    def disconnect(self):
        self.connected = False

    def _attribute(self, name: str):
        attribute = self.model.get_attributes().get(name)
        if attribute is None:
            raise ValueError(f"{name} is not an attribute of {self.model.__name__}")
        return attribute

    def build_condition(self, query: Optional[Mapping[str, Any]]):
        """AND of `attribute == value` for every pair in query, in attribute name order."""
        if not query:
            return None
        return reduce(and_, [self._attribute(name) == query[name] for name in sorted(query)])

    def find(self, filters: Optional[Dict[str, Any]]) -> List[Model]:
        """
        Find all entities by filters.

        Only `limit` and `query` are honored; `offset`, `sort`, `search` and
        `search_fields` are accepted and ignored.
        """
        return list(self.create_cursor(filters))

    def find_one(self, filters: Optional[Dict[str, Any]]) -> Optional[Model]:
        items = self.find({**(filters or {}), 'limit': 1})
        return items[0] if len(items) == 1 else None

    def find_by_id(self, _id: Any, range_key: Any = None) -> Optional[Model]:
        try:
            return self.model.get(_id, range_key)
        except DoesNotExist:
            return None

    def find_by_ids(self, id_list: List[Any]) -> List[Model]:
        if not id_list:
            return []
        # TODO: replace the scan with Model.batch_get once range keys are accepted here
        return list(self.model.scan(self._attribute(self.hash_key).is_in(*id_list)))

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Counts the entities matching `query` in filters. `limit` is ignored.

        With the hash key in the query this is a Model.count query; otherwise
        every page of a filtered scan is counted.
        """
        query = dict((filters or {}).get('query') or {})
        if self.hash_key in query:
            hash_value = query.pop(self.hash_key)
            return self.model.count(hash_value, filter_condition=self.build_condition(query))
        return sum(1 for _ in self.model.scan(self.build_condition(query)))

    def insert(self, entity: Dict[str, Any]) -> Model:
        item = self.model(**entity)
        logger.debug("Inserting into %s", self.model.Meta.table_name)
        item.save()
        return item

    def insert_many(self, entities: List[Dict[str, Any]]) -> List[Model]:
        items = [self.model(**entity) for entity in entities]
        logger.debug("Inserting %d entities into %s", len(items), self.model.Meta.table_name)
        with self.model.batch_write() as batch:
            for item in items:
                batch.save(item)
        return items

    def _key_values(self, _id: Any, range_key: Any = None) -> Dict[str, Any]:
        keys = {self.hash_key: _id}
        if range_key is not None and self.range_key:
            keys[self.range_key] = range_key
        return keys

    def update_by_id(self, _id: Any, update: Dict[str, Any], range_key: Any = None) -> Optional[Model]:
        """
        Update an entity by ID with the fields of update['$set'].

        On composite-key tables the range key value must be passed as well,
        otherwise DynamoDB rejects the incomplete key. An empty `$set`
        returns the stored entity unchanged.
        """
        keys = self._key_values(_id, range_key)
        changes = {name: value for name, value in ((update or {}).get('$set') or {}).items() if name not in keys}
        if not changes:
            return self.find_by_id(_id, range_key)

        item = self.model(**keys)
        item.update(actions=[self._attribute(name).set(value) for name, value in changes.items()])
        return item

    def remove_by_id(self, _id: Any, range_key: Any = None) -> Optional[Model]:
        item = self.find_by_id(_id, range_key)
        if item is None:
            return None
        item.delete()
        return item

    def clear(self):
        logger.info("Clearing table %s", self.model.Meta.table_name)
        with self.model.batch_write() as batch:
            for item in self.model.scan():
                batch.delete(item)

    def entity_to_object(self, entity: Any) -> Dict[str, Any]:
        return entity_to_dict(entity)

    def create_cursor(self, params: Optional[Dict[str, Any]]):
        """
        Create a filtered scan.

        Applies `limit` when it is a positive number (fractions round up) and
        an equality condition for each pair in `query`. The returned result
        iterator sends nothing until iterated and then follows every page.
        """
        if not params:
            return self.model.scan()

        limit = params.get('limit')
        if isinstance(limit, Number) and not isinstance(limit, bool) and limit > 0:
            limit = ceil(limit)
        else:
            limit = None

        return self.model.scan(self.build_condition(params.get('query')), limit=limit)

    def before_save_transform_id(self, entity: Dict[str, Any], id_field: str = None) -> Dict[str, Any]:
        return deepcopy(entity)

    def after_retrieve_transform_id(self, entity: Dict[str, Any], id_field: str = None) -> Dict[str, Any]:
        return entity
