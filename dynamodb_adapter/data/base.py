from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class DbAdapter(ABC):
    """Abstract base class for database service adapters."""

    @abstractmethod
    def __enter__(self) -> 'DbAdapter':
        """Context manager entry point for preparing DB connection."""
        pass

    @abstractmethod
    def __exit__(self, exc_type, exc_value, traceback):
        """Context manager exit point for closing DB connection."""
        pass

    @abstractmethod
    def init(self, broker: Any, service: Any):
        """Stores the hosting broker and service and takes the model from the service schema."""
        pass

    @abstractmethod
    def connect(self):
        """Connects to the database."""
        pass

    @abstractmethod
    def disconnect(self):
        """Disconnects from the database."""
        pass

    @abstractmethod
    def find(self, filters: Optional[Dict[str, Any]]) -> List[Any]:
        """Finds all entities matching the filters."""
        pass

    @abstractmethod
    def find_one(self, filters: Optional[Dict[str, Any]]) -> Any:
        """Finds the first entity matching the filters, or None."""
        pass

    @abstractmethod
    def find_by_id(self, _id: Any) -> Any:
        """Finds an entity by ID, or None."""
        pass

    @abstractmethod
    def find_by_ids(self, id_list: List[Any]) -> List[Any]:
        """Finds the entities whose IDs are in id_list."""
        pass

    @abstractmethod
    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Counts the entities matching the filters."""
        pass

    @abstractmethod
    def insert(self, entity: Dict[str, Any]) -> Any:
        """Inserts an entity."""
        pass

    @abstractmethod
    def insert_many(self, entities: List[Dict[str, Any]]) -> List[Any]:
        """Inserts many entities."""
        pass

    @abstractmethod
    def update_by_id(self, _id: Any, update: Dict[str, Any]) -> Any:
        """Updates an entity by ID with a `$set` update descriptor."""
        pass

    @abstractmethod
    def remove_by_id(self, _id: Any) -> Any:
        """Removes an entity by ID and returns its prior state."""
        pass

    @abstractmethod
    def clear(self):
        """Removes every entity."""
        pass

    @abstractmethod
    def entity_to_object(self, entity: Any) -> Dict[str, Any]:
        """Converts a DB entity into a plain dict."""
        pass

    @abstractmethod
    def create_cursor(self, params: Optional[Dict[str, Any]]) -> Any:
        """Builds an unexecuted query from filter params."""
        pass

    def before_save_transform_id(self, entity: Dict[str, Any], id_field: str) -> Dict[str, Any]:
        """Maps the service's ID field onto the DB's before saving."""
        return entity

    def after_retrieve_transform_id(self, entity: Dict[str, Any], id_field: str) -> Dict[str, Any]:
        """Maps the DB's ID field back onto the service's after retrieval."""
        return entity
