"""
Config classes for the DynamoDB adapter, loaded from the environment and/or a .env file.
"""
import os
import json
import logging
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

TRUTHY_VALUES = ('1', 'true', 'yes', 'on')


class ConfigurationError(ValueError):
    """Raised when a required adapter option is missing."""


class BaseConfig():
    """
    Config class that reads environment variables, after loading a .env file if present.
    """
    def __init__(self):
        load_dotenv()
        # Get all environment variables and store them in a dictionary
        self.env_vars = {key: os.getenv(key) for key in os.environ}

    def get_env_vars(self) -> dict:
        """
        Return the dictionary containing all environment variables
        """
        return self.env_vars

    def get_env_var(self, var_name: str, default: Optional[str] = None):
        """
        Retrieve the value of the specified environment variable
        Args:
            var_name (str) : Name of the env var to fetch
            default (str) : Value returned when the var is not set
        """
        if var_name in self.env_vars.keys():
            return self.env_vars[var_name]
        logger.warning("Variable %s not found.", var_name)
        return default

    def get_var_as_bool(self, var_name: str) -> bool:
        """
        Returns True when the var is set to one of 1/true/yes/on
        """
        value = self.env_vars.get(var_name)
        if value is None:
            return False
        return value.strip().lower() in TRUTHY_VALUES

    def get_var_from_json_string(self, var_name: str) -> Any:
        """
        Returns a json string var as a pythonic type, or None if missing or malformed
        """
        if var_name not in self.env_vars.keys():
            return None
        try:
            return json.loads(self.env_vars[var_name])
        except ValueError:
            logger.error("Error: Invalid input format for %s. Please provide a proper json string.", var_name)
            return None

    @abstractmethod
    def validate_env_vars(self):
        """
        Abstract method for validation of the env vars.
        """


@dataclass(frozen=True)
class AwsConfig:
    """Immutable connection settings applied to a scoped PynamoDB model."""
    region_name: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None
    endpoint_url: Optional[str] = None

    _ALIASES = {
        'region': 'region_name',
        'accessKeyId': 'aws_access_key_id',
        'secretAccessKey': 'aws_secret_access_key',
        'sessionToken': 'aws_session_token',
        'endpoint': 'endpoint_url',
    }

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'AwsConfig':
        """
        Builds an AwsConfig from their full names or the short aliases.

        Unknown keys are ignored.
        """
        kwargs = {}
        for key, value in values.items():
            name = cls._ALIASES.get(key, key)
            if name in cls.__dataclass_fields__:
                kwargs[name] = value
        return cls(**kwargs)

    def meta_attributes(self) -> Dict[str, str]:
        """Connection attributes for a PynamoDB Model Meta, without unset values."""
        values = {
            'region': self.region_name,
            'host': self.endpoint_url,
            'aws_access_key_id': self.aws_access_key_id,
            'aws_secret_access_key': self.aws_secret_access_key,
            'aws_session_token': self.aws_session_token,
        }
        return {key: value for key, value in values.items() if value is not None}


class AdapterConfig(BaseConfig):
    """
    Adapter settings read from AWS_* and DYNAMODB_* environment variables.
    """

    def validate_env_vars(self):
        if not self.env_vars.get('AWS_REGION'):
            raise ConfigurationError("AWS_REGION must be set")

    def get_aws_config(self) -> AwsConfig:
        return AwsConfig(
            region_name=self.env_vars.get('AWS_REGION'),
            aws_access_key_id=self.env_vars.get('AWS_ACCESS_KEY_ID'),
            aws_secret_access_key=self.env_vars.get('AWS_SECRET_ACCESS_KEY'),
            aws_session_token=self.env_vars.get('AWS_SESSION_TOKEN'),
            endpoint_url=self.env_vars.get('DYNAMODB_ENDPOINT'),
        )

    def get_hash_key(self) -> Optional[str]:
        return self.env_vars.get('DYNAMODB_HASH_KEY')

    def get_range_key(self) -> Optional[str]:
        return self.env_vars.get('DYNAMODB_RANGE_KEY')

    def should_create_table(self) -> bool:
        return self.get_var_as_bool('DYNAMODB_CREATE_TABLE')

    def get_indexes(self) -> Optional[List[Dict[str, Any]]]:
        return self.get_var_from_json_string('DYNAMODB_INDEXES')
