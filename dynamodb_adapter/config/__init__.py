"""Config module"""
from .config import BaseConfig, AdapterConfig, AwsConfig, ConfigurationError
