"""Package reading configuration.

Configuration comes either from a YAML file or from the environment (a
.env file is honoured through python-dotenv):

    # confluence-xml.yaml
    temp_dir: /var/tmp/confluence
    list_delimiter: ","

    # environment
    CONFLUENCE_XML_TEMP_DIR=/var/tmp/confluence
    CONFLUENCE_XML_LIST_DELIMITER=,
"""

import os
import tempfile
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError, PackageSourceError
from .properties import DEFAULT_LIST_DELIMITER

ENV_TEMP_DIR = "CONFLUENCE_XML_TEMP_DIR"
ENV_LIST_DELIMITER = "CONFLUENCE_XML_LIST_DELIMITER"


@dataclass
class PackageConfig:
    """Settings used while reading a package.

    Attributes:
        temp_dir: Directory where extracted packages and index trees are
            created (None for the system temporary directory)
        list_delimiter: Delimiter used to split string values into lists,
            empty string to disable splitting everywhere
    """
    temp_dir: Optional[str] = None
    list_delimiter: str = DEFAULT_LIST_DELIMITER

    @property
    def temporary_directory(self) -> str:
        return self.temp_dir or tempfile.gettempdir()

    @property
    def delimiter(self) -> Optional[str]:
        return self.list_delimiter or None


class ConfigLoader:
    """Loads PackageConfig from YAML files or environment variables."""

    KNOWN_FIELDS = {'temp_dir', 'list_delimiter'}

    @classmethod
    def load(cls, config_path: str) -> PackageConfig:
        """Load configuration from a YAML file.

        Raises:
            PackageSourceError: If the file cannot be read
            ConfigError: If the YAML is invalid or has unexpected fields
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise PackageSourceError(config_path, 'Configuration file not found')
        except OSError as e:
            raise PackageSourceError(config_path, str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            return PackageConfig()

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def from_env(cls) -> PackageConfig:
        """Build configuration from environment variables (and .env)."""
        load_dotenv()

        config_dict: Dict[str, Any] = {}
        temp_dir = os.getenv(ENV_TEMP_DIR)
        if temp_dir:
            config_dict['temp_dir'] = temp_dir
        list_delimiter = os.getenv(ENV_LIST_DELIMITER)
        if list_delimiter is not None:
            config_dict['list_delimiter'] = list_delimiter

        return cls._parse_config(config_dict)

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> PackageConfig:
        unknown_fields = set(config_dict.keys()) - cls.KNOWN_FIELDS
        if unknown_fields:
            raise ConfigError(
                f"Unknown fields: {', '.join(sorted(str(f) for f in unknown_fields))}"
            )

        temp_dir = config_dict.get('temp_dir')
        if temp_dir is not None:
            temp_dir = str(temp_dir)
            if not temp_dir.strip():
                raise ConfigError("Field 'temp_dir' cannot be empty", 'temp_dir')
            if not os.path.isdir(temp_dir):
                raise ConfigError(f"Directory does not exist: {temp_dir}", 'temp_dir')

        list_delimiter = config_dict.get('list_delimiter', DEFAULT_LIST_DELIMITER)
        if list_delimiter is None:
            list_delimiter = ''
        if not isinstance(list_delimiter, str) or len(list_delimiter) > 1:
            raise ConfigError(
                "Field 'list_delimiter' must be a single character or empty",
                'list_delimiter'
            )

        return PackageConfig(temp_dir=temp_dir, list_delimiter=list_delimiter)
