"""
dbgadget - Configuration Module
Copyright (c) 2025 Dmitry Solonnikov
Licensed under MIT License - see LICENSE file for details
"""
import configparser
import logging
import os
from dataclasses import dataclass, field
from typing import Dict

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = 'public'
DATABASE_KEYS = ('dbname', 'user', 'password', 'host', 'port')


@dataclass
class GadgetConfig:
    """Connection parameters and introspection settings."""
    database: Dict[str, str] = field(default_factory=dict)
    schema: str = DEFAULT_SCHEMA
    include_dropped: bool = False


def load_config(config_path: str) -> GadgetConfig:
    """Load configuration from an INI file.

    Args:
        config_path: Path to the configuration file

    Returns:
        GadgetConfig with the [database] keys that are present and the
        [introspection] settings (defaults when the section is absent)
    """
    if not os.path.isfile(config_path):
        raise ConfigError(f"Configuration file not found: {config_path}")

    parser = configparser.ConfigParser()
    parser.read(config_path)

    if not parser.has_section('database'):
        raise ConfigError(f"Section [database] is missing in {config_path}")

    # Передаём в psycopg2 только известные ключи
    database = {
        key: parser['database'][key]
        for key in DATABASE_KEYS
        if key in parser['database']
    }

    try:
        schema = parser.get('introspection', 'schema', fallback=DEFAULT_SCHEMA)
        include_dropped = parser.getboolean('introspection', 'include_dropped', fallback=False)
    except ValueError as e:
        raise ConfigError(f"Invalid [introspection] settings in {config_path}: {e}") from e

    logger.debug("Loaded configuration from %s (schema=%s)", config_path, schema)
    return GadgetConfig(database=database, schema=schema, include_dropped=include_dropped)
