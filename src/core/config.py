"""
Configuration for the example programs, read from environment variables.

Values can be seeded from a local ``.env`` file. Variables already present in the
process environment take precedence over the file.

Example .env:
    PROJECT_ID=my-gcp-project
    BIG_QUERY_DATASET_ID=iot
    BIG_QUERY_TABLE_ID=events
    BIG_QUERY_INSERT_SAMPLE=1
    INSTANCE_ID=iot-instance
    TABLE_ID=readings
    COLUMN_FAMILY=metrics
"""
import logging
import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

PLACEHOLDER_PROJECT_ID = "your-gcp-project-id"


class ConfigError(Exception):
    """Raised when required configuration is missing or still a placeholder"""


def load_env_file(path: Optional[str] = None) -> bool:
    """Load a .env file into os.environ. Returns False (with a warning) when there is none."""
    dotenv_path = path or find_dotenv(usecwd=True)
    if not dotenv_path or not os.path.isfile(dotenv_path):
        logger.warning(f"Could not load .env file ({path or 'searched from cwd'}), using process environment")
        return False

    load_dotenv(dotenv_path, override=False)
    logger.info(f"Loaded environment from {dotenv_path}")
    return True


def _check_required(config, env_names: Mapping[str, str]) -> None:
    missing = [env_names[f.name] for f in fields(config)
               if f.name in env_names and not getattr(config, f.name)]
    if missing:
        raise ConfigError(f"Ensure {', '.join(missing)} are set")

    if config.project_id == PLACEHOLDER_PROJECT_ID:
        raise ConfigError("Please update PROJECT_ID in your .env file")


@dataclass(frozen=True)
class WarehouseConfig:
    """Settings for the BigQuery example"""
    project_id: str
    dataset_id: str
    table_id: str
    insert_sample: bool = False

    ENV_NAMES = {
        'project_id': 'PROJECT_ID',
        'dataset_id': 'BIG_QUERY_DATASET_ID',
        'table_id': 'BIG_QUERY_TABLE_ID',
    }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WarehouseConfig":
        env = os.environ if environ is None else environ
        config = cls(
            **{name: env.get(var, '').strip() for name, var in cls.ENV_NAMES.items()},
            insert_sample=env.get('BIG_QUERY_INSERT_SAMPLE', '').strip() == '1',
        )
        config.validate()
        return config

    def validate(self) -> None:
        _check_required(self, self.ENV_NAMES)

    @property
    def table_ref(self) -> str:
        """Fully qualified table id, e.g. ``project.dataset.table``"""
        return f"{self.project_id}.{self.dataset_id}.{self.table_id}"


@dataclass(frozen=True)
class WideColumnConfig:
    """Settings for the Bigtable example"""
    project_id: str
    instance_id: str
    table_id: str
    column_family: str

    ENV_NAMES = {
        'project_id': 'PROJECT_ID',
        'instance_id': 'INSTANCE_ID',
        'table_id': 'TABLE_ID',
        'column_family': 'COLUMN_FAMILY',
    }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WideColumnConfig":
        env = os.environ if environ is None else environ
        config = cls(**{name: env.get(var, '').strip() for name, var in cls.ENV_NAMES.items()})
        config.validate()
        return config

    def validate(self) -> None:
        _check_required(self, self.ENV_NAMES)
