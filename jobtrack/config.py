from __future__ import annotations

import os
from typing import Literal, Optional

import yaml
from pydantic import BaseModel

from .constants import DEFAULT_CONFIG_PATH


class JobtrackConfig(BaseModel):
    """Top-level configuration model."""

    database_url: Optional[str] = None
    catalog_path: Optional[str] = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    default_insurance_claim: bool = True


def load_config(path: Optional[str] = None) -> JobtrackConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to JOBTRACK_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("JOBTRACK_CONFIG", DEFAULT_CONFIG_PATH)
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = JobtrackConfig(**data)
    else:
        config = JobtrackConfig()

    env_db_url = os.getenv("JOBTRACK_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    env_catalog = os.getenv("JOBTRACK_CATALOG")
    if env_catalog:
        config.catalog_path = env_catalog
    return config
