"""Load workflow catalogs from YAML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import yaml
from pydantic import ValidationError

from ..errors import CatalogError
from .default import DEFAULT_TEMPLATES, default_catalog
from .models import WorkflowCatalog

if TYPE_CHECKING:
    from ..config import JobtrackConfig

logger = logging.getLogger(__name__)


def load_catalog(path: str | Path) -> WorkflowCatalog:
    """Build a catalog from a YAML document.

    The document mirrors :class:`WorkflowCatalog`. ``phases`` defaults to the
    six standard phases and ``templates`` to the built-in step tables, so a
    file that only re-weights steps needs nothing but a ``steps`` list.

    Raises:
        CatalogError: If the file is missing, unreadable or invalid.
    """

    catalog_path = Path(path)
    try:
        with open(catalog_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise CatalogError(f"Cannot read catalog {catalog_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise CatalogError(f"Catalog {catalog_path} must be a mapping")

    if "templates" not in data:
        data["templates"] = DEFAULT_TEMPLATES
    try:
        catalog = WorkflowCatalog.model_validate(data)
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog {catalog_path}: {exc}") from exc

    logger.info(f"Loaded catalog from {catalog_path} with {len(catalog.steps)} weighted steps")
    return catalog


def get_catalog(config: Optional["JobtrackConfig"] = None) -> WorkflowCatalog:
    """Return the catalog named by ``config.catalog_path`` or the built-in one."""
    if config is not None and config.catalog_path:
        return load_catalog(config.catalog_path)
    return default_catalog()
