"""Persistence layer for project workflows."""

from __future__ import annotations

from typing import Optional

from ..config import JobtrackConfig, load_config
from .inmemory import InMemoryWorkflowRepository
from .repository import WorkflowRepository
from .sqlite import SQLiteWorkflowRepository

_repository_instance: WorkflowRepository | None = None


def get_repository(
    database_url: Optional[str] = None, config: Optional[JobtrackConfig] = None
) -> WorkflowRepository:
    """Return the workflow repository for ``database_url`` or ``config``.

    Without arguments the last repository built is reused; otherwise the
    backend is chosen from the URL, falling back to ``config.database_url``
    (``load_config`` already applies ``JOBTRACK_DATABASE_URL`` and
    ``DATABASE_URL``). No URL selects the in-memory backend.

    Raises:
        ValueError: If the URL names an unsupported backend.
    """

    global _repository_instance
    if _repository_instance is not None and database_url is None and config is None:
        return _repository_instance

    url = database_url or (config or load_config()).database_url
    if not url:
        repository: WorkflowRepository = InMemoryWorkflowRepository()
    elif url.startswith("sqlite://"):
        repository = SQLiteWorkflowRepository(url[len("sqlite://"):])
    else:
        raise ValueError(f"Unsupported database backend: {url}")

    _repository_instance = repository
    return repository


__all__ = [
    "WorkflowRepository",
    "SQLiteWorkflowRepository",
    "InMemoryWorkflowRepository",
    "get_repository",
]
