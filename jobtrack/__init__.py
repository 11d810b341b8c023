"""jobtrack: weighted workflow progress for construction projects."""

from .catalog import Phase, WorkflowCatalog, default_catalog, load_catalog
from .errors import CatalogError, InvalidProjectAttributes, StepNotFound, WorkflowNotFound
from .models import Project, StepRecord, SubTaskRecord, WorkflowInstance
from .persistence import get_repository
from .progress import (
    ProgressEngine,
    calculate_project_progress,
    get_current_phase,
    get_next_steps,
)
from .service import WorkflowService
from .template import generate_default_workflow_steps, generate_workflow_template

__version__ = "0.1.0"
__all__ = [
    "Phase",
    "WorkflowCatalog",
    "default_catalog",
    "load_catalog",
    "Project",
    "WorkflowInstance",
    "StepRecord",
    "SubTaskRecord",
    "ProgressEngine",
    "calculate_project_progress",
    "get_current_phase",
    "get_next_steps",
    "generate_default_workflow_steps",
    "generate_workflow_template",
    "WorkflowService",
    "get_repository",
    "InvalidProjectAttributes",
    "WorkflowNotFound",
    "StepNotFound",
    "CatalogError",
]
