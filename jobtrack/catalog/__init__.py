"""Workflow catalog: phases, weighted steps and generator templates."""

from __future__ import annotations

from .default import DEFAULT_CATALOG, default_catalog
from .loader import get_catalog, load_catalog
from .models import (
    PHASE_DISPLAY_NAMES,
    ConditionalRule,
    Phase,
    PhaseDefinition,
    StepDefinition,
    StepSequence,
    StepTemplate,
    WorkflowCatalog,
    WorkflowTemplates,
)

__all__ = [
    "Phase",
    "PHASE_DISPLAY_NAMES",
    "PhaseDefinition",
    "StepDefinition",
    "ConditionalRule",
    "StepTemplate",
    "StepSequence",
    "WorkflowTemplates",
    "WorkflowCatalog",
    "DEFAULT_CATALOG",
    "default_catalog",
    "load_catalog",
    "get_catalog",
]
