"""Workflow template generation for new projects."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from .catalog import WorkflowCatalog, default_catalog
from .contracts import StepSpec, SubTaskSpec, WorkflowTemplate
from .errors import InvalidProjectAttributes
from .models import Project

logger = logging.getLogger(__name__)

WORKFLOW_TYPES = {
    "ROOF_REPLACEMENT": "ROOFING",
    "KITCHEN_REMODEL": "KITCHEN_REMODEL",
    "BATHROOM_RENOVATION": "BATHROOM_RENOVATION",
    "SIDING_INSTALLATION": "SIDING",
    "WINDOW_REPLACEMENT": "WINDOWS",
}
DEFAULT_WORKFLOW_TYPE = "GENERAL"


def workflow_type_for(project_type: Optional[str]) -> str:
    """Map a project type to the workflow type stored on the instance."""
    return WORKFLOW_TYPES.get(project_type or "", DEFAULT_WORKFLOW_TYPE)


def generate_default_workflow_steps(
    is_insurance_claim: Any, catalog: Optional[WorkflowCatalog] = None
) -> List[StepSpec]:
    """Build the ordered step specs of a new workflow instance.

    LEAD is followed by either the insurance or the non-insurance prospect
    sequence, then APPROVED, EXECUTION, 2nd supplement and COMPLETION. Every
    step depends on the step emitted before it, so the first prospect step
    depends on the last LEAD step and the first APPROVED step on the last
    step of whichever prospect branch was chosen. Sub-task ids are
    ``{step_id}_{n}`` counting from 1.

    Args:
        is_insurance_claim: Selects the prospect branch. Must be a bool.
        catalog: Catalog providing templates and weights. Defaults to the
            built-in catalog.

    Raises:
        InvalidProjectAttributes: If ``is_insurance_claim`` is missing or not
            a bool.
    """
    if is_insurance_claim is None:
        raise InvalidProjectAttributes("is_insurance_claim is required to generate a workflow")
    if not isinstance(is_insurance_claim, bool):
        raise InvalidProjectAttributes(
            f"is_insurance_claim must be a bool, got {type(is_insurance_claim).__name__}"
        )

    catalog = catalog or default_catalog()
    specs: List[StepSpec] = []
    previous: Optional[str] = None
    for sequence in catalog.templates.sequences(is_insurance_claim):
        for template in sequence.steps:
            definition = catalog.step(template.step_id)
            specs.append(
                StepSpec(
                    step_id=template.step_id,
                    name=template.name,
                    description=template.description,
                    phase=sequence.phase_label,
                    phase_id=sequence.phase_id,
                    weight=definition.weight if definition else 0,
                    dependencies=[previous] if previous else [],
                    default_role=template.default_role,
                    estimated_duration=template.estimated_duration,
                    step_order=len(specs) + 1,
                    sub_tasks=[
                        SubTaskSpec(sub_task_id=f"{template.step_id}_{n}", name=name)
                        for n, name in enumerate(template.sub_tasks, start=1)
                    ],
                )
            )
            previous = template.step_id

    logger.debug(
        f"Generated {len(specs)} workflow steps (insurance claim: {is_insurance_claim})"
    )
    return specs


def generate_workflow_template(
    project: Project | Mapping[str, Any], catalog: Optional[WorkflowCatalog] = None
) -> WorkflowTemplate:
    """Generate the workflow template for ``project``.

    Raises:
        InvalidProjectAttributes: If the project lacks ``is_insurance_claim``.
    """
    if isinstance(project, Mapping):
        is_insurance_claim = project.get("isInsuranceClaim", project.get("is_insurance_claim"))
        project_type = project.get("projectType", project.get("project_type"))
    else:
        is_insurance_claim = project.is_insurance_claim
        project_type = project.project_type
    steps = generate_default_workflow_steps(is_insurance_claim, catalog)
    return WorkflowTemplate(
        workflow_type=workflow_type_for(project_type),
        is_insurance_claim=is_insurance_claim,
        steps=steps,
    )
