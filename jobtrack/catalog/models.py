"""Pydantic models describing the workflow catalog."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator

from ..constants import MAX_SUB_TASKS, MIN_SUB_TASKS


class Phase(str, Enum):
    """Top-level workflow stages in display and scan order."""

    LEAD = "LEAD"
    PROSPECT = "PROSPECT"
    APPROVED = "APPROVED"
    EXECUTION = "EXECUTION"
    SECOND_SUPPLEMENT = "SECOND_SUPPLEMENT"
    COMPLETION = "COMPLETION"


PHASE_DISPLAY_NAMES = {
    Phase.LEAD: "Lead",
    Phase.PROSPECT: "Prospect",
    Phase.APPROVED: "Approved",
    Phase.EXECUTION: "Execution",
    Phase.SECOND_SUPPLEMENT: "2nd Supplement",
    Phase.COMPLETION: "Completion",
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ConditionalRule(_Frozen):
    """Include a step only when a project attribute is in ``allowed``.

    A project without the attribute is evaluated as if it had
    ``when_missing``; with no ``when_missing`` the rule does not match.
    """

    attribute: Literal["project_type", "is_insurance_claim"]
    allowed: tuple[Union[bool, str], ...]
    when_missing: Optional[Union[bool, str]] = None

    def matches(self, project: Any) -> bool:
        value = getattr(project, self.attribute, None)
        if value is None:
            value = self.when_missing
        if value is None:
            return False
        return any(type(value) is type(a) and value == a for a in self.allowed)


class PhaseDefinition(_Frozen):
    """One of the six fixed workflow phases."""

    id: Phase
    display_name: str
    position: int


class StepDefinition(_Frozen):
    """A weighted step counted by the progress engine."""

    id: str
    display_name: str
    weight: PositiveInt
    phase_id: Phase
    rule: Optional[ConditionalRule] = None
    dynamic: bool = False

    @property
    def is_conditional(self) -> bool:
        return self.rule is not None


class StepTemplate(_Frozen):
    """Blueprint of a step emitted by the template generator."""

    step_id: str
    name: str
    description: str = ""
    default_role: str
    estimated_duration: int = 1
    sub_tasks: tuple[str, ...]

    @field_validator("sub_tasks")
    @classmethod
    def _sub_task_count(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if not MIN_SUB_TASKS <= len(v) <= MAX_SUB_TASKS:
            raise ValueError(
                f"steps carry between {MIN_SUB_TASKS} and {MAX_SUB_TASKS} sub-tasks, got {len(v)}"
            )
        return v


class StepSequence(_Frozen):
    """Ordered run of step templates sharing one record phase label."""

    phase_id: Phase
    phase_label: str
    steps: tuple[StepTemplate, ...]


class WorkflowTemplates(_Frozen):
    """Step sequences the generator chains together for a new project."""

    lead: StepSequence
    prospect_insurance: StepSequence
    prospect_non_insurance: StepSequence
    approved: StepSequence
    execution: StepSequence
    second_supplement: StepSequence
    completion: StepSequence

    def sequences(self, is_insurance_claim: bool) -> tuple[StepSequence, ...]:
        """Return the sequences for a project in emission order."""
        prospect = (
            self.prospect_insurance if is_insurance_claim else self.prospect_non_insurance
        )
        return (
            self.lead,
            prospect,
            self.approved,
            self.execution,
            self.second_supplement,
            self.completion,
        )


def standard_phases() -> tuple[PhaseDefinition, ...]:
    return tuple(
        PhaseDefinition(id=phase, display_name=PHASE_DISPLAY_NAMES[phase], position=i)
        for i, phase in enumerate(Phase)
    )


class WorkflowCatalog(_Frozen):
    """Immutable phase, step and template configuration."""

    phases: tuple[PhaseDefinition, ...] = Field(default_factory=standard_phases)
    steps: tuple[StepDefinition, ...] = ()
    templates: WorkflowTemplates

    @model_validator(mode="after")
    def _check_consistency(self) -> "WorkflowCatalog":
        if [p.id for p in self.phases] != list(Phase):
            raise ValueError("catalog must declare the six phases in standard order")
        if [p.position for p in self.phases] != list(range(len(Phase))):
            raise ValueError("phase positions must follow declaration order")
        seen: set[str] = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(f"duplicate step id in catalog: {step.id}")
            seen.add(step.id)
        return self

    def steps_for(self, phase_id: Phase) -> tuple[StepDefinition, ...]:
        """Weighted steps of ``phase_id`` in catalog order."""
        return tuple(s for s in self.steps if s.phase_id == phase_id)

    def step(self, step_id: str) -> Optional[StepDefinition]:
        return next((s for s in self.steps if s.id == step_id), None)

    def conditional_rules(self) -> dict[str, ConditionalRule]:
        """Map of conditional step ids to their inclusion rule."""
        return {s.id: s.rule for s in self.steps if s.rule is not None}
