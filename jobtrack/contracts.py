"""Contracts exchanged between the workflow engine and its collaborators."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from .catalog.models import Phase
from .constants import STATUS_NOT_STARTED
from .models import CamelModel, StepRecord, SubTaskRecord, WorkflowInstance


class SubTaskSpec(CamelModel):
    """Sub-task emitted by the template generator."""

    sub_task_id: str
    name: str

    def to_record(self) -> SubTaskRecord:
        return SubTaskRecord(sub_task_id=self.sub_task_id, sub_task_name=self.name)


class StepSpec(CamelModel):
    """A step ready to be persisted as part of a new workflow instance."""

    step_id: str
    name: str
    description: str = ""
    phase: str
    phase_id: Phase
    weight: int = 0
    dependencies: List[str] = Field(default_factory=list)
    default_role: str
    estimated_duration: int = 1
    step_order: int
    sub_tasks: List[SubTaskSpec] = Field(default_factory=list)

    def to_record(self) -> StepRecord:
        """Instantiate an incomplete record for this step."""
        return StepRecord(
            step_id=self.step_id,
            step_name=self.name,
            description=self.description,
            phase=self.phase,
            step_order=self.step_order,
            dependencies=list(self.dependencies),
            assigned_role=self.default_role,
            sub_tasks=[s.to_record() for s in self.sub_tasks],
        )


class WorkflowTemplate(CamelModel):
    """Generator output for one project."""

    workflow_type: str
    is_insurance_claim: bool
    steps: List[StepSpec] = Field(default_factory=list)

    def to_instance(self, project_id: str) -> WorkflowInstance:
        return WorkflowInstance(
            project_id=project_id,
            workflow_type=self.workflow_type,
            status=STATUS_NOT_STARTED,
            overall_progress=0,
            current_step_index=0,
            steps=[s.to_record() for s in self.steps],
        )


class StepProgress(CamelModel):
    """Per-step entry of a phase breakdown."""

    step_id: str
    name: str
    weight: int
    is_completed: bool = False
    is_conditional: bool = False
    is_dynamic: bool = False


class PhaseProgress(CamelModel):
    """Weighted progress of one phase."""

    phase_id: Phase
    name: str
    weight: int = 0
    completed_weight: int = 0
    percentage: int = 0
    steps: Dict[str, StepProgress] = Field(default_factory=dict)


class PhaseCounts(CamelModel):
    total: int = 0
    completed: int = 0


class StatusCounts(CamelModel):
    completed: int = 0
    in_progress: int = 0
    not_started: int = 0


class StepCounts(CamelModel):
    """Unweighted step counts over every record, included or not."""

    total: int = 0
    completed: int = 0
    by_phase: Dict[str, PhaseCounts] = Field(default_factory=dict)
    by_status: StatusCounts = Field(default_factory=StatusCounts)


class WeightedProgress(CamelModel):
    """Weighted view: catalog steps that pass conditional inclusion."""

    overall: int = 0
    phase_breakdown: Dict[Phase, PhaseProgress] = Field(default_factory=dict)
    total_weight: int = 0
    completed_weight: int = 0


class ProgressResult(CamelModel):
    """Combined result of the weighted and unweighted views."""

    overall: int = 0
    phase_breakdown: Dict[Phase, PhaseProgress] = Field(default_factory=dict)
    total_weight: int = 0
    completed_weight: int = 0
    step_breakdown: StepCounts = Field(default_factory=StepCounts)

    @classmethod
    def combine(cls, weighted: WeightedProgress, counts: StepCounts) -> "ProgressResult":
        return cls(
            overall=weighted.overall,
            phase_breakdown=weighted.phase_breakdown,
            total_weight=weighted.total_weight,
            completed_weight=weighted.completed_weight,
            step_breakdown=counts,
        )


class StepSummary(CamelModel):
    """An actionable step reported by ``get_next_steps``."""

    step_id: str
    name: str
    phase_id: Phase
    weight: int
    is_conditional: bool = False
    is_dynamic: bool = False


class ProjectProgressSnapshot(CamelModel):
    """Everything a caller stores or renders after a progress refresh."""

    project_id: Optional[str] = None
    progress: int
    progress_data: ProgressResult
    current_phase: Phase
    next_steps: List[StepSummary] = Field(default_factory=list)
