"""Data models for projects and their persisted workflow state."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .constants import STATUS_NOT_STARTED


class CamelModel(BaseModel):
    """Base model accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _drop_null_values(data: Any) -> Any:
    # Stored nulls fall back to the field defaults.
    if isinstance(data, dict):
        return {k: v for k, v in data.items() if v is not None}
    return data


class SubTaskRecord(CamelModel):
    """Completion state of a single checklist item under a step."""

    sub_task_id: Optional[str] = None
    sub_task_name: str = ""
    is_completed: bool = False
    completed_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        return _drop_null_values(data)


class StepRecord(CamelModel):
    """Concrete instantiation of a catalog step for one project.

    Records read back from storage may be partial: a record without a
    ``step_id`` never matches a catalog step, and null flags or lists are
    read as their empty values.
    """

    step_id: Optional[str] = None
    step_name: str = ""
    description: Optional[str] = None
    phase: Optional[str] = None
    step_order: int = 0
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    actual_start_date: Optional[datetime] = None
    dependencies: list[str] = Field(default_factory=list)
    assigned_role: Optional[str] = None
    sub_tasks: list[SubTaskRecord] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        return _drop_null_values(data)

    def sub_task(self, sub_task_id: str) -> Optional[SubTaskRecord]:
        return next((s for s in self.sub_tasks if s.sub_task_id == sub_task_id), None)


class WorkflowInstance(CamelModel):
    """Persisted workflow instance of a project.

    ``steps`` is ``None`` when the step collection was never loaded or
    created; progress calculations treat that the same as a missing workflow.
    """

    project_id: Optional[str] = None
    workflow_type: str = "GENERAL"
    status: str = STATUS_NOT_STARTED
    overall_progress: int = 0
    current_step_index: int = 0
    steps: Optional[list[StepRecord]] = None

    def step(self, step_id: str) -> Optional[StepRecord]:
        """Return the first record matching ``step_id``."""
        return next((s for s in self.steps or [] if s.step_id == step_id), None)


class Project(CamelModel):
    """Project attributes consumed by the workflow engine."""

    id: Optional[str] = None
    project_type: Optional[str] = None
    is_insurance_claim: Optional[bool] = None
    workflow: Optional[WorkflowInstance] = None
