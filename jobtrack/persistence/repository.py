"""Repository abstraction for project workflow persistence."""

from __future__ import annotations

from typing import Protocol

from ..models import Project, StepRecord, SubTaskRecord, WorkflowInstance


class WorkflowRepository(Protocol):
    """Protocol for workflow state persistence backends.

    Mutating methods raise :class:`~jobtrack.errors.WorkflowNotFound` for an
    unknown project and :class:`~jobtrack.errors.StepNotFound` for an unknown
    step or sub-task.
    """

    async def save_project(self, project: Project) -> None:
        """Create or update project attributes. The workflow is not touched."""

    async def get_project(self, project_id: str) -> Project | None:
        """Retrieve a project together with its workflow instance."""

    async def list_projects(self) -> list[Project]:
        """Return all persisted projects with their workflows."""

    async def delete_project(self, project_id: str) -> None:
        """Delete a project, its workflow, steps and sub-tasks."""

    async def create_workflow(self, workflow: WorkflowInstance) -> None:
        """Persist a new workflow instance and its step records."""

    async def get_workflow(self, project_id: str) -> WorkflowInstance | None:
        """Retrieve the workflow instance of a project."""

    async def mark_step_completed(
        self, project_id: str, step_id: str, completed: bool = True
    ) -> StepRecord:
        """Set step completion; completing a step also completes its sub-tasks."""

    async def mark_sub_task_completed(
        self, project_id: str, step_id: str, sub_task_id: str, completed: bool = True
    ) -> SubTaskRecord:
        """Set completion of a single sub-task."""

    async def update_progress(
        self,
        project_id: str,
        overall_progress: int,
        status: str,
        current_step_index: int,
    ) -> None:
        """Store the advisory progress fields of a workflow instance."""
