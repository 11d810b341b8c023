"""In-memory implementation of the workflow repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from ..errors import StepNotFound, WorkflowNotFound
from ..models import Project, StepRecord, SubTaskRecord, WorkflowInstance
from .repository import WorkflowRepository


class InMemoryWorkflowRepository(WorkflowRepository):
    """Store projects and workflows in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Reads return copies so callers always
    work on a snapshot.
    """

    def __init__(self) -> None:
        self._projects: Dict[str, Project] = {}

    # ------------------------------------------------------------------
    def _project(self, project_id: str) -> Project:
        project = self._projects.get(project_id)
        if project is None:
            raise WorkflowNotFound(f"Project {project_id} not found")
        return project

    def _workflow(self, project_id: str) -> WorkflowInstance:
        workflow = self._project(project_id).workflow
        if workflow is None:
            raise WorkflowNotFound(f"Workflow for project {project_id} not found")
        return workflow

    def _step(self, project_id: str, step_id: str) -> StepRecord:
        step = self._workflow(project_id).step(step_id)
        if step is None:
            raise StepNotFound(f"Workflow step {step_id} not found for project {project_id}")
        return step

    # ------------------------------------------------------------------
    async def save_project(self, project: Project) -> None:
        if not project.id:
            raise ValueError("Project id is required to persist a project")
        existing = self._projects.get(project.id)
        stored = project.model_copy(deep=True)
        stored.workflow = existing.workflow if existing else None
        self._projects[project.id] = stored

    async def get_project(self, project_id: str) -> Project | None:
        project = self._projects.get(project_id)
        return project.model_copy(deep=True) if project else None

    async def list_projects(self) -> list[Project]:
        return [p.model_copy(deep=True) for p in self._projects.values()]

    async def delete_project(self, project_id: str) -> None:
        self._projects.pop(project_id, None)

    async def create_workflow(self, workflow: WorkflowInstance) -> None:
        project = self._project(workflow.project_id)
        project.workflow = workflow.model_copy(deep=True)

    async def get_workflow(self, project_id: str) -> WorkflowInstance | None:
        project = self._projects.get(project_id)
        if project is None or project.workflow is None:
            return None
        return project.workflow.model_copy(deep=True)

    async def mark_step_completed(
        self, project_id: str, step_id: str, completed: bool = True
    ) -> StepRecord:
        step = self._step(project_id, step_id)
        now = datetime.now(timezone.utc)
        step.is_completed = completed
        step.completed_at = now if completed else None
        if completed:
            for sub_task in step.sub_tasks:
                if not sub_task.is_completed:
                    sub_task.is_completed = True
                    sub_task.completed_at = now
        return step.model_copy(deep=True)

    async def mark_sub_task_completed(
        self, project_id: str, step_id: str, sub_task_id: str, completed: bool = True
    ) -> SubTaskRecord:
        sub_task = self._step(project_id, step_id).sub_task(sub_task_id)
        if sub_task is None:
            raise StepNotFound(f"Workflow sub-task {sub_task_id} not found for step {step_id}")
        sub_task.is_completed = completed
        sub_task.completed_at = datetime.now(timezone.utc) if completed else None
        return sub_task.model_copy(deep=True)

    async def update_progress(
        self,
        project_id: str,
        overall_progress: int,
        status: str,
        current_step_index: int,
    ) -> None:
        workflow = self._workflow(project_id)
        workflow.overall_progress = overall_progress
        workflow.status = status
        workflow.current_step_index = current_step_index
