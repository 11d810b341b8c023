"""Workflow service coordinating the generator, the engine and persistence."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import DefaultDict, List, Optional

from .catalog import WorkflowCatalog, get_catalog
from .config import JobtrackConfig, load_config
from .constants import STATUS_COMPLETED, STATUS_IN_PROGRESS, STATUS_NOT_STARTED
from .contracts import ProjectProgressSnapshot
from .errors import StepNotFound, WorkflowNotFound
from .models import Project, StepRecord, SubTaskRecord, WorkflowInstance
from .persistence import WorkflowRepository, get_repository
from .progress import ProgressEngine
from .template import generate_workflow_template

logger = logging.getLogger(__name__)


def workflow_status(overall_progress: int, steps: List[StepRecord]) -> str:
    """Derive the stored workflow status from progress and step records."""
    if overall_progress >= 100:
        return STATUS_COMPLETED
    if any(step.is_completed for step in steps):
        return STATUS_IN_PROGRESS
    return STATUS_NOT_STARTED


def current_step_index(steps: List[StepRecord]) -> int:
    """Index of the first incomplete step by ``step_order``; ``len(steps)`` when all are done."""
    ordered = sorted(steps, key=lambda s: s.step_order)
    for index, step in enumerate(ordered):
        if not step.is_completed:
            return index
    return len(ordered)


class WorkflowService:
    """Create project workflows and keep their stored progress current.

    Completion updates for one project are serialized with a per-project
    ``asyncio.Lock`` so that the mark, reload, recompute and store sequence
    never interleaves with another update to the same workflow.
    """

    def __init__(
        self,
        repository: Optional[WorkflowRepository] = None,
        catalog: Optional[WorkflowCatalog] = None,
        config: Optional[JobtrackConfig] = None,
    ) -> None:
        self.config = config or load_config()
        self.repository = repository if repository is not None else get_repository(config=self.config)
        self.catalog = catalog or get_catalog(self.config)
        self.engine = ProgressEngine(self.catalog)
        self._locks: DefaultDict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def _require_project(self, project_id: str) -> Project:
        project = await self.repository.get_project(project_id)
        if project is None:
            raise WorkflowNotFound(f"Project {project_id} not found")
        return project

    async def create_project(
        self,
        project_id: str,
        project_type: Optional[str] = None,
        is_insurance_claim: Optional[bool] = None,
    ) -> Project:
        """Persist a project and generate its workflow instance.

        ``is_insurance_claim`` falls back to ``default_insurance_claim`` from
        configuration when not given. An existing workflow is left in place.
        """
        if is_insurance_claim is None:
            is_insurance_claim = self.config.default_insurance_claim
        project = Project(
            id=project_id,
            project_type=project_type,
            is_insurance_claim=is_insurance_claim,
        )
        await self.repository.save_project(project)
        await self.initialize_workflow(project_id)
        return await self._require_project(project_id)

    async def initialize_workflow(self, project_id: str) -> WorkflowInstance:
        """Return the project's workflow, generating it first if it is missing.

        Raises:
            WorkflowNotFound: If the project does not exist.
            InvalidProjectAttributes: If the stored project cannot be used to
                generate a workflow.
        """
        async with self._locks[project_id]:
            project = await self._require_project(project_id)
            if project.workflow is not None:
                return project.workflow
            if project.is_insurance_claim is None:
                project.is_insurance_claim = self.config.default_insurance_claim
                await self.repository.save_project(project)
            template = generate_workflow_template(project, self.catalog)
            workflow = template.to_instance(project_id)
            await self.repository.create_workflow(workflow)
            logger.info(
                f"Created {workflow.workflow_type} workflow for project {project_id} "
                f"with {len(workflow.steps or [])} steps"
            )
            return workflow

    async def _refresh(self, project_id: str) -> ProjectProgressSnapshot:
        project = await self._require_project(project_id)
        snapshot = self.engine.update_project_progress(project)
        steps = (project.workflow.steps if project.workflow else None) or []
        status = workflow_status(snapshot.progress, steps)
        await self.repository.update_progress(
            project_id,
            overall_progress=snapshot.progress,
            status=status,
            current_step_index=current_step_index(steps),
        )
        logger.info(
            f"Project {project_id} progress {snapshot.progress}% ({status}), "
            f"current phase {snapshot.current_phase.value}"
        )
        return snapshot

    async def complete_step(
        self, project_id: str, step_id: str, completed: bool = True
    ) -> StepRecord:
        """Mark a step completed (or not) and store the recomputed progress.

        Completing a step also completes all of its sub-tasks.

        Raises:
            WorkflowNotFound: If the project or its workflow does not exist.
            StepNotFound: If ``step_id`` is not part of the workflow.
        """
        await self.initialize_workflow(project_id)
        async with self._locks[project_id]:
            try:
                step = await self.repository.mark_step_completed(project_id, step_id, completed)
            except StepNotFound:
                logger.warning(f"Unknown step {step_id} for project {project_id}")
                raise
            logger.info(
                f"Step {step_id} of project {project_id} marked "
                f"{'completed' if completed else 'incomplete'}"
            )
            await self._refresh(project_id)
            return step

    async def complete_sub_task(
        self,
        project_id: str,
        step_id: str,
        sub_task_id: str,
        completed: bool = True,
    ) -> SubTaskRecord:
        """Mark a single sub-task and store the recomputed progress."""
        await self.initialize_workflow(project_id)
        async with self._locks[project_id]:
            try:
                sub_task = await self.repository.mark_sub_task_completed(
                    project_id, step_id, sub_task_id, completed
                )
            except StepNotFound:
                logger.warning(
                    f"Unknown sub-task {sub_task_id} of step {step_id} for project {project_id}"
                )
                raise
            await self._refresh(project_id)
            return sub_task

    async def get_progress(self, project_id: str) -> ProjectProgressSnapshot:
        """Progress, current phase and next steps of a project.

        The workflow is created on first access if the project has none.
        """
        await self.initialize_workflow(project_id)
        project = await self._require_project(project_id)
        return self.engine.update_project_progress(project)

    async def list_projects(self) -> List[Project]:
        return await self.repository.list_projects()

    async def delete_project(self, project_id: str) -> None:
        """Delete a project with its workflow and release its lock."""
        async with self._locks[project_id]:
            await self.repository.delete_project(project_id)
        self._locks.pop(project_id, None)
        logger.info(f"Deleted project {project_id}")
