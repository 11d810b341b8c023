"""Weighted workflow progress engine."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .catalog import Phase, WorkflowCatalog, default_catalog
from .constants import UNKNOWN_PHASE_LABEL
from .contracts import (
    PhaseCounts,
    PhaseProgress,
    ProgressResult,
    ProjectProgressSnapshot,
    StepCounts,
    StepProgress,
    StepSummary,
    WeightedProgress,
)
from .inclusion import should_include
from .models import Project, StepRecord
from .utils.phases import normalize_phase

logger = logging.getLogger(__name__)


def percent(done: int, total: int) -> int:
    """Return ``done / total`` as a whole percentage, rounding halves up."""
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)


def _as_project(project: Project | Mapping[str, Any]) -> Project:
    if isinstance(project, Project):
        return project
    if isinstance(project, Mapping):
        return Project.model_validate(project)
    raise TypeError(f"Expected Project or mapping, got {type(project).__name__}")


def _steps_of(project: Project) -> Optional[List[StepRecord]]:
    if project.workflow is None:
        return None
    return project.workflow.steps


class ProgressEngine:
    """Compute progress, current phase and next steps from a workflow snapshot.

    The engine is stateless apart from the catalog it is constructed with and
    recomputes everything on each call. Methods accept a :class:`Project` or
    a mapping in the camelCase persistence shape.
    """

    def __init__(self, catalog: Optional[WorkflowCatalog] = None) -> None:
        self.catalog = catalog or default_catalog()

    # ------------------------------------------------------------------
    # Aggregation
    def weighted_progress(self, project: Project | Mapping[str, Any]) -> WeightedProgress:
        """Weighted progress over the catalog steps that apply to ``project``."""
        project = _as_project(project)
        steps = _steps_of(project)
        if steps is None:
            return WeightedProgress()

        records: Dict[str, StepRecord] = {}
        for record in steps:
            if record.step_id is not None:
                records.setdefault(record.step_id, record)

        breakdown: Dict[Phase, PhaseProgress] = {}
        total_weight = 0
        completed_weight = 0
        for phase in self.catalog.phases:
            phase_weight = 0
            phase_completed = 0
            step_progress: Dict[str, StepProgress] = {}
            for definition in self.catalog.steps_for(phase.id):
                if not should_include(definition, project):
                    continue
                record = records.get(definition.id)
                is_completed = bool(record and record.is_completed)
                phase_weight += definition.weight
                if is_completed:
                    phase_completed += definition.weight
                step_progress[definition.id] = StepProgress(
                    step_id=definition.id,
                    name=definition.display_name,
                    weight=definition.weight,
                    is_completed=is_completed,
                    is_conditional=definition.is_conditional,
                    is_dynamic=definition.dynamic,
                )

            breakdown[phase.id] = PhaseProgress(
                phase_id=phase.id,
                name=phase.display_name,
                weight=phase_weight,
                completed_weight=phase_completed,
                percentage=percent(phase_completed, phase_weight),
                steps=step_progress,
            )
            total_weight += phase_weight
            completed_weight += phase_completed

        return WeightedProgress(
            overall=percent(completed_weight, total_weight),
            phase_breakdown=breakdown,
            total_weight=total_weight,
            completed_weight=completed_weight,
        )

    @staticmethod
    def unweighted_step_counts(steps: Optional[Sequence[StepRecord]]) -> StepCounts:
        """Simple completion counts over every record, ignoring inclusion rules."""
        counts = StepCounts()
        for step in steps or []:
            counts.total += 1
            label = step.phase or UNKNOWN_PHASE_LABEL
            if step.phase and not isinstance(normalize_phase(step.phase), Phase):
                logger.warning(f"Step {step.step_id} has unrecognized phase label {step.phase!r}")
            by_phase = counts.by_phase.setdefault(label, PhaseCounts())
            by_phase.total += 1
            if step.is_completed:
                counts.completed += 1
                by_phase.completed += 1
                counts.by_status.completed += 1
            elif step.actual_start_date is not None:
                counts.by_status.in_progress += 1
            else:
                counts.by_status.not_started += 1
        return counts

    def calculate_project_progress(self, project: Project | Mapping[str, Any]) -> ProgressResult:
        """Overall and per-phase weighted progress plus unweighted step counts.

        A project without a workflow, or whose workflow has no step
        collection, yields the zero result.
        """
        project = _as_project(project)
        steps = _steps_of(project)
        if steps is None:
            return ProgressResult()
        weighted = self.weighted_progress(project)
        result = ProgressResult.combine(weighted, self.unweighted_step_counts(steps))
        logger.debug(
            f"Project {project.id}: {result.completed_weight}/{result.total_weight} = {result.overall}%"
        )
        return result

    # ------------------------------------------------------------------
    # Phase and next-step resolution
    def _current_phase(self, project: Project, progress: ProgressResult) -> Phase:
        if _steps_of(project) is None:
            return self.catalog.phases[0].id
        for phase in self.catalog.phases:
            phase_progress = progress.phase_breakdown.get(phase.id)
            if phase_progress is not None and phase_progress.percentage < 100:
                return phase.id
        return self.catalog.phases[-1].id

    def get_current_phase(self, project: Project | Mapping[str, Any]) -> Phase:
        """First phase below 100%; LEAD without a workflow, COMPLETION when all are done.

        A phase with no applicable steps reports 0% and is therefore current
        once every earlier phase is complete.
        """
        project = _as_project(project)
        return self._current_phase(project, self.calculate_project_progress(project))

    def _next_steps(self, phase: Phase, progress: ProgressResult) -> List[StepSummary]:
        phase_progress = progress.phase_breakdown.get(phase)
        if phase_progress is None:
            return []
        return [
            StepSummary(
                step_id=step.step_id,
                name=step.name,
                phase_id=phase,
                weight=step.weight,
                is_conditional=step.is_conditional,
                is_dynamic=step.is_dynamic,
            )
            for step in phase_progress.steps.values()
            if not step.is_completed
        ]

    def get_next_steps(self, project: Project | Mapping[str, Any]) -> List[StepSummary]:
        """Incomplete applicable steps of the current phase in catalog order.

        Declared step dependencies are not checked.
        """
        project = _as_project(project)
        progress = self.calculate_project_progress(project)
        return self._next_steps(self._current_phase(project, progress), progress)

    def update_project_progress(
        self, project: Project | Mapping[str, Any]
    ) -> ProjectProgressSnapshot:
        """Progress, current phase and next steps computed from one snapshot."""
        project = _as_project(project)
        progress = self.calculate_project_progress(project)
        current = self._current_phase(project, progress)
        return ProjectProgressSnapshot(
            project_id=project.id,
            progress=progress.overall,
            progress_data=progress,
            current_phase=current,
            next_steps=self._next_steps(current, progress),
        )


def calculate_project_progress(
    project: Project | Mapping[str, Any], catalog: Optional[WorkflowCatalog] = None
) -> ProgressResult:
    return ProgressEngine(catalog).calculate_project_progress(project)


def get_current_phase(
    project: Project | Mapping[str, Any], catalog: Optional[WorkflowCatalog] = None
) -> Phase:
    return ProgressEngine(catalog).get_current_phase(project)


def get_next_steps(
    project: Project | Mapping[str, Any], catalog: Optional[WorkflowCatalog] = None
) -> List[StepSummary]:
    return ProgressEngine(catalog).get_next_steps(project)
