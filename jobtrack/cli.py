"""Command line interface for project workflows."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import typer

from jobtrack.catalog import get_catalog
from jobtrack.config import load_config
from jobtrack.errors import CatalogError, StepNotFound, WorkflowNotFound
from jobtrack.persistence import get_repository
from jobtrack.service import WorkflowService

app = typer.Typer(help="CLI for weighted project workflows")

# Command groups
catalog_app = typer.Typer(help="Commands for inspecting the workflow catalog")
workflow_app = typer.Typer(help="Commands for managing project workflows")

app.add_typer(catalog_app, name="catalog")
app.add_typer(workflow_app, name="workflow")


@app.callback()
def main() -> None:
    """jobtrack CLI entry point."""
    config = load_config()
    logging.basicConfig(level=config.log_level)


def _service() -> WorkflowService:
    config = load_config()
    try:
        return WorkflowService(repository=get_repository(), config=config)
    except CatalogError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1)


@catalog_app.command("show")
def catalog_show() -> None:
    """
    Show phases and weighted steps of the active catalog.

    Conditional steps list the project attribute and the values that include
    them; dynamic steps are flagged.

    Example:
        jobtrack catalog show
        # Output: LEAD - Lead (weight 2)
        #           lead_1: Input Customer Information [2]
    """
    try:
        catalog = get_catalog(load_config())
    except CatalogError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1)

    rules = catalog.conditional_rules()
    for phase in catalog.phases:
        steps = catalog.steps_for(phase.id)
        typer.echo(
            f"{phase.id.value} - {phase.display_name} (weight {sum(s.weight for s in steps)})"
        )
        for step in steps:
            line = f"  {step.id}: {step.display_name} [{step.weight}]"
            rule = rules.get(step.id)
            if rule is not None:
                allowed = ", ".join(str(a) for a in rule.allowed)
                line += f" when {rule.attribute} in ({allowed})"
            if step.dynamic:
                line += " (dynamic)"
            typer.echo(line)


@workflow_app.command("create")
def workflow_create(
    project_id: str,
    project_type: Optional[str] = typer.Option(None, help="Project type, e.g. ROOF_REPLACEMENT"),
    insurance: Optional[bool] = typer.Option(
        None,
        "--insurance/--no-insurance",
        help="Whether the project is an insurance claim (default from config)",
    ),
) -> None:
    """
    Create a project and generate its workflow.

    Example:
        jobtrack workflow create P-100 --project-type FULL_EXTERIOR --insurance
        # Output: Created workflow GENERAL for P-100 with 24 steps
    """
    service = _service()
    project = asyncio.run(
        service.create_project(project_id, project_type=project_type, is_insurance_claim=insurance)
    )
    workflow = project.workflow
    typer.echo(
        f"Created workflow {workflow.workflow_type} for {project_id} "
        f"with {len(workflow.steps or [])} steps"
    )


@workflow_app.command("list")
def workflow_list() -> None:
    """
    List all projects with their stored workflow status and progress.

    Example:
        jobtrack workflow list
        # Output: P-100    IN_PROGRESS    26%
    """
    projects = asyncio.run(_service().list_projects())
    if not projects:
        typer.echo("No workflows found")
        return
    for project in projects:
        if project.workflow is None:
            typer.echo(f"{project.id}\t(no workflow)")
            continue
        typer.echo(
            f"{project.id}\t{project.workflow.status}\t{project.workflow.overall_progress}%"
        )


@workflow_app.command("show")
def workflow_show(project_id: str) -> None:
    """
    Show weighted progress, current phase and next steps of a project.

    Example:
        jobtrack workflow show P-100
        # Output: Project P-100: 26%
        #         Current phase: PROSPECT
        #         - LEAD Lead: 100% (2/2)
        #         Next steps:
        #         - prospect_1: Site Inspection
    """
    service = _service()
    try:
        snapshot = asyncio.run(service.get_progress(project_id))
    except WorkflowNotFound:
        typer.echo("Project not found")
        raise typer.Exit(code=1)

    data = snapshot.progress_data
    typer.echo(f"Project {project_id}: {snapshot.progress}%")
    typer.echo(f"Current phase: {snapshot.current_phase.value}")
    for phase in data.phase_breakdown.values():
        typer.echo(
            f"- {phase.phase_id.value} {phase.name}: {phase.percentage}% "
            f"({phase.completed_weight}/{phase.weight})"
        )
    typer.echo(
        f"Steps: {data.step_breakdown.completed}/{data.step_breakdown.total} completed"
    )
    if snapshot.next_steps:
        typer.echo("Next steps:")
        for step in snapshot.next_steps:
            typer.echo(f"- {step.step_id}: {step.name}")


@workflow_app.command("complete")
def workflow_complete(
    project_id: str,
    step_id: str,
    sub_task: Optional[str] = typer.Option(None, "--sub-task", help="Complete a single sub-task"),
    undo: bool = typer.Option(False, "--undo", help="Mark as not completed instead"),
) -> None:
    """
    Mark a step or one of its sub-tasks completed and refresh progress.

    Example:
        jobtrack workflow complete P-100 lead_1
        jobtrack workflow complete P-100 lead_2 --sub-task lead_2_1
        jobtrack workflow complete P-100 lead_1 --undo
    """
    service = _service()

    async def _complete():
        if sub_task:
            await service.complete_sub_task(project_id, step_id, sub_task, not undo)
        else:
            await service.complete_step(project_id, step_id, not undo)
        return await service.get_progress(project_id)

    try:
        snapshot = asyncio.run(_complete())
    except WorkflowNotFound:
        typer.echo("Project not found")
        raise typer.Exit(code=1)
    except StepNotFound:
        typer.echo("Step not found")
        raise typer.Exit(code=1)

    target = f"Sub-task {sub_task}" if sub_task else f"Step {step_id}"
    state = "reopened" if undo else "completed"
    typer.echo(f"{target} {state}. Progress: {snapshot.progress}%")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
