import pytest
from typer.testing import CliRunner

import jobtrack.persistence as persistence
from jobtrack.catalog import Phase, load_catalog
from jobtrack.cli import app
from jobtrack.config import JobtrackConfig
from jobtrack.persistence import SQLiteWorkflowRepository
from jobtrack.service import WorkflowService


@pytest.mark.asyncio
async def test_kitchen_remodel_lifecycle_survives_restart(tmp_path):
    db_path = tmp_path / "jobs.db"
    config = JobtrackConfig()
    service = WorkflowService(repository=SQLiteWorkflowRepository(db_path), config=config)
    await service.create_project("K-1", project_type="KITCHEN_REMODEL", is_insurance_claim=False)

    for step_id in ["lead_1", "prospect_non_insurance_1", "prospect_non_insurance_2", "approved_1"]:
        await service.complete_step("K-1", step_id)

    # A fresh service on the same database sees the stored state.
    restarted = WorkflowService(repository=SQLiteWorkflowRepository(db_path), config=config)
    snapshot = await restarted.get_progress("K-1")
    # Kitchen remodels skip supplement_1: 2 + 7 + 3 of 2 + 7 + 3 + 15 + 7 + 10.
    assert snapshot.progress_data.total_weight == 44
    assert snapshot.progress == 27
    assert snapshot.current_phase == Phase.EXECUTION
    assert [s.step_id for s in snapshot.next_steps] == ["execution_1", "execution_2"]

    for step_id in ["execution_1", "execution_2"]:
        await restarted.complete_step("K-1", step_id)
    snapshot = await restarted.get_progress("K-1")
    assert snapshot.current_phase == Phase.SECOND_SUPPLEMENT
    assert [s.step_id for s in snapshot.next_steps] == ["supplement_2", "supplement_3", "supplement_4"]

    workflow = await restarted.repository.get_workflow("K-1")
    assert workflow.overall_progress == 61
    assert workflow.status == "IN_PROGRESS"


@pytest.mark.asyncio
async def test_custom_catalog_drives_weights(tmp_path):
    catalog_path = tmp_path / "catalog.yaml"
    catalog_path.write_text(
        """
steps:
  - id: lead_1
    display_name: Intake
    weight: 1
    phase_id: LEAD
  - id: completion_2
    display_name: Closeout
    weight: 3
    phase_id: COMPLETION
"""
    )
    service = WorkflowService(
        repository=SQLiteWorkflowRepository(tmp_path / "jobs.db"),
        catalog=load_catalog(catalog_path),
        config=JobtrackConfig(),
    )
    project = await service.create_project("C-1", is_insurance_claim=True)
    assert project.workflow.step("lead_1") is not None

    await service.complete_step("C-1", "lead_1")
    snapshot = await service.get_progress("C-1")
    assert snapshot.progress == 25
    assert snapshot.current_phase == Phase.PROSPECT
    assert snapshot.next_steps == []


def test_cli_against_sqlite_database(tmp_path, monkeypatch):
    monkeypatch.setenv("JOBTRACK_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("JOBTRACK_DATABASE_URL", f"sqlite://{tmp_path / 'cli.db'}")
    monkeypatch.delenv("JOBTRACK_CATALOG", raising=False)
    monkeypatch.setattr(persistence, "_repository_instance", None)

    runner = CliRunner()
    result = runner.invoke(app, ["workflow", "create", "S-1", "--project-type", "FULL_EXTERIOR"])
    assert result.exit_code == 0, f"Output: {result.stdout}"
    assert "24 steps" in result.stdout, f"Unexpected output: {result.stdout}"

    for step_id in ["lead_1", "prospect_1", "prospect_2", "approved_1"]:
        result = runner.invoke(app, ["workflow", "complete", "S-1", step_id])
        assert result.exit_code == 0, f"Output: {result.stdout}"

    result = runner.invoke(app, ["workflow", "show", "S-1"])
    assert "Project S-1: 26%" in result.stdout, f"Unexpected output: {result.stdout}"
    assert "Current phase: EXECUTION" in result.stdout, f"Unexpected output: {result.stdout}"

    result = runner.invoke(app, ["workflow", "list"])
    assert "S-1\tIN_PROGRESS\t26%" in result.stdout, f"Unexpected output: {result.stdout}"
