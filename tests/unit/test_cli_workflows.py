import asyncio

import pytest
from typer.testing import CliRunner

import jobtrack.persistence as persistence
from jobtrack.cli import app
from jobtrack.persistence import InMemoryWorkflowRepository


@pytest.fixture(autouse=True)
def _clean_env(tmp_path, monkeypatch):
    monkeypatch.setenv("JOBTRACK_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("JOBTRACK_CATALOG", raising=False)


def _setup_repo() -> InMemoryWorkflowRepository:
    repo = InMemoryWorkflowRepository()
    persistence._repository_instance = repo
    return repo


def test_workflow_create_and_list():
    repo = _setup_repo()
    runner = CliRunner()
    result = runner.invoke(
        app, ["workflow", "create", "P-100", "--project-type", "ROOF_REPLACEMENT", "--no-insurance"]
    )
    assert (
        result.exit_code == 0
    ), f"Command failed with exit code {result.exit_code}. Output: {result.stdout}"
    assert "ROOFING" in result.stdout, f"Workflow type not found in output: {result.stdout}"
    assert "21 steps" in result.stdout, f"Step count not found in output: {result.stdout}"

    project = asyncio.run(repo.get_project("P-100"))
    assert project.is_insurance_claim is False

    result = runner.invoke(app, ["workflow", "list"])
    assert result.exit_code == 0, f"Output: {result.stdout}"
    assert "P-100" in result.stdout, f"Project not found in output: {result.stdout}"
    assert "NOT_STARTED" in result.stdout, f"Status not found in output: {result.stdout}"


def test_workflow_list_empty():
    _setup_repo()
    result = CliRunner().invoke(app, ["workflow", "list"])
    assert result.exit_code == 0
    assert "No workflows found" in result.stdout


def test_workflow_complete_and_show():
    _setup_repo()
    runner = CliRunner()
    runner.invoke(app, ["workflow", "create", "P-200", "--project-type", "FULL_EXTERIOR", "--insurance"])

    result = runner.invoke(app, ["workflow", "complete", "P-200", "lead_1"])
    assert (
        result.exit_code == 0
    ), f"Command failed with exit code {result.exit_code}. Output: {result.stdout}"
    assert "Progress: 4%" in result.stdout, f"Progress not found in output: {result.stdout}"

    result = runner.invoke(app, ["workflow", "show", "P-200"])
    assert result.exit_code == 0, f"Output: {result.stdout}"
    output = result.stdout
    assert "Project P-200: 4%" in output, f"Progress not found in output: {output}"
    assert "Current phase: PROSPECT" in output, f"Phase not found in output: {output}"
    assert "prospect_1" in output, f"Next step not found in output: {output}"

    result = runner.invoke(app, ["workflow", "complete", "P-200", "lead_1", "--undo"])
    assert result.exit_code == 0, f"Output: {result.stdout}"
    assert "Progress: 0%" in result.stdout, f"Progress not found in output: {result.stdout}"


def test_workflow_complete_sub_task():
    _setup_repo()
    runner = CliRunner()
    runner.invoke(app, ["workflow", "create", "P-300", "--insurance"])
    result = runner.invoke(app, ["workflow", "complete", "P-300", "lead_2", "--sub-task", "lead_2_1"])
    assert result.exit_code == 0, f"Output: {result.stdout}"
    assert "Sub-task lead_2_1 completed" in result.stdout


def test_missing_project_and_step():
    _setup_repo()
    runner = CliRunner()
    result = runner.invoke(app, ["workflow", "show", "missing-id"])
    assert (
        result.exit_code == 1
    ), f"Expected exit code 1 for missing project, got {result.exit_code}. Output: {result.stdout}"
    assert "Project not found" in result.stdout, f"Unexpected output: {result.stdout}"

    runner.invoke(app, ["workflow", "create", "P-400", "--insurance"])
    result = runner.invoke(app, ["workflow", "complete", "P-400", "nope"])
    assert result.exit_code == 1, f"Output: {result.stdout}"
    assert "Step not found" in result.stdout, f"Unexpected output: {result.stdout}"


def test_catalog_show():
    result = CliRunner().invoke(app, ["catalog", "show"])
    assert result.exit_code == 0, f"Output: {result.stdout}"
    output = result.stdout
    assert "LEAD - Lead (weight 2)" in output, f"Unexpected output: {output}"
    assert "EXECUTION - Execution (weight 15)" in output, f"Unexpected output: {output}"
    assert "supplement_1" in output and "project_type in (ROOF_REPLACEMENT, FULL_EXTERIOR)" in output


def test_catalog_show_invalid_catalog(tmp_path, monkeypatch):
    path = tmp_path / "catalog.yaml"
    path.write_text("steps: 12\n")
    monkeypatch.setenv("JOBTRACK_CATALOG", str(path))
    result = CliRunner().invoke(app, ["catalog", "show"])
    assert result.exit_code == 1
