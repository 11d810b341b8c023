"""Tests for workflow template generation."""

import pytest

from jobtrack.catalog import Phase
from jobtrack.errors import InvalidProjectAttributes
from jobtrack.models import Project
from jobtrack.template import (
    generate_default_workflow_steps,
    generate_workflow_template,
    workflow_type_for,
)


def test_insurance_workflow_shape():
    steps = generate_default_workflow_steps(True)
    ids = [s.step_id for s in steps]
    assert len(steps) == 24
    assert ids[:5] == ["lead_1", "lead_2", "lead_3", "lead_4", "lead_5"]
    assert ids[5:10] == [f"prospect_{n}" for n in range(1, 6)]
    assert ids[10:13] == ["approved_1", "approved_2", "approved_3"]
    assert ids[13:18] == [f"execution_{n}" for n in range(1, 6)]
    assert ids[18:22] == [f"supplement_{n}" for n in range(1, 5)]
    assert ids[22:] == ["completion_1", "completion_2"]
    assert not any(i.startswith("prospect_non_insurance") for i in ids)


def test_non_insurance_workflow_shape():
    steps = generate_default_workflow_steps(False)
    ids = [s.step_id for s in steps]
    assert len(steps) == 21
    assert ids[5:7] == ["prospect_non_insurance_1", "prospect_non_insurance_2"]
    assert not any(i.startswith("prospect_") and "non_insurance" not in i for i in ids)
    prospect = [s for s in steps if s.phase_id == Phase.PROSPECT]
    assert {s.phase for s in prospect} == {"PROSPECT_NON_INSURANCE"}


@pytest.mark.parametrize(
    "insurance, last_prospect",
    [(True, "prospect_5"), (False, "prospect_non_insurance_2")],
)
def test_steps_form_a_linear_chain(insurance, last_prospect):
    steps = generate_default_workflow_steps(insurance)
    assert steps[0].dependencies == []
    for previous, step in zip(steps, steps[1:]):
        assert step.dependencies == [previous.step_id]
    by_id = {s.step_id: s for s in steps}
    assert by_id[steps[5].step_id].dependencies == ["lead_5"]
    assert by_id["approved_1"].dependencies == [last_prospect]
    assert [s.step_order for s in steps] == list(range(1, len(steps) + 1))


def test_sub_task_ids_and_counts():
    for step in generate_default_workflow_steps(True):
        assert 1 <= len(step.sub_tasks) <= 10
        assert [t.sub_task_id for t in step.sub_tasks] == [
            f"{step.step_id}_{n}" for n in range(1, len(step.sub_tasks) + 1)
        ]


def test_weights_come_from_catalog():
    weights = {s.step_id: s.weight for s in generate_default_workflow_steps(True)}
    assert weights["lead_1"] == 2
    assert weights["execution_1"] == 10
    assert weights["lead_2"] == 0


def test_generation_is_deterministic():
    first = generate_default_workflow_steps(True)
    second = generate_default_workflow_steps(True)
    assert [s.model_dump() for s in first] == [s.model_dump() for s in second]


@pytest.mark.parametrize("value", [None, "yes", 1, 0])
def test_invalid_insurance_flag_raises(value):
    with pytest.raises(InvalidProjectAttributes):
        generate_default_workflow_steps(value)


def test_template_from_project():
    project = Project(id="p1", project_type="ROOF_REPLACEMENT", is_insurance_claim=True)
    template = generate_workflow_template(project)
    assert template.workflow_type == "ROOFING"
    assert template.is_insurance_claim is True

    instance = template.to_instance("p1")
    assert instance.project_id == "p1"
    assert instance.status == "NOT_STARTED"
    assert instance.overall_progress == 0
    assert len(instance.steps) == 24
    assert not any(s.is_completed for s in instance.steps)
    assert instance.steps[0].step_name == "Input Customer Information"
    assert instance.steps[0].assigned_role == "OFFICE"
    assert instance.steps[0].sub_tasks[0].sub_task_id == "lead_1_1"


def test_template_from_camel_case_mapping():
    template = generate_workflow_template(
        {"projectType": "SIDING_INSTALLATION", "isInsuranceClaim": False}
    )
    assert template.workflow_type == "SIDING"
    assert len(template.steps) == 21


def test_template_requires_insurance_flag():
    with pytest.raises(InvalidProjectAttributes):
        generate_workflow_template(Project(id="p1", project_type="FULL_EXTERIOR"))


@pytest.mark.parametrize(
    "project_type, expected",
    [
        ("ROOF_REPLACEMENT", "ROOFING"),
        ("KITCHEN_REMODEL", "KITCHEN_REMODEL"),
        ("BATHROOM_RENOVATION", "BATHROOM_RENOVATION"),
        ("SIDING_INSTALLATION", "SIDING"),
        ("WINDOW_REPLACEMENT", "WINDOWS"),
        ("FULL_EXTERIOR", "GENERAL"),
        (None, "GENERAL"),
    ],
)
def test_workflow_type_for(project_type, expected):
    assert workflow_type_for(project_type) == expected
