"""Tests for catalog models and YAML loading."""

import pytest
from pydantic import ValidationError

from jobtrack.catalog import (
    ConditionalRule,
    Phase,
    StepDefinition,
    StepTemplate,
    WorkflowCatalog,
    default_catalog,
    get_catalog,
    load_catalog,
)
from jobtrack.catalog.default import DEFAULT_TEMPLATES
from jobtrack.config import JobtrackConfig
from jobtrack.errors import CatalogError


def test_default_catalog_is_shared_and_frozen():
    catalog = default_catalog()
    assert catalog is default_catalog()
    assert [p.id for p in catalog.phases] == list(Phase)
    with pytest.raises(ValidationError):
        catalog.steps = ()


def test_default_catalog_rules():
    rules = default_catalog().conditional_rules()
    assert rules["prospect_1"].allowed == (True,)
    assert rules["prospect_non_insurance_1"].allowed == (False,)
    assert set(rules["supplement_2"].allowed) == {
        "ROOF_REPLACEMENT",
        "FULL_EXTERIOR",
        "KITCHEN_REMODEL",
    }
    assert "lead_1" not in rules


def test_catalog_rejects_duplicate_step_ids():
    step = StepDefinition(id="lead_1", display_name="Lead", weight=1, phase_id=Phase.LEAD)
    with pytest.raises(ValidationError):
        WorkflowCatalog(steps=(step, step), templates=DEFAULT_TEMPLATES)


def test_catalog_rejects_non_positive_weight():
    with pytest.raises(ValidationError):
        StepDefinition(id="lead_1", display_name="Lead", weight=0, phase_id=Phase.LEAD)


def test_catalog_rejects_reordered_phases():
    phases = tuple(reversed(default_catalog().phases))
    with pytest.raises(ValidationError):
        WorkflowCatalog(phases=phases, templates=DEFAULT_TEMPLATES)


def test_step_template_sub_task_limits():
    with pytest.raises(ValidationError):
        StepTemplate(step_id="x", name="X", default_role="OFFICE", sub_tasks=())
    with pytest.raises(ValidationError):
        StepTemplate(
            step_id="x",
            name="X",
            default_role="OFFICE",
            sub_tasks=tuple(f"task {n}" for n in range(11)),
        )


def test_rule_matching_is_type_strict():
    rule = ConditionalRule(attribute="is_insurance_claim", allowed=(True,))

    class Obj:
        def __init__(self, value):
            self.is_insurance_claim = value

    assert rule.matches(Obj(True))
    assert not rule.matches(Obj(1))
    assert not rule.matches(Obj(None))
    assert not rule.matches(object())


def test_load_catalog_from_yaml(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        """
steps:
  - id: lead_1
    display_name: Intake
    weight: 5
    phase_id: LEAD
  - id: execution_1
    display_name: Installation
    weight: 20
    phase_id: EXECUTION
    dynamic: true
  - id: supplement_1
    display_name: Supplement
    weight: 4
    phase_id: SECOND_SUPPLEMENT
    rule:
      attribute: project_type
      allowed: [ROOF_REPLACEMENT]
"""
    )
    catalog = load_catalog(path)
    assert [s.id for s in catalog.steps] == ["lead_1", "execution_1", "supplement_1"]
    assert catalog.step("lead_1").weight == 5
    assert catalog.step("execution_1").dynamic is True
    assert catalog.step("supplement_1").rule.allowed == ("ROOF_REPLACEMENT",)
    assert catalog.templates == DEFAULT_TEMPLATES


def test_load_catalog_invalid_content(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        """
steps:
  - id: lead_1
    display_name: Intake
    weight: -1
    phase_id: LEAD
"""
    )
    with pytest.raises(CatalogError):
        load_catalog(path)


def test_load_catalog_not_a_mapping(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(CatalogError):
        load_catalog(path)


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "missing.yaml")


def test_get_catalog_uses_config(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        """
steps:
  - id: lead_1
    display_name: Intake
    weight: 1
    phase_id: LEAD
"""
    )
    assert get_catalog() is default_catalog()
    assert get_catalog(JobtrackConfig()) is default_catalog()
    catalog = get_catalog(JobtrackConfig(catalog_path=str(path)))
    assert [s.id for s in catalog.steps] == ["lead_1"]


def test_rule_falls_back_to_when_missing():
    rule = ConditionalRule(attribute="is_insurance_claim", allowed=(True,), when_missing=True)

    class Obj:
        def __init__(self, value):
            self.is_insurance_claim = value

    assert rule.matches(Obj(None))
    assert rule.matches(object())
    assert not rule.matches(Obj(False))
