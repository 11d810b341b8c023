"""Decide whether a catalog step counts toward a project's progress."""

from __future__ import annotations

from typing import Any

from .catalog.models import StepDefinition


def should_include(step: StepDefinition, project: Any) -> bool:
    """Return ``True`` when ``step`` applies to ``project``.

    Unconditional steps always apply. Conditional steps apply only when the
    project attribute named by the step's rule is one of the allowed values.
    A missing value falls back to the rule's ``when_missing``; an
    unrecognized value excludes the step.
    """
    if step.rule is None:
        return True
    return step.rule.matches(project)
