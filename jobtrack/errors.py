"""Exceptions raised by jobtrack."""

from __future__ import annotations


class InvalidProjectAttributes(ValueError):
    """Project attributes required to generate a workflow are missing or invalid."""


class CatalogError(ValueError):
    """The workflow catalog could not be loaded or failed validation."""


class WorkflowNotFound(LookupError):
    """No project or workflow instance exists for the given project id."""


class StepNotFound(LookupError):
    """A step or sub-task id does not exist in the workflow instance."""
