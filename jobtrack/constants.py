"""Shared constants."""

DEFAULT_CONFIG_PATH = "config.yaml"

# Record phase label used by the non-insurance prospect branch. Steps carrying
# it roll up into the PROSPECT phase of the catalog.
PROSPECT_NON_INSURANCE = "PROSPECT_NON_INSURANCE"

UNKNOWN_PHASE_LABEL = "Unknown"

MIN_SUB_TASKS = 1
MAX_SUB_TASKS = 10

STATUS_NOT_STARTED = "NOT_STARTED"
STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_COMPLETED = "COMPLETED"
