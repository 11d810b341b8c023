from __future__ import annotations

from typing import Optional, Union

from ..catalog.models import PHASE_DISPLAY_NAMES, Phase
from ..constants import PROSPECT_NON_INSURANCE

_ALIASES = {
    "LEADS": Phase.LEAD,
    "PROSPECTS": Phase.PROSPECT,
    PROSPECT_NON_INSURANCE: Phase.PROSPECT,
    "APPROVE": Phase.APPROVED,
    "EXECUTE": Phase.EXECUTION,
    "EXECUTING": Phase.EXECUTION,
    "IN_PROGRESS": Phase.EXECUTION,
    "INPROGRESS": Phase.EXECUTION,
    "IN PROGRESS": Phase.EXECUTION,
    "ACTIVE": Phase.EXECUTION,
    "SUPPLEMENT": Phase.SECOND_SUPPLEMENT,
    "2ND SUPP": Phase.SECOND_SUPPLEMENT,
    "2ND-SUPP": Phase.SECOND_SUPPLEMENT,
    "2ND_SUPP": Phase.SECOND_SUPPLEMENT,
    "SECOND SUPP": Phase.SECOND_SUPPLEMENT,
    "SECOND_SUPP": Phase.SECOND_SUPPLEMENT,
    "SECOND SUPPLEMENT": Phase.SECOND_SUPPLEMENT,
    "COMPLETE": Phase.COMPLETION,
    "COMPLETED": Phase.COMPLETION,
    "FINISHED": Phase.COMPLETION,
    "DONE": Phase.COMPLETION,
}
_ALIASES.update({name.upper(): phase for phase, name in PHASE_DISPLAY_NAMES.items()})


def normalize_phase(label: Optional[str]) -> Union[Phase, str]:
    """Map a stored phase label to a :class:`Phase`.

    Empty labels map to ``Phase.LEAD``; unrecognized labels are returned
    stripped but otherwise unchanged.
    """
    if not label:
        return Phase.LEAD
    text = str(label).strip()
    upper = text.upper()
    if upper in Phase.__members__:
        return Phase[upper]
    return _ALIASES.get(upper, text)
