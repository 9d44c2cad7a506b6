"""
Drip component.

Drip email sequence scheduler.
"""

from src.components.drip.component import (
    NAME_PLACEHOLDER,
    DripService,
    find_due_leads,
    is_due,
    render_step,
    run,
    run_process,
    run_stats,
    select_due,
    wrap_in_layout,
)
from src.components.drip.models import (
    DEFAULT_DELAY_DAYS,
    DripBatchResult,
    DripCandidate,
    DripConfig,
    DripError,
    DripSendResult,
    DripStats,
    DripStatsInput,
    DripStatsOutput,
    DripStep,
    DueLead,
    ProcessDripInput,
    ProcessDripOutput,
    SendOutcome,
    SequenceMismatchError,
)
from src.components.drip.ports import DripRepoPort, TimePort
from src.components.drip.sequence import DRIP_SEQUENCE

__all__ = [
    # Component
    "run",
    "run_process",
    "run_stats",
    "DripService",
    "find_due_leads",
    "select_due",
    "is_due",
    "render_step",
    "wrap_in_layout",
    "NAME_PLACEHOLDER",
    "DRIP_SEQUENCE",
    # Models
    "DEFAULT_DELAY_DAYS",
    "DripStep",
    "DripCandidate",
    "DueLead",
    "DripConfig",
    "DripSendResult",
    "DripBatchResult",
    "DripStats",
    "SendOutcome",
    "ProcessDripInput",
    "ProcessDripOutput",
    "DripStatsInput",
    "DripStatsOutput",
    # Errors
    "DripError",
    "SequenceMismatchError",
    # Ports
    "DripRepoPort",
    "TimePort",
]
