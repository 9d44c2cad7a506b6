"""
Leads component.

Lead capture, unsubscribe and admin lead management.
"""

from src.components.leads.component import (
    CSV_HEADER,
    EMAIL_REGEX,
    build_unsubscribe_url,
    clean_optional,
    generate_unsubscribe_token,
    get_recent,
    get_stats,
    is_valid_token,
    leads_to_csv,
    normalize_email,
    run,
    run_capture,
    run_delete,
    run_export,
    run_list,
    run_toggle,
    run_unsubscribe,
    validate_email,
)
from src.components.leads.models import (
    CaptureLeadInput,
    CaptureLeadOutput,
    DeleteLeadInput,
    DeleteLeadOutput,
    ExportLeadsInput,
    ExportLeadsOutput,
    Lead,
    LeadError,
    LeadNotFoundError,
    LeadPage,
    LeadsConfig,
    LeadStats,
    LeadValidationError,
    ListLeadsInput,
    ListLeadsOutput,
    ToggleSubscriptionInput,
    ToggleSubscriptionOutput,
    UnsubscribeInput,
    UnsubscribeOutput,
)
from src.components.leads.ports import LeadRepoPort, TimePort

__all__ = [
    # Component
    "run",
    "run_capture",
    "run_unsubscribe",
    "run_list",
    "run_toggle",
    "run_delete",
    "run_export",
    "get_stats",
    "get_recent",
    "normalize_email",
    "validate_email",
    "generate_unsubscribe_token",
    "is_valid_token",
    "build_unsubscribe_url",
    "clean_optional",
    "leads_to_csv",
    "EMAIL_REGEX",
    "CSV_HEADER",
    # Models
    "Lead",
    "LeadStats",
    "LeadPage",
    "LeadsConfig",
    "CaptureLeadInput",
    "CaptureLeadOutput",
    "UnsubscribeInput",
    "UnsubscribeOutput",
    "ListLeadsInput",
    "ListLeadsOutput",
    "ToggleSubscriptionInput",
    "ToggleSubscriptionOutput",
    "DeleteLeadInput",
    "DeleteLeadOutput",
    "ExportLeadsInput",
    "ExportLeadsOutput",
    "LeadValidationError",
    # Errors
    "LeadError",
    "LeadNotFoundError",
    # Ports
    "LeadRepoPort",
    "TimePort",
]
