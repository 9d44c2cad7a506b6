"""
Leads component.

Functional core for lead capture and the admin lead views.

Key behaviors:
- Emails are trimmed and lower-cased before any lookup
- First capture issues a 64-char hex unsubscribe token (secrets.token_hex)
- Repeat capture merges only non-empty fields and reports is_new=False
- Unsubscribe is idempotent and only clears the subscribed flag
- Delete is the only hard delete and is admin-only

Invariants:
- One lead per email
- Unsubscribe tokens are never reissued for an existing lead
"""

from __future__ import annotations

import csv
import io
import re
import secrets
from collections.abc import Iterable
from datetime import UTC, datetime

from src.components.leads.models import (
    CaptureLeadInput,
    CaptureLeadOutput,
    DeleteLeadInput,
    DeleteLeadOutput,
    ExportLeadsInput,
    ExportLeadsOutput,
    Lead,
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

# --- Email Validation Regex (RFC 5322 simplified) ---

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

MAX_EMAIL_LENGTH = 254
TOKEN_LENGTH = 64
TOKEN_REGEX = re.compile(r"^[0-9a-f]{64}$")

CSV_HEADER = ["email", "name", "income_range", "source", "subscribed", "created_at"]


def _now_utc(time_port: TimePort | None) -> datetime:
    return time_port.now_utc() if time_port else datetime.now(UTC)


# --- Pure Functions (Functional Core) ---


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str) -> list[LeadValidationError]:
    """Validate a normalized email. Returns an empty list when valid."""
    if not email:
        return [LeadValidationError("INVALID_EMAIL", "Email is required", "email")]
    if len(email) > MAX_EMAIL_LENGTH:
        return [LeadValidationError("INVALID_EMAIL", "Email address is too long", "email")]
    if not EMAIL_REGEX.match(email):
        return [LeadValidationError("INVALID_EMAIL", "Please enter a valid email address", "email")]
    return []


def generate_unsubscribe_token(num_bytes: int = 32) -> str:
    """Cryptographically random hex token (2 chars per byte)."""
    return secrets.token_hex(num_bytes)


def is_valid_token(token: str) -> bool:
    return len(token) == TOKEN_LENGTH and bool(TOKEN_REGEX.match(token))


def build_unsubscribe_url(base_url: str, token: str, path: str = "/unsubscribe") -> str:
    """Build the public unsubscribe link for a lead."""
    return f"{base_url.rstrip('/')}{path}/{token}"


def clean_optional(value: str | None) -> str | None:
    """Trim a free-text field; blank means "not provided"."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def leads_to_csv(leads: Iterable[Lead]) -> tuple[str, int]:
    """
    Render leads as CSV text.

    Columns: email,name,income_range,source,subscribed,created_at.
    Subscribed renders as yes/no; the csv module handles quoting.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    count = 0
    for lead in leads:
        writer.writerow(
            [
                lead.email,
                lead.name or "",
                lead.income_range or "",
                lead.source or "",
                "yes" if lead.subscribed else "no",
                lead.created_at.isoformat() if lead.created_at else "",
            ]
        )
        count += 1
    return buf.getvalue(), count


# --- Run Handlers ---


def run_capture(
    inp: CaptureLeadInput,
    repo: LeadRepoPort,
    *,
    config: LeadsConfig | None = None,
    time_port: TimePort | None = None,
) -> CaptureLeadOutput:
    """
    Handle lead capture (Atomic Handler).
    """
    cfg = config or LeadsConfig()
    email = normalize_email(inp.email)

    errors = validate_email(email)
    if errors:
        return CaptureLeadOutput(success=False, errors=errors)

    lead_id, is_new = repo.upsert_lead(
        email=email,
        name=clean_optional(inp.name),
        income_range=clean_optional(inp.income_range),
        source=clean_optional(inp.source),
        unsubscribe_token=generate_unsubscribe_token(cfg.token_bytes),
        now=_now_utc(time_port),
        default_source=cfg.default_source,
    )
    return CaptureLeadOutput(success=True, lead_id=lead_id, is_new=is_new)


def run_unsubscribe(
    inp: UnsubscribeInput,
    repo: LeadRepoPort,
    *,
    time_port: TimePort | None = None,
) -> UnsubscribeOutput:
    """
    Handle unsubscribe link (Atomic Handler).

    Already-unsubscribed leads get an idempotent success.
    """
    if not is_valid_token(inp.token):
        return UnsubscribeOutput(
            success=False,
            errors=[LeadValidationError("INVALID_TOKEN", "Invalid unsubscribe link", "token")],
        )

    found = repo.unsubscribe(inp.token, _now_utc(time_port))
    if found is None:
        return UnsubscribeOutput(
            success=False,
            errors=[LeadValidationError("NOT_FOUND", "Invalid or expired unsubscribe link", "token")],
        )

    email, was_subscribed = found
    return UnsubscribeOutput(success=True, email=email, already_unsubscribed=not was_subscribed)


def run_list(
    inp: ListLeadsInput,
    repo: LeadRepoPort,
    *,
    config: LeadsConfig | None = None,
) -> ListLeadsOutput:
    cfg = config or LeadsConfig()
    page = max(1, inp.page)
    page_size = inp.page_size or cfg.page_size
    page_size = max(1, min(page_size, cfg.max_page_size))

    leads, total = repo.search(inp.search.strip(), limit=page_size, offset=(page - 1) * page_size)
    return ListLeadsOutput(
        success=True,
        page=LeadPage(leads=leads, total=total, page=page, page_size=page_size),
    )


def run_toggle(
    inp: ToggleSubscriptionInput,
    repo: LeadRepoPort,
    *,
    time_port: TimePort | None = None,
) -> ToggleSubscriptionOutput:
    """Flip a lead's subscribed flag (admin)."""
    lead = repo.get_by_id(inp.lead_id)
    if lead is None:
        return ToggleSubscriptionOutput(
            success=False,
            errors=[LeadValidationError("NOT_FOUND", f"Lead {inp.lead_id} not found", "lead_id")],
        )

    new_value = not lead.subscribed
    repo.set_subscribed(lead.id, new_value, _now_utc(time_port))
    return ToggleSubscriptionOutput(success=True, subscribed=new_value)


def run_delete(inp: DeleteLeadInput, repo: LeadRepoPort) -> DeleteLeadOutput:
    if not repo.delete(inp.lead_id):
        return DeleteLeadOutput(
            success=False,
            errors=[LeadValidationError("NOT_FOUND", f"Lead {inp.lead_id} not found", "lead_id")],
        )
    return DeleteLeadOutput(success=True)


def run_export(inp: ExportLeadsInput, repo: LeadRepoPort) -> ExportLeadsOutput:
    csv_text, count = leads_to_csv(repo.list_all())
    return ExportLeadsOutput(success=True, csv_text=csv_text, row_count=count)


def get_stats(repo: LeadRepoPort, *, time_port: TimePort | None = None) -> LeadStats:
    return repo.stats(_now_utc(time_port))


def get_recent(repo: LeadRepoPort, *, config: LeadsConfig | None = None) -> list[Lead]:
    cfg = config or LeadsConfig()
    return repo.recent(cfg.recent_limit)


# --- Component Entry Point ---


def run(
    inp: CaptureLeadInput
    | UnsubscribeInput
    | ListLeadsInput
    | ToggleSubscriptionInput
    | DeleteLeadInput
    | ExportLeadsInput,
    *,
    repo: LeadRepoPort,
    config: LeadsConfig | None = None,
    time_port: TimePort | None = None,
) -> (
    CaptureLeadOutput
    | UnsubscribeOutput
    | ListLeadsOutput
    | ToggleSubscriptionOutput
    | DeleteLeadOutput
    | ExportLeadsOutput
):
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Input command
        repo: Lead repository port (Required)
        config: Configuration (Optional)
        time_port: Clock (Optional, defaults to system UTC)

    Returns:
        Operation result
    """
    if isinstance(inp, CaptureLeadInput):
        return run_capture(inp, repo, config=config, time_port=time_port)
    elif isinstance(inp, UnsubscribeInput):
        return run_unsubscribe(inp, repo, time_port=time_port)
    elif isinstance(inp, ListLeadsInput):
        return run_list(inp, repo, config=config)
    elif isinstance(inp, ToggleSubscriptionInput):
        return run_toggle(inp, repo, time_port=time_port)
    elif isinstance(inp, DeleteLeadInput):
        return run_delete(inp, repo)
    elif isinstance(inp, ExportLeadsInput):
        return run_export(inp, repo)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
