"""
Drip component.

Time-gated, idempotent drip email scheduler over the lead store.

Key behaviors:
- Delays are cumulative from signup, not from the previous send
- Bounded scan per tick over due leads only (oldest signup first)
- Send, then record; SENT and SKIPPED count as attempted, FAILED does not
- Recording is insert-if-absent plus counter advance in one transaction
- A failure on one lead never stops the batch

Invariants:
- The step counter only moves forward
- Unsubscribed leads are never scanned
- At most one completion record per (lead, step)
"""

from __future__ import annotations

import html
import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from src.components.drip.models import (
    DripBatchResult,
    DripCandidate,
    DripConfig,
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
from src.components.leads import build_unsubscribe_url
from src.core.ports.email import EmailPort, EmailStatus

logger = logging.getLogger(__name__)

NAME_PLACEHOLDER = "{{name}}"


# --- Pure Functions (Functional Core) ---


def is_due(
    created_at: datetime,
    last_email_sent: int,
    delay_days: Sequence[int],
    now: datetime,
) -> bool:
    """True when step last_email_sent+1 exists and its delay has elapsed."""
    if last_email_sent >= len(delay_days):
        return False
    next_step = last_email_sent + 1
    return now >= created_at + timedelta(days=delay_days[next_step - 1])


def select_due(
    candidates: Sequence[DripCandidate],
    delay_days: Sequence[int],
    now: datetime,
) -> list[DueLead]:
    """Filter scan rows down to leads whose next step is due, keeping order."""
    return [
        DueLead(
            lead_id=c.lead_id,
            email=c.email,
            name=c.name,
            unsubscribe_token=c.unsubscribe_token,
            next_step=c.last_email_sent + 1,
        )
        for c in candidates
        if is_due(c.created_at, c.last_email_sent, delay_days, now)
    ]


def find_due_leads(
    repo: DripRepoPort,
    delay_days: Sequence[int],
    now: datetime,
    batch_limit: int = 50,
) -> list[DueLead]:
    """
    Leads due for their next email, oldest signup first.

    The store filters on due-ness before applying batch_limit, so leads
    still waiting out a delay never crowd newer ones out of the batch.
    """
    candidates = repo.list_drip_candidates(delay_days, now, batch_limit)
    return select_due(candidates, delay_days, now)


def wrap_in_layout(body_html: str, unsubscribe_url: str, site_name: str, base_url: str) -> str:
    """Wrap a step body in the branded email shell with an unsubscribe footer."""
    site = html.escape(site_name)
    return (
        "<!DOCTYPE html>\n"
        '<html><head><meta charset="UTF-8">'
        '<meta name="viewport" content="width=device-width,initial-scale=1.0"></head>\n'
        '<body style="margin:0;padding:0;background:#f4f4f5;font-family:-apple-system,'
        "BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif\">\n"
        '<table width="100%" cellpadding="0" cellspacing="0" style="padding:32px 16px">'
        '<tr><td align="center">\n'
        '<table width="600" cellpadding="0" cellspacing="0" '
        'style="background:#fff;border-radius:12px;max-width:100%">\n'
        '<tr><td style="background:#6366f1;padding:24px 32px">'
        f'<a href="{html.escape(base_url)}" style="color:#fff;text-decoration:none;'
        f'font-size:20px;font-weight:700">{site}</a></td></tr>\n'
        '<tr><td style="padding:32px;color:#374151;font-size:15px;line-height:1.6">\n'
        f"{body_html}\n"
        "</td></tr>\n"
        '<tr><td style="padding:24px 32px;background:#f9fafb;text-align:center;'
        'font-size:12px;color:#9ca3af">\n'
        f"<p>{site} - Free Financial Calculators</p>\n"
        f'<p><a href="{html.escape(unsubscribe_url)}" style="color:#9ca3af">Unsubscribe</a></p>\n'
        "</td></tr>\n"
        "</table></td></tr></table>\n"
        "</body></html>"
    )


def render_step(step: DripStep, lead: DueLead, config: DripConfig) -> tuple[str, str, str]:
    """
    Render one email for a lead.

    Returns:
        Tuple of (subject, html_body, unsubscribe_url)
    """
    name = (lead.name or "").strip() or config.name_fallback
    body = step.body_html.replace(NAME_PLACEHOLDER, html.escape(name))
    unsubscribe_url = build_unsubscribe_url(
        config.base_url, lead.unsubscribe_token, config.unsubscribe_path
    )
    return (
        step.subject,
        wrap_in_layout(body, unsubscribe_url, config.site_name, config.base_url),
        unsubscribe_url,
    )


# --- DripService ---


class DripService:
    """
    Drip scheduler service.

    One call to process_due() is one tick: scan, then send and record each
    due lead sequentially.
    """

    def __init__(
        self,
        repo: DripRepoPort,
        mailer: EmailPort,
        time_port: TimePort | None = None,
        config: DripConfig | None = None,
        sequence: Sequence[DripStep] = DRIP_SEQUENCE,
    ) -> None:
        self._repo = repo
        self._mailer = mailer
        self._time = time_port
        self._config = config or DripConfig()
        if len(sequence) != self._config.total_steps:
            raise SequenceMismatchError(self._config.total_steps, len(sequence))
        self._steps = {s.step: s for s in sequence}

    @property
    def config(self) -> DripConfig:
        return self._config

    def _now_utc(self) -> datetime:
        """Get current UTC time."""
        if self._time:
            return self._time.now_utc()
        return datetime.now(UTC)

    def process_due(self) -> DripBatchResult:
        """
        Run one tick.

        Never raises: a scan failure is reported on the batch, per-lead
        failures are reported per result.
        """
        now = self._now_utc()
        batch = DripBatchResult(started_at=now)

        try:
            due = find_due_leads(
                self._repo, self._config.delay_days, now, self._config.batch_limit
            )
        except Exception as e:
            logger.exception("Drip scan failed")
            batch.error = str(e)
            return batch

        batch.scanned = len(due)
        for lead in due:
            batch.results.append(self._send_one(lead, now))
        return batch

    def _send_one(self, lead: DueLead, now: datetime) -> DripSendResult:
        step = self._steps[lead.next_step]
        subject, body, unsubscribe_url = render_step(step, lead, self._config)

        result = self._mailer.send_email(
            lead.email,
            subject,
            body,
            headers={"List-Unsubscribe": f"<{unsubscribe_url}>"},
        )
        if not result.status.attempted:
            logger.warning(
                "Drip step %d to lead %d failed: %s", lead.next_step, lead.lead_id, result.error
            )
            return DripSendResult(
                lead.lead_id, lead.next_step, SendOutcome.SEND_FAILED, result.error
            )

        try:
            self._repo.record_drip_send(lead.lead_id, lead.next_step, now)
        except Exception as e:
            # Lead stays at its step and is retried next tick
            logger.exception(
                "Failed to record drip step %d for lead %d", lead.next_step, lead.lead_id
            )
            return DripSendResult(lead.lead_id, lead.next_step, SendOutcome.RECORD_FAILED, str(e))

        outcome = SendOutcome.SKIPPED if result.status is EmailStatus.SKIPPED else SendOutcome.SENT
        return DripSendResult(lead.lead_id, lead.next_step, outcome)

    def stats(self) -> DripStats:
        return self._repo.drip_stats(self._config.total_steps)


# --- Run Handlers ---


def run_process(inp: ProcessDripInput, service: DripService) -> ProcessDripOutput:
    batch = service.process_due()
    if batch.error:
        return ProcessDripOutput(success=False, batch=batch, errors=[batch.error])
    return ProcessDripOutput(success=True, batch=batch)


def run_stats(inp: DripStatsInput, service: DripService) -> DripStatsOutput:
    return DripStatsOutput(success=True, stats=service.stats())


def run(
    inp: ProcessDripInput | DripStatsInput,
    *,
    service: DripService,
) -> ProcessDripOutput | DripStatsOutput:
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Input command
        service: Configured DripService (Required)

    Returns:
        Operation result
    """
    if isinstance(inp, ProcessDripInput):
        return run_process(inp, service)
    elif isinstance(inp, DripStatsInput):
        return run_stats(inp, service)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
