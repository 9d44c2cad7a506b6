import argparse
import logging
import os
import sys
from pathlib import Path

from src.adapters.clock import SystemClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.smtp_email import SMTPEmailAdapter
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import SQLiteLeadRepo
from src.app_shell.config import ConfigError, validate_ops_rules
from src.components.drip import DripConfig, DripService
from src.components.leads import ExportLeadsInput
from src.components.leads import run as run_leads
from src.rules.loader import load_rules
from src.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

DATA_DIR = Path(os.environ.get("FINSITE_DATA_DIR", "./data"))
DB_PATH = str(DATA_DIR / "finsite.db")
RULES_PATH = Path(os.environ.get("FINSITE_RULES_PATH", "rules.yaml"))
MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


def get_rules() -> Rules:
    try:
        return load_rules(RULES_PATH)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)


def handle_check_config(args: argparse.Namespace) -> None:
    rules = get_rules()
    try:
        validate_ops_rules(rules, DATA_DIR)
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)
    print(f"Rules OK: {rules.project.slug} v{rules.project.rules_version}")


def handle_migrate(args: argparse.Namespace) -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(DB_PATH, str(MIGRATIONS_DIR)).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_drip_tick(args: argparse.Namespace) -> None:
    rules = get_rules()
    smtp = SMTPEmailAdapter()
    mailer = smtp if smtp.is_configured() and not args.log_only else DevEmailAdapter()
    config = DripConfig(
        delay_days=tuple(rules.drip.delay_days),
        batch_limit=rules.drip.batch_limit,
        site_name=rules.site.name,
        base_url=os.environ.get("BASE_URL", "") or rules.site.base_url,
    )
    service = DripService(SQLiteLeadRepo(DB_PATH), mailer, SystemClock(), config)

    batch = service.process_due()
    if batch.error:
        logger.error("Drip scan failed: %s", batch.error)
        sys.exit(1)
    print(f"Scanned {batch.scanned}, sent {batch.sent}, failed {batch.failed}.")


def handle_export_leads(args: argparse.Namespace) -> None:
    result = run_leads(ExportLeadsInput(), repo=SQLiteLeadRepo(DB_PATH))
    if args.output:
        Path(args.output).write_text(result.csv_text)
        print(f"Exported {result.row_count} leads to {args.output}")
    else:
        sys.stdout.write(result.csv_text)


def main() -> None:
    parser = argparse.ArgumentParser(description="Finsite CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("check-config", help="Validate rules.yaml and the environment")
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    tick_parser = subparsers.add_parser("drip-tick", help="Run one drip scheduler tick")
    tick_parser.add_argument(
        "--log-only",
        action="store_true",
        help="Log emails instead of sending them (steps are still recorded)",
    )

    export_parser = subparsers.add_parser("export-leads", help="Write all leads as CSV")
    export_parser.add_argument("--output", "-o", help="File path (default: stdout)")

    args = parser.parse_args()

    handlers = {
        "check-config": handle_check_config,
        "migrate": handle_migrate,
        "drip-tick": handle_drip_tick,
        "export-leads": handle_export_leads,
    }
    handlers[args.command](args)


if __name__ == "__main__":
    main()
