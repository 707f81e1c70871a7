"""Command-line interface for the top-up report.

Provides subcommands: `report` and `check`. Each command is implemented as a
`cmd_*` function that accepts an argparse namespace and the active settings.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

from topup_report.config import Settings, get_settings, parse_log_level
from topup_report.logging_config import configure_logging
from topup_report.loaders import read_companies, read_users
from topup_report.pipeline import describe_error, run

log = logging.getLogger(__name__)


# --------------------------------------------------
# REPORT
# --------------------------------------------------
def cmd_report(args: argparse.Namespace, settings: Settings) -> bool:
    """Write the report file for the configured companies and users."""
    settings = settings.with_overrides(
        companies_path=args.companies,
        users_path=args.users,
        output_path=args.output,
    )
    return run(settings)


# --------------------------------------------------
# CHECK
# --------------------------------------------------
def cmd_check(args: argparse.Namespace, settings: Settings) -> bool:
    """Validate both record sets without crediting anyone or writing output."""
    settings = settings.with_overrides(
        companies_path=args.companies,
        users_path=args.users,
    )
    try:
        companies = read_companies(settings.companies_path)
        grouped_users = read_users(settings.users_path, companies)
    except Exception as e:
        log.error("An error occurred: %s", describe_error(e))
        return False

    unassigned = len(grouped_users.get(None, ()))
    log.info(
        "Records OK: companies=%d users=%d without_company=%d",
        len(companies),
        sum(len(g) for g in grouped_users.values()),
        unassigned,
    )
    if unassigned:
        log.warning("%d users have no Company assigned.", unassigned)
    return True


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="topup-report")
    p.add_argument("--log-level", default=None)
    p.add_argument("--log-file", type=Path, default=None)
    sub = p.add_subparsers(dest="cmd", required=True)

    p_report = sub.add_parser("report")
    p_report.add_argument("--companies", type=Path, default=None)
    p_report.add_argument("--users", type=Path, default=None)
    p_report.add_argument("--output", type=Path, default=None)

    p_check = sub.add_parser("check")
    p_check.add_argument("--companies", type=Path, default=None)
    p_check.add_argument("--users", type=Path, default=None)

    return p


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings().with_overrides(
            log_level=parse_log_level(args.log_level, "--log-level") if args.log_level else None,
            log_path=args.log_file,
        )
    except RuntimeError as e:
        parser.error(str(e))
    configure_logging(settings.log_path, settings.log_level)

    if args.cmd == "report":
        ok = cmd_report(args, settings)
    elif args.cmd == "check":
        ok = cmd_check(args, settings)
    else:
        raise SystemExit(2)

    if not ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
