"""Run the full top-up report: load, associate, credit and write.

`generate_report` raises on the first error; `run` wraps it so that any
failure is logged once and reported as a False return value.
"""

from __future__ import annotations

import logging
from operator import attrgetter

from pydantic import ValidationError

from topup_report.config import Settings
from topup_report.loaders import read_companies, read_users
from topup_report.report import process_company
from topup_report.topup import apply_top_up

log = logging.getLogger(__name__)


def generate_report(settings: Settings, logger: logging.Logger = log) -> dict[int, int | float]:
    """Write the top-up report described by `settings`.

    Both record sets are fully loaded and validated before the output file is
    opened. Companies are written in ascending id order. Output already
    written stays in place if a later company fails.

    Returns:
        Mapping of company id to its accumulated top-up total.
    """
    companies = read_companies(settings.companies_path, logger)
    grouped_users = read_users(settings.users_path, companies, logger)

    totals: dict[int, int | float] = {}
    sorted_companies = sorted(companies.values(), key=attrgetter("id"))

    settings.output_path.parent.mkdir(parents=True, exist_ok=True)
    with settings.output_path.open("w", encoding="utf-8") as output_file:
        logger.info("Processing %d companies...", len(sorted_companies))
        for company in sorted_companies:
            logger.info("Processing company %s:%s", company.id, company.name)
            company_users = grouped_users.get(company.id, ())
            totals[company.id] = process_company(company, company_users, output_file, logger)

    # users without a company get no top-up, only a warning
    for user in grouped_users.get(None, ()):
        apply_top_up(user, logger)

    logger.info("Done")
    return totals


def describe_error(error: Exception) -> str:
    """Return a one-line description of `error` for the log.

    Validation errors are reduced to their messages so raw record values
    (emails included) are not written to the log.
    """
    if not isinstance(error, ValidationError):
        return str(error)
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return f"invalid {error.title} record: " + "; ".join(parts)


def run(settings: Settings, logger: logging.Logger = log) -> bool:
    """Run `generate_report`, logging any error instead of raising it.

    Returns:
        True on success, False if an error was logged.
    """
    try:
        generate_report(settings, logger)
    except Exception as e:
        logger.error("An error occurred: %s", describe_error(e))
        return False
    return True
