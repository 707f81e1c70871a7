"""Load the company and user record sets and associate users with companies.

Loading is two-phase: companies are parsed first into an id-keyed mapping,
then each user record is parsed with its resolved `Company` (or None) passed
in as the `company` field. Raw records are never modified.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from topup_report.exceptions import DuplicateCompanyError, RecordSetError
from topup_report.models import Company, User

log = logging.getLogger(__name__)

INT_RE = re.compile(r"\s*[+-]?\d+\s*", re.ASCII)

UserGroups = dict[int | None, tuple[User, ...]]


def read_records(path: Path) -> list[dict[str, Any]]:
    """Read a UTF-8 JSON document holding an array of record objects.

    Args:
        path: Location of the JSON file.

    Returns:
        The list of raw record dictionaries.

    Raises:
        RecordSetError: if the document is not an array of objects.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise RecordSetError(path, "expected a JSON array of records")
    for i, rec in enumerate(data):
        if not isinstance(rec, dict):
            raise RecordSetError(path, f"record {i} is not a JSON object")
    return data


def build_companies(records: Iterable[Mapping[str, Any]]) -> dict[int, Company]:
    """Validate company records and key them by id.

    Raises:
        pydantic.ValidationError: if a record fails validation.
        DuplicateCompanyError: if two records share an id.
    """
    companies: dict[int, Company] = {}
    for rec in records:
        company = Company.model_validate(rec)
        if company.id in companies:
            raise DuplicateCompanyError(company.id)
        companies[company.id] = company
    return companies


def company_key(raw: Any) -> int | None:
    """Normalize a raw `company_id` value to an integer key.

    Integers and integer-like strings are accepted; anything else (including
    a missing value) yields None, meaning the user has no company.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and INT_RE.fullmatch(raw):
        return int(raw)
    return None


def resolve_user(
    record: Mapping[str, Any],
    companies: Mapping[int, Company],
    logger: logging.Logger = log,
) -> User:
    """Build a `User` bound to the company named by its `company_id`."""
    key = company_key(record.get("company_id"))
    company = companies.get(key) if key is not None else None
    if company is None:
        logger.debug(
            "User %s references unknown company %r.",
            record.get("id"),
            record.get("company_id"),
        )

    attrs = {k: v for k, v in record.items() if k != "company_id"}
    attrs["company"] = company
    return User.model_validate(attrs)


def group_users(
    records: Iterable[Mapping[str, Any]],
    companies: Mapping[int, Company],
    logger: logging.Logger = log,
) -> UserGroups:
    """Validate user records and group them by their resolved company id.

    Users without a known company are grouped under the ``None`` key. Each
    group keeps the input order.
    """
    buckets: dict[int | None, list[User]] = {}
    for rec in records:
        user = resolve_user(rec, companies, logger)
        key = user.company.id if user.company is not None else None
        buckets.setdefault(key, []).append(user)
    return {k: tuple(v) for k, v in buckets.items()}


def read_companies(path: Path, logger: logging.Logger = log) -> dict[int, Company]:
    """Read and validate the companies file."""
    logger.info("Reading companies file '%s'.", path)
    return build_companies(read_records(path))


def read_users(
    path: Path,
    companies: Mapping[int, Company],
    logger: logging.Logger = log,
) -> UserGroups:
    """Read and validate the users file, grouped by company id."""
    logger.info("Reading users file '%s'.", path)
    return group_users(read_records(path), companies, logger)
