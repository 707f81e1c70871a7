"""Errors raised by the top-up pipeline.

Schema problems in individual records surface as `pydantic.ValidationError`
from `topup_report.models`; the classes below cover the record-set level.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class TopUpReportError(Exception):
    """Base class for errors raised by this package."""


class DuplicateCompanyError(TopUpReportError):
    """Two company records share the same id."""

    def __init__(self, company_id: Any):
        self.company_id = company_id
        super().__init__(f"Duplicate company id found: {company_id}")


class RecordSetError(TopUpReportError):
    """An input document is not a JSON array of record objects."""

    def __init__(self, path: Path | str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid record set '{path}': {reason}")
