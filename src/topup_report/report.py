"""Per-company top-up report.

Building and writing are separate steps:

- `build_company_report` sorts and partitions a company's users, runs the
  top-up for each of them and returns an immutable `CompanyReport`.
- `emit_company_report` writes the rendered report to the output only when
  the company's total is positive; otherwise nothing is written, not even
  the header.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from operator import attrgetter
from typing import TextIO, TypeVar

from topup_report.models import Company, User
from topup_report.topup import apply_top_up, should_send_email

log = logging.getLogger(__name__)

EMAILED_LABEL = "Users Emailed"
NOT_EMAILED_LABEL = "Users Not Emailed"

T = TypeVar("T")


@dataclass(frozen=True)
class UserLine:
    """One credited user as shown in a report section."""
    last_name: str
    first_name: str
    email: str
    previous_tokens: int | float
    new_tokens: int | float

    def render(self) -> str:
        return (
            f"\t{self.last_name}, {self.first_name}, {self.email}\n"
            f"\t\tPrevious Token Balance, {self.previous_tokens}\n"
            f"\t\tNew Token Balance {self.new_tokens}\n"
        )


@dataclass(frozen=True)
class ReportSection:
    """A labeled group of credited users and the sum of their top-ups."""
    label: str
    lines: tuple[UserLine, ...]
    total: int | float

    def render(self) -> str:
        return f"{self.label}:\n" + "".join(line.render() for line in self.lines)


@dataclass(frozen=True)
class CompanyReport:
    """Rendered-on-demand report for one company.

    Attributes:
        company_id: Company id shown in the header.
        company_name: Company name shown in the header and total line.
        sections: Emailed section followed by the not-emailed section.
    """
    company_id: int
    company_name: str
    sections: tuple[ReportSection, ...]

    @property
    def total(self) -> int | float:
        return sum(s.total for s in self.sections)

    @property
    def should_emit(self) -> bool:
        return self.total > 0

    def render(self) -> str:
        return (
            "\n"
            f"Company Id: {self.company_id}\n"
            f"Company Name: {self.company_name}\n"
            + "".join(s.render() for s in self.sections)
            + f"Total amount of top ups for {self.company_name}: {self.total}\n"
        )


def partition(items: Iterable[T], predicate: Callable[[T], bool]) -> tuple[list[T], list[T]]:
    """Split `items` into (matching, non-matching), keeping relative order."""
    yes: list[T] = []
    no: list[T] = []
    for item in items:
        (yes if predicate(item) else no).append(item)
    return yes, no


def build_section(
    label: str,
    users: Iterable[User],
    logger: logging.Logger = log,
) -> ReportSection:
    """Top up every user in `users` and collect those actually credited."""
    lines: list[UserLine] = []
    total: int | float = 0
    for user in users:
        previous = user.tokens
        amount = apply_top_up(user, logger)
        if amount == 0:
            continue
        lines.append(
            UserLine(
                last_name=user.last_name,
                first_name=user.first_name,
                email=user.email,
                previous_tokens=previous,
                new_tokens=user.tokens,
            )
        )
        total += amount
    return ReportSection(label=label, lines=tuple(lines), total=total)


def build_company_report(
    company: Company,
    users: Sequence[User],
    logger: logging.Logger = log,
) -> CompanyReport:
    """Build the report for `company`, crediting each of its users once.

    Users are sorted by last name (stable, so equal names keep their input
    order) and split into emailed / not emailed before crediting.
    """
    ordered = sorted(users, key=attrgetter("last_name"))
    emailed, not_emailed = partition(ordered, should_send_email)
    return CompanyReport(
        company_id=company.id,
        company_name=company.name,
        sections=(
            build_section(EMAILED_LABEL, emailed, logger),
            build_section(NOT_EMAILED_LABEL, not_emailed, logger),
        ),
    )


def emit_company_report(
    report: CompanyReport,
    sink: TextIO,
    logger: logging.Logger = log,
) -> bool:
    """Write `report` to `sink` if its total is positive.

    Returns:
        True when the report was written, False when it was suppressed.
    """
    logger.info("Company %s top ups total: %s", report.company_name, report.total)
    if not report.should_emit:
        logger.warning(
            "Company %s had no top ups and will not show up in output file.",
            report.company_name,
        )
        return False
    sink.write(report.render())
    return True


def process_company(
    company: Company,
    users: Sequence[User],
    sink: TextIO,
    logger: logging.Logger = log,
) -> int | float:
    """Build and conditionally write the report for one company.

    Returns:
        The company's accumulated top-up total.
    """
    report = build_company_report(company, users, logger)
    emit_company_report(report, sink, logger)
    return report.total
