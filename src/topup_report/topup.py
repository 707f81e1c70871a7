"""Email eligibility and token top-up rules for a single user."""

from __future__ import annotations

import logging

from topup_report.models import User

log = logging.getLogger(__name__)


def should_send_email(user: User) -> bool:
    """Return True when both the user and their company allow email.

    A user without a company is never emailed.
    """
    company = user.company
    return user.email_status is True and company is not None and company.email_status is True


def apply_top_up(user: User, logger: logging.Logger = log) -> int | float:
    """Credit the company's top-up to `user` and return the amount credited.

    Returns 0 without touching the balance when the user has no company or is
    inactive. Each call credits again, so run it once per user per report.
    """
    company = user.company
    if company is None:
        logger.warning("User %s has no Company assigned.", user.id)
        return 0
    if user.active_status is not True:
        return 0

    amount = max(company.top_up, 0)
    if amount == 0:
        return 0
    user.tokens += amount
    return amount
