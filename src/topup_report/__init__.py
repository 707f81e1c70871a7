"""topup_report package.

Contains modules for loading company and user record sets from JSON,
validating them, crediting token top-ups to active users and writing a
per-company top-up report.

Architecture:
- Raw records → validated entities → grouped users → top-ups → report text
- Pydantic models validate both record sets at construction time
- A single output file is written once per run, in company-id order
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
