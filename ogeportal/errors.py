"""
Exceptions raised by ogeportal.

Transport failures are not wrapped: whatever `requests` raises reaches the caller unchanged.
"""

from __future__ import annotations


class OgeError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(OgeError):
    """Invalid configuration value (environment or .env file)."""


class MarkupError(OgeError):
    """An expected node (cell, span, row attribute) is missing from the portal markup."""


class GradeParseError(OgeError):
    """A coefficient or a grade line could not be read as numbers."""


class PayloadDecodeError(OgeError):
    """A partial-update response does not carry the expected CDATA / JSON payload."""
