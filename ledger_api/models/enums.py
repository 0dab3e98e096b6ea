"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class EntryType(str, enum.Enum):
    """Direction of a posting: which side increases an account."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
