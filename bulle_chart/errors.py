"""
Exception hierarchy for the Bulle Chart core.

Two kinds of failure exist:

  - ``ValidationFailure`` carries a human-readable message that callers
    display verbatim. It is never pattern-matched.
  - ``ProfessionDeletionError`` carries a machine-checkable ``reason`` so
    callers can phrase a different message for each case.

Read-path failures (corrupt persisted JSON) are NOT represented here: the
collection store logs them and recovers to an empty collection.
"""

from __future__ import annotations

from enum import StrEnum


class DeletionReason(StrEnum):
    """Why the last remaining profession could not be deleted."""

    CANNOT_DELETE_LAST_PROFESSION = "CANNOT_DELETE_LAST_PROFESSION"
    CANNOT_DELETE_LAST_PROFESSION_WITH_DATA = "CANNOT_DELETE_LAST_PROFESSION_WITH_DATA"


class BulleChartError(Exception):
    """Base class for every error raised by the core."""


class ValidationFailure(BulleChartError):
    """A user-facing validation message, shown as-is."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProfessionDeletionError(BulleChartError):
    """Deleting a profession was refused; inspect ``reason``."""

    def __init__(self, reason: DeletionReason, profession_id: int) -> None:
        super().__init__(f"{reason.value} (profession_id={profession_id})")
        self.reason = reason
        self.profession_id = profession_id


class CategoryNotFoundError(BulleChartError):
    """Referenced category id does not exist."""

    def __init__(self, category_id: int) -> None:
        super().__init__(f"Category {category_id} not found.")
        self.category_id = category_id


class CategoryNotEmptyError(BulleChartError):
    """A category still owns criteria and cannot be deleted."""

    def __init__(self, category_id: int, criteria_count: int) -> None:
        super().__init__(
            f"Category {category_id} still has {criteria_count} criteria; "
            "delete them first."
        )
        self.category_id = category_id
        self.criteria_count = criteria_count


class NoActiveProfessionError(BulleChartError):
    """An operation needs an active profession but none is selected."""


class StorageWriteError(BulleChartError):
    """A backend could not persist a value (quota, disk, locked DB)."""
