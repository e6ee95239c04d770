"""
Dataset metadata: the data-version check result and the legacy migration report.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class DataVersionStatus(BaseModel):
    """Stored vs. current data schema version.

    ``stored_version`` is ``None`` for datasets written before versioning.
    """

    model_config = ConfigDict(frozen=True)

    stored_version: Optional[str] = None
    current_version: str
    is_current: bool


class MigrationReport(BaseModel):
    """Outcome of one ``migrate_legacy_data()`` call.

    Attributes:
        migrated: ``True`` only if legacy data was folded into the new schema.
        profession_id: Id of the synthesised default profession, if any.
        criteria_extracted: Criteria pulled out of categories' embedded lists.
        weights_created: Weight rows back-filled for the default profession.
        reason: Short explanation when nothing was migrated.
    """

    model_config = ConfigDict(frozen=True)

    migrated: bool
    profession_id: Optional[int] = None
    criteria_extracted: int = 0
    weights_created: int = 0
    reason: Optional[str] = None
