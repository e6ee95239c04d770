"""
Collection store: typed load/save of the persisted JSON collections.

Each logical record set lives under its own key so that, for example,
renaming a criterion rewrites only the criteria collection and never any
profession's weights.

Keys
----
    bulle_chart_professions          list[Profession]
    bulle_chart_categories           list[Category]       (no embedded criteria)
    bulle_chart_criteria             list[Criterion]      (category_id + name only)
    bulle_chart_criterion_weights    list[CriterionWeight]
    bulle_chart_chart_color_mode     {profession_id: "category" | "type"}
    bulle_chart_next_profession_id   int counter
    bulle_chart_next_category_id     int counter
    bulle_chart_next_criterion_id    int counter
    bulle_chart_data_version         str

Failure policy
--------------
Reads never raise. Missing keys and invalid JSON are logged and recover to
the empty default. A row failing model validation is logged and skipped;
the rest of its collection still loads, so the next save keeps it.

Writes never raise past this layer: a backend ``StorageWriteError`` (or an
``OSError``) is logged and reported as ``False`` so callers can degrade
gracefully.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from bulle_chart.errors import StorageWriteError
from bulle_chart.models.taxonomy import Category, Criterion, CriterionWeight, Profession
from bulle_chart.storage.backends import KeyValueBackend

logger = logging.getLogger(__name__)

KEY_PREFIX = "bulle_chart_"

PROFESSIONS_KEY = f"{KEY_PREFIX}professions"
CATEGORIES_KEY = f"{KEY_PREFIX}categories"
CRITERIA_KEY = f"{KEY_PREFIX}criteria"
CRITERION_WEIGHTS_KEY = f"{KEY_PREFIX}criterion_weights"
CHART_COLOR_MODE_KEY = f"{KEY_PREFIX}chart_color_mode"
DATA_VERSION_KEY = f"{KEY_PREFIX}data_version"

NEXT_ID_KEYS: dict[str, str] = {
    "profession": f"{KEY_PREFIX}next_profession_id",
    "category":   f"{KEY_PREFIX}next_category_id",
    "criterion":  f"{KEY_PREFIX}next_criterion_id",
}

ALL_KEYS: tuple[str, ...] = (
    PROFESSIONS_KEY,
    CATEGORIES_KEY,
    CRITERIA_KEY,
    CRITERION_WEIGHTS_KEY,
    CHART_COLOR_MODE_KEY,
    DATA_VERSION_KEY,
    *NEXT_ID_KEYS.values(),
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CollectionStore:
    """Typed access to the persisted collections of one dataset.

    Attributes:
        backend: The ``KeyValueBackend`` holding the raw strings.
    """

    def __init__(self, backend: KeyValueBackend) -> None:
        self.backend = backend

    # ── Generic helpers ───────────────────────────────────────────────────────

    def load_raw(self, key: str) -> Any:
        """Return the decoded JSON under ``key``, or ``None`` if absent/corrupt."""
        data = self.backend.get_item(key)
        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError as exc:
            logger.error("Corrupt JSON under '%s': %s", key, exc)
            return None

    def save_raw(self, key: str, value: Any) -> bool:
        """JSON-encode ``value`` and store it. Returns ``False`` on write failure."""
        try:
            self.backend.set_item(key, json.dumps(value, ensure_ascii=False))
        except (StorageWriteError, OSError) as exc:
            logger.error("Error saving '%s': %s", key, exc)
            return False
        return True

    def _load_list(self, key: str, model: type[ModelT]) -> list[ModelT]:
        raw = self.load_raw(key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.error("Expected a list under '%s', got %s.", key, type(raw).__name__)
            return []
        items: list[ModelT] = []
        for index, item in enumerate(raw):
            try:
                items.append(model.model_validate(item))
            except ValidationError as exc:
                logger.error("Skipping invalid record %d under '%s': %s", index, key, exc)
        return items

    def _save_list(self, key: str, items: list[ModelT]) -> bool:
        return self.save_raw(key, [m.model_dump(mode="json") for m in items])

    # ── Collections ───────────────────────────────────────────────────────────

    def load_professions(self) -> list[Profession]:
        return self._load_list(PROFESSIONS_KEY, Profession)

    def save_professions(self, professions: list[Profession]) -> bool:
        return self._save_list(PROFESSIONS_KEY, professions)

    def load_categories(self) -> list[Category]:
        return self._load_list(CATEGORIES_KEY, Category)

    def save_categories(self, categories: list[Category]) -> bool:
        return self._save_list(CATEGORIES_KEY, categories)

    def load_criteria(self) -> list[Criterion]:
        return self._load_list(CRITERIA_KEY, Criterion)

    def save_criteria(self, criteria: list[Criterion]) -> bool:
        return self._save_list(CRITERIA_KEY, criteria)

    def load_criterion_weights(self) -> list[CriterionWeight]:
        return self._load_list(CRITERION_WEIGHTS_KEY, CriterionWeight)

    def save_criterion_weights(self, weights: list[CriterionWeight]) -> bool:
        return self._save_list(CRITERION_WEIGHTS_KEY, weights)

    # ── Counters ──────────────────────────────────────────────────────────────

    def get_next_id(self, kind: str) -> int:
        """Return the next id to assign for ``kind`` (1 when unset or corrupt)."""
        data = self.backend.get_item(NEXT_ID_KEYS[kind])
        if data is None:
            return 1
        try:
            value = int(data)
        except ValueError:
            logger.error("Corrupt %s id counter: %r", kind, data)
            return 1
        return value if value >= 1 else 1

    def set_next_id(self, kind: str, value: int) -> bool:
        try:
            self.backend.set_item(NEXT_ID_KEYS[kind], str(value))
        except (StorageWriteError, OSError) as exc:
            logger.error("Error updating next %s id: %s", kind, exc)
            return False
        return True

    def allocate_id(self, kind: str) -> int:
        """Reserve and return the next id for ``kind``; the counter only moves forward."""
        next_id = self.get_next_id(kind)
        self.set_next_id(kind, next_id + 1)
        return next_id

    # ── Preferences and markers ───────────────────────────────────────────────

    def load_chart_color_modes(self) -> dict[str, str]:
        raw = self.load_raw(CHART_COLOR_MODE_KEY)
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def save_chart_color_modes(self, modes: dict[str, str]) -> bool:
        return self.save_raw(CHART_COLOR_MODE_KEY, modes)

    def get_data_version(self) -> Optional[str]:
        return self.backend.get_item(DATA_VERSION_KEY)

    def set_data_version(self, version: str) -> bool:
        try:
            self.backend.set_item(DATA_VERSION_KEY, version)
        except (StorageWriteError, OSError) as exc:
            logger.error("Error saving data version: %s", exc)
            return False
        return True

    def clear(self) -> None:
        """Remove every key this store owns."""
        for key in ALL_KEYS:
            self.backend.remove_item(key)
