"""
Shared pytest fixtures for the Bulle Chart test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema
    applied. Created anew for each test that requests it.
  - ``backend`` / ``collections`` / ``store`` / ``service``: the storage
    stack over an in-process ``MemoryBackend``.
  - ``seeded``: two professions sharing a small taxonomy with distinct
    weights, for join / comparison / recommendation tests.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Generator

import pytest

from bulle_chart.config import LimitsConfig
from bulle_chart.db.schema import apply_schema
from bulle_chart.models.taxonomy import Category, Criterion, Profession
from bulle_chart.services.taxonomy_service import TaxonomyService
from bulle_chart.storage.backends import MemoryBackend
from bulle_chart.storage.collections import CollectionStore
from bulle_chart.storage.taxonomy_store import TaxonomyStore
from bulle_chart.taxonomy.criterion_taxonomy import CriterionType


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Storage stack ─────────────────────────────────────────────────────────────

@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def collections(backend: MemoryBackend) -> CollectionStore:
    return CollectionStore(backend)


@pytest.fixture
def store(collections: CollectionStore) -> TaxonomyStore:
    return TaxonomyStore(collections)


@pytest.fixture
def service(store: TaxonomyStore) -> TaxonomyService:
    return TaxonomyService(store, LimitsConfig())


# ── Seeded taxonomy ───────────────────────────────────────────────────────────

@dataclass
class SeededTaxonomy:
    dev:          Profession
    designer:     Profession
    technique:    Category
    relationnel:  Category
    empty:        Category
    challenges:   Criterion
    autonomy:     Criterion
    remote:       Criterion
    clients:      Criterion


@pytest.fixture
def seeded(store: TaxonomyStore) -> SeededTaxonomy:
    """Two professions over one shared taxonomy.

    Weights for ``dev``:       Technique 10 / 20 / 5 (total 35),
                               Relationnel 12.
    Weights for ``designer``:  Technique 3 / 3 / 3,  Relationnel 25.
    The ``empty`` category has no criteria.
    """
    dev = store.add_profession("Développeur")
    designer = store.add_profession("Designer")

    technique = store.add_category("Technique", "#6BB6FF")
    relationnel = store.add_category("Relationnel", "#66D9A3")
    empty = store.add_category("Vide", "#FFB366")

    challenges = store.add_criterion(technique.id, "Défis techniques")
    autonomy = store.add_criterion(technique.id, "Autonomie")
    remote = store.add_criterion(technique.id, "Télétravail")
    clients = store.add_criterion(relationnel.id, "Relations clients")

    for crit, weight, ctype in (
        (challenges, 10, CriterionType.ADVANTAGE),
        (autonomy, 20, CriterionType.ADVANTAGE),
        (remote, 5, CriterionType.NEUTRAL),
    ):
        store.set_criterion_weight(dev.id, technique.id, crit.id, weight, ctype)
        store.set_criterion_weight(designer.id, technique.id, crit.id, 3, CriterionType.DISADVANTAGE)

    store.set_criterion_weight(dev.id, relationnel.id, clients.id, 12, CriterionType.NEUTRAL)
    store.set_criterion_weight(designer.id, relationnel.id, clients.id, 25, CriterionType.ADVANTAGE)

    return SeededTaxonomy(
        dev=dev,
        designer=designer,
        technique=technique,
        relationnel=relationnel,
        empty=empty,
        challenges=challenges,
        autonomy=autonomy,
        remote=remote,
        clients=clients,
    )
