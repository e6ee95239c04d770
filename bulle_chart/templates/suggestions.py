"""
Built-in suggestion lists for category and criterion names, with
accent- and case-insensitive filtering.
"""

from __future__ import annotations

import unicodedata
from typing import Iterable

CATEGORY_SUGGESTIONS: tuple[str, ...] = (
    "Management",
    "Innovation",
    "Relationnel",
    "Technique",
    "Créativité",
    "Autonomie",
    "Stabilité",
    "Équipe",
    "Formation",
    "Développement",
    "Communication",
    "Organisation",
    "Stratégie",
    "Analyse",
    "Résolution de problèmes",
    "Leadership",
    "Négociation",
    "Planification",
    "Recherche",
    "Conception",
    "Réalisation",
    "Contrôle qualité",
    "Gestion de projet",
    "Veille technologique",
    "Mentorat",
    "Commercial",
    "Marketing",
    "Finance",
    "Ressources humaines",
    "International",
)

CRITERION_SUGGESTIONS: tuple[str, ...] = (
    "Autonomie",
    "Équilibre vie pro/perso",
    "Salaire attractif",
    "Évolution de carrière",
    "Formation continue",
    "Reconnaissance",
    "Défis techniques",
    "Travail en équipe",
    "Innovation",
    "Créativité",
    "Impact social",
    "Stabilité",
    "Diversité des missions",
    "Management",
    "Leadership",
    "Relations clients",
    "Voyage professionnel",
    "Télétravail",
    "Horaires flexibles",
    "Proximité géographique",
    "Ambiance de travail",
    "Responsabilités",
    "Projets variés",
    "Technologies récentes",
    "Secteur d'activité",
    "Taille d'entreprise",
    "Culture d'entreprise",
    "Bien-être au travail",
    "Avantages sociaux",
    "Perspectives d'avenir",
)


def normalize_name(value: str) -> str:
    """Lower-case, strip accents and surrounding whitespace."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).strip()


def is_name_used(name: str, existing_names: Iterable[str]) -> bool:
    """True if ``name`` matches an existing name, ignoring case and accents."""
    if not name:
        return False
    target = normalize_name(name)
    return any(normalize_name(n) == target for n in existing_names)


def filter_suggestions(
    search: str,
    suggestions: Iterable[str],
    existing_names: Iterable[str] = (),
) -> list[str]:
    """Suggestions containing ``search`` and not already used.

    An empty search returns every unused suggestion.
    """
    used = {normalize_name(n) for n in existing_names}
    needle = normalize_name(search or "")
    return [
        s for s in suggestions
        if normalize_name(s) not in used and needle in normalize_name(s)
    ]
