"""Configuration de test pour pytest avec gestion des chemins et tables de référence.

Ce module ajoute la racine du projet au sys.path et fournit des tables CSV d'essai écrites dans un
répertoire temporaire, ainsi qu'une horloge figée pour les calculs dépendant de la date.
"""

import os
import sys

import pytest

# Ensure project root is on sys.path so that
# imports like `from cardology...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from cardology.domain.services import ReadingService  # noqa: E402
from cardology.infra.table_repository import FileTableSource, ReferenceTables  # noqa: E402
from tests.seed_tables import SEED_FILES, TODAY  # noqa: E402


@pytest.fixture
def seed_dir(tmp_path):
    """Répertoire temporaire contenant les cinq tables d'essai."""
    for name, text in SEED_FILES.items():
        (tmp_path / name).write_text(text, encoding="utf-8")
    return tmp_path


@pytest.fixture
def tables(seed_dir):
    return ReferenceTables(FileTableSource(seed_dir))


@pytest.fixture
def service(tables):
    """Service de lecture sur les tables d'essai, « aujourd'hui » = 15 avril 2025."""
    return ReadingService(tables, clock=lambda: TODAY)
