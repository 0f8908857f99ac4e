"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, tables de référence, service de lecture)
et expose un singleton `container` utilisé par le reste de l'application.
"""

from cardology.core.settings import get_settings
from cardology.domain.services import ReadingService
from cardology.infra.table_repository import ReferenceTables


class Container:
    def __init__(self):
        self.settings = get_settings()
        self.tables = ReferenceTables.from_settings(self.settings)
        self.tables_backend = "http" if self.settings.TABLES_BASE_URL else "file"
        self.reading_service = ReadingService(
            self.tables,
            wrap_previous_year=self.settings.PLANETARY_WRAP_PREVIOUS_YEAR,
        )


container = Container()
