"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
- Décrire où se trouvent les tables de référence (répertoire local ou URL HTTP)
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    else:
        _ENV_FILE_PATH = _candidate_default

DEFAULT_TABLES_DIR = str(Path(__file__).resolve().parent.parent / "infra" / "data")


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "cardology-backend"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "DEBUG"

    # Tables de référence: répertoire local, ou URL de base HTTP si renseignée
    TABLES_DIR: str = DEFAULT_TABLES_DIR
    TABLES_BASE_URL: str | None = None
    TABLES_HTTP_TIMEOUT: float = 10.0
    WARM_TABLES_ON_STARTUP: bool = False

    # Périodes planétaires: si aucune période n'a commencé cette année civile,
    # la dernière période de l'année précédente est considérée comme courante.
    PLANETARY_WRAP_PREVIOUS_YEAR: bool = True


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
