"""
Script de lancement du serveur HTTP.

Lance l'application FastAPI avec uvicorn sur l'hôte et le port de la configuration (variable
`PORT` prioritaire, pour les plateformes qui l'imposent).
"""

import os

import uvicorn

from cardology.app.main import app
from cardology.core.container import container


def main():
    """Point d'entrée principal du serveur."""
    settings = container.settings
    port = int(os.environ.get("PORT", settings.APP_PORT))
    uvicorn.run(app, host=settings.APP_HOST, port=port, reload=False)


if __name__ == "__main__":
    main()
