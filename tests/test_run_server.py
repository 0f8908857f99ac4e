"""Tests pour le script de lancement du serveur."""

from unittest.mock import patch

from cardology.scripts import run_server

CUSTOM_PORT = 9123


def test_main_uses_port_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", str(CUSTOM_PORT))
    with patch("cardology.scripts.run_server.uvicorn.run") as mock_run:
        run_server.main()
    mock_run.assert_called_once()
    assert mock_run.call_args.kwargs["port"] == CUSTOM_PORT
    assert mock_run.call_args.args[0] is run_server.app
