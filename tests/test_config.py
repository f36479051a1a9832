from __future__ import annotations

import logging
import sys

from study_server import config
from study_server.config import Settings


def test_settings_read_prefixed_env(monkeypatch):
    monkeypatch.setenv("STUDY_WEB_PORT", "3100")
    monkeypatch.setenv("STUDY_GITHUB_OWNER", "octo")
    settings = Settings(_env_file=None)
    assert settings.web_port == 3100
    assert settings.github_owner == "octo"
    assert settings.transport == "stdio"


def test_configure_logging_writes_to_stderr(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    config.configure_logging(Settings(_env_file=None, log_level="debug"))

    assert len(calls) == 1
    assert calls[0]["level"] == "DEBUG"
    assert calls[0]["stream"] is sys.stderr


def test_web_app_shares_logging_setup_without_mcp_entrypoint():
    from study_server.web import app

    assert app.configure_logging is config.configure_logging
    assert not hasattr(app, "create_server")
