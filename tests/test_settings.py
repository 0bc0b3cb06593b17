from __future__ import annotations

import pytest
from pydantic import ValidationError

from mcp_joplin_notes.__main__ import build_parser, load_settings
from mcp_joplin_notes.settings import Settings


def test_settings_load_from_env(monkeypatch) -> None:
    monkeypatch.setenv("JOPLIN_TOKEN", "t")
    monkeypatch.setenv("JOPLIN_PORT", "4000")
    monkeypatch.setenv("MCP_API_KEY", "k")
    s = Settings()
    assert s.joplin_token == "t"
    assert s.mcp_api_key == "k"

    cfg = s.client_config()
    assert cfg.token == "t"
    assert cfg.base_url == "http://127.0.0.1:4000"
    assert cfg.max_pages == 1000


def test_settings_require_token(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("JOPLIN_TOKEN", raising=False)
    with pytest.raises(ValidationError):
        Settings()


def test_cli_arguments_override_env_file(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("JOPLIN_TOKEN", raising=False)
    monkeypatch.delenv("JOPLIN_PORT", raising=False)
    env_file = tmp_path / "joplin.env"
    env_file.write_text("JOPLIN_TOKEN=from-file\nJOPLIN_PORT=5000\n", encoding="utf-8")

    args = build_parser().parse_args(["--env-file", str(env_file), "--port", "6000"])
    s = load_settings(args)

    assert s.joplin_token == "from-file"
    assert s.joplin_port == 6000


def test_cli_rejects_missing_env_file(tmp_path) -> None:
    args = build_parser().parse_args(["--env-file", str(tmp_path / "missing.env")])
    with pytest.raises(FileNotFoundError):
        load_settings(args)


def test_log_level_is_normalised(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("JOPLIN_TOKEN", "t")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings().log_level == "DEBUG"


def test_unknown_log_level_is_rejected(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("JOPLIN_TOKEN", "t")
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValidationError):
        load_settings(build_parser().parse_args([]))
