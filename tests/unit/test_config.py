"""Unit tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from grant_liaison.liaison.config import LiaisonSettings
from grant_liaison.server.config import ServerSettings


def test_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for var in ("LOG_LEVEL", "LIAISON_STATE_PATH", "LIAISON_DEFAULT_FOLLOW_UP_DAYS"):
        monkeypatch.delenv(var, raising=False)

    settings = LiaisonSettings()

    assert settings.log_level == "INFO"
    assert settings.default_follow_up_days == 30
    assert settings.state_file == Path("liaison_state") / "liaison.json"


def test_env_file_is_read(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LIAISON_STATE_PATH", raising=False)
    (tmp_path / ".env").write_text(
        "LIAISON_STATE_PATH=custom_state\nLIAISON_DEFAULT_FOLLOW_UP_DAYS=14\n",
        encoding="utf-8",
    )

    settings = LiaisonSettings()

    assert settings.state_path == Path("custom_state")
    assert settings.default_follow_up_days == 14


def test_rejects_out_of_range_follow_up_days(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIAISON_DEFAULT_FOLLOW_UP_DAYS", "-1")
    with pytest.raises(ValidationError):
        LiaisonSettings()


def test_cors_origins_are_split(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIAISON_CORS_ORIGINS", " http://a.test , ,http://b.test")
    assert ServerSettings().parsed_cors_origins() == ["http://a.test", "http://b.test"]
