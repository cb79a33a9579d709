"""Unit tests for keygate/run.py: argument handling and uvicorn settings."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from keygate import run


@pytest.fixture
def uvicorn_run(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("keygate.config.DEFAULT_CONFIG_PATHS", [".keygate/config.yaml"])
    # registered so teardown removes whatever main() exports
    monkeypatch.setenv("KEYGATE_CONFIG", "")
    fake = MagicMock()
    monkeypatch.setattr(run.uvicorn, "run", fake)
    return fake


def test_defaults_from_config(uvicorn_run: MagicMock) -> None:
    run.main([])

    args, kwargs = uvicorn_run.call_args
    assert args == ("keygate.main:app",)
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 3001
    assert kwargs["limit_concurrency"] == run.UVICORN_LIMIT_CONCURRENCY
    assert kwargs["backlog"] == run.UVICORN_BACKLOG
    assert kwargs["timeout_keep_alive"] == run.UVICORN_TIMEOUT_KEEP_ALIVE


def test_flags_override_config(uvicorn_run: MagicMock) -> None:
    run.main(["--host", "0.0.0.0", "--port", "8088"])

    kwargs = uvicorn_run.call_args.kwargs
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 8088


def test_config_flag_is_exported(uvicorn_run: MagicMock, tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("version: 1\nserver:\n  port: 4100\n")

    run.main(["--config", str(config_file)])

    assert os.environ["KEYGATE_CONFIG"] == str(config_file)
    assert uvicorn_run.call_args.kwargs["port"] == 4100


def test_invalid_config_exits_before_serving(uvicorn_run: MagicMock, tmp_path: Path) -> None:
    config_file = tmp_path / "bad.yaml"
    config_file.write_text("version: 7\n")

    with pytest.raises(SystemExit):
        run.main(["--config", str(config_file)])

    uvicorn_run.assert_not_called()
