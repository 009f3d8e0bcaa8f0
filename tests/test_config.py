from __future__ import annotations

import logging
from dataclasses import fields

import pytest

from reply_agent.common.config import Settings, load_settings
from reply_agent.common.logging_setup import setup_logging


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:  # noqa: ANN001
    monkeypatch.delenv("REPLY_AGENT_CONFIG", raising=False)
    for f in fields(Settings):
        monkeypatch.delenv(f"REPLY_AGENT_{f.name.upper()}", raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_file() -> None:
    assert load_settings() == Settings()


def test_yaml_file(tmp_path) -> None:  # noqa: ANN001
    cfg = tmp_path / "agent.yaml"
    cfg.write_text("backend: http\nbase_url: http://gpu:8001\nn_ctx: 4096\ntop_p: 0.9\n", encoding="utf-8")
    s = load_settings(str(cfg))
    assert s.backend == "http"
    assert s.base_url == "http://gpu:8001"
    assert s.n_ctx == 4096
    assert s.top_p == 0.9


def test_env_overrides_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ANN001
    cfg = tmp_path / "agent.yaml"
    cfg.write_text("backend: http\nrequest_timeout: 10\n", encoding="utf-8")
    monkeypatch.setenv("REPLY_AGENT_CONFIG", str(cfg))
    monkeypatch.setenv("REPLY_AGENT_BACKEND", "gguf")
    s = load_settings()
    assert s.backend == "gguf"
    assert s.request_timeout == 10.0


def test_explicit_missing_file_raises(tmp_path) -> None:  # noqa: ANN001
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "nope.yaml"))


def test_setup_logging_accepts_names() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG
    setup_logging("not-a-level")
    assert logging.getLogger().level == logging.INFO
    setup_logging(logging.WARNING)
    assert logging.getLogger().level == logging.WARNING
    assert len(logging.getLogger().handlers) == 1


def test_env_value_types(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REPLY_AGENT_TEMPERATURE", "0.3")
    monkeypatch.setenv("REPLY_AGENT_N_GPU_LAYERS", "0")
    monkeypatch.setenv("REPLY_AGENT_MODEL_ID", "tiny-chat")
    s = load_settings()
    assert s.temperature == 0.3
    assert s.n_gpu_layers == 0
    assert s.model_id == "tiny-chat"
