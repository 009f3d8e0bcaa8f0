"""Runtime configuration: optional YAML file plus environment overrides."""
from __future__ import annotations
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = "configs/reply_agent.yaml"
ENV_PREFIX = "REPLY_AGENT_"


@dataclass
class Settings:
    # "none", "http" or "gguf"
    backend: str = "none"

    # http backend (OpenAI-compatible completions server)
    base_url: str = "http://localhost:8001"
    api_key: str = "not-required"
    model_id: str = "Qwen/Qwen2.5-0.5B-Instruct"
    request_timeout: float = 60.0

    # gguf backend
    model_path: str = "models/reply-model.gguf"
    n_ctx: int = 2048
    n_gpu_layers: int = -1

    # sampling
    temperature: float = 0.7
    top_p: float = 0.95

    warmup_delay: float = 0.6
    log_level: str = "INFO"


def load_cfg(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(path: str | None = None) -> Settings:
    """
    Build Settings from a YAML file and REPLY_AGENT_* environment variables.

    Args:
        path: YAML config path. Defaults to REPLY_AGENT_CONFIG, then
            configs/reply_agent.yaml; a missing default file is ignored.

    Returns:
        Settings with environment values taking precedence over the file.
    """
    explicit = path or os.getenv(f"{ENV_PREFIX}CONFIG")
    cfg_path = explicit or DEFAULT_CONFIG_PATH
    raw: dict[str, Any] = {}
    if explicit or Path(cfg_path).exists():
        raw = load_cfg(cfg_path)

    values: dict[str, Any] = {}
    for f in fields(Settings):
        value = os.getenv(f"{ENV_PREFIX}{f.name.upper()}", raw.get(f.name))
        if value is None:
            continue
        # dataclass field types are strings under postponed annotations
        if f.type == "int":
            value = int(value)
        elif f.type == "float":
            value = float(value)
        else:
            value = str(value)
        values[f.name] = value
    return Settings(**values)
