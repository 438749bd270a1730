from __future__ import annotations

import json
import os
import warnings
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.config/notepads/config.json").expanduser()

CONFIG_ENV_OVERRIDES = {
    "verbose": "NOTEPADS_VERBOSE",
    "storage_dir": "NOTEPADS_STORAGE_DIR",
    "extension_namespace": "NOTEPADS_EXTENSION_NAMESPACE",
}


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("NOTEPADS_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def write_config_file(data: dict[str, Any], path: Path | None = None) -> Path:
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
    return config_path


def get_env_overrides() -> dict[str, str]:
    """Config fields set through ``NOTEPADS_*`` env vars, keyed by field name."""
    return {
        key: os.environ[env_var]
        for key, env_var in CONFIG_ENV_OVERRIDES.items()
        if env_var in os.environ
    }


@dataclass
class NotepadsConfig:
    verbose: bool = False
    # Host-assigned per-workspace storage directory: {workspace-id}/{namespace}
    storage_dir: str | None = None
    extension_namespace: str = "cursor-notepads"


_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


def _parse_bool(value: str, default: bool) -> bool:
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return default


def _coerce_bool(value: object, default: bool, *, key: str) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return _parse_bool(value, default)
    warnings.warn(f"Invalid bool for {key}: {value!r}", RuntimeWarning, stacklevel=2)
    return default


def _coerce_str(value: object, default: str | None, *, key: str) -> str | None:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip() or default
    warnings.warn(f"Invalid string for {key}: {value!r}", RuntimeWarning, stacklevel=2)
    return default


def load_config(path: Path | None = None) -> NotepadsConfig:
    """Defaults, then the JSON config file, then ``NOTEPADS_*`` env vars."""
    try:
        data = read_config_file(path)
    except ValueError:
        # A broken file falls back to defaults; `config` reports the error.
        data = {}
    cfg = _apply_dict(NotepadsConfig(), data)
    return _apply_dict(cfg, get_env_overrides())


def _coerce_namespace(value: object, default: str, *, key: str) -> str:
    # The namespace is part of the storage path and can never be blank.
    return _coerce_str(value, default, key=key) or default


_FIELD_COERCERS: dict[str, Callable[..., Any]] = {
    "verbose": _coerce_bool,
    "storage_dir": _coerce_str,
    "extension_namespace": _coerce_namespace,
}


def _apply_dict(cfg: NotepadsConfig, data: Mapping[str, Any]) -> NotepadsConfig:
    for key, value in data.items():
        coerce = _FIELD_COERCERS.get(key)
        if coerce is None:
            continue
        setattr(cfg, key, coerce(value, getattr(cfg, key), key=key))
    return cfg
