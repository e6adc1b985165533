"""Configuration loading pipeline."""

from __future__ import annotations

import importlib
import json
import os
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Mapping, cast

from platformdirs import user_config_dir

from .schema import GelfSinkConfig, build_config, default_config

try:  # pragma: no cover
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

try:  # pragma: no cover
    yaml_module = importlib.import_module("yaml")
except ModuleNotFoundError:  # pragma: no cover
    yaml_module = None

yaml: ModuleType | None = yaml_module


_ENV_PREFIX = "GELFSINK__"
_CONFIG_PATH_ENV = "GELFSINK_CONFIG"
_FILENAMES = ("gelfsink.toml", "gelfsink.yaml", "gelfsink.yml")
# replaced wholesale instead of merged key by key
_ATOMIC_SECTIONS = {"static_fields"}


def _load_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as fh:
        return tomllib.load(fh)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if yaml is None or not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        loader = getattr(yaml, "safe_load", None)
        if not callable(loader):
            return {}
        yaml_loader = cast(Callable[[Any], Any], loader)
        data = yaml_loader(fh)
    if isinstance(data, Mapping):
        return {str(key): value for key, value in data.items()}
    return {}


def _load_file(path: Path) -> Dict[str, Any]:
    if path.suffix == ".toml":
        return _load_toml(path)
    if path.suffix in {".yaml", ".yml"}:
        return _load_yaml(path)
    raise ValueError(f"Unsupported configuration file type: {path}")


def _merge(base: Dict[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in incoming.items():
        existing = base.get(key)
        if key in _ATOMIC_SECTIONS:
            base[key] = value
        elif isinstance(value, Mapping) and isinstance(existing, dict):
            _merge(existing, value)
        elif isinstance(value, Mapping):
            base[key] = _merge({}, value)
        else:
            base[key] = value
    return base


def _load_directory(directory: Path) -> Dict[str, Any]:
    if not directory.exists():
        return {}
    data: Dict[str, Any] = {}
    for filename in _FILENAMES:
        payload = _load_file(directory / filename)
        if payload:
            data = _merge(data, payload)
    return data


def _load_user_config() -> Dict[str, Any]:
    return _load_directory(Path(user_config_dir("gelfsink")))


def _load_local_config() -> Dict[str, Any]:
    return _load_directory(Path.cwd())


def _load_pyproject() -> Dict[str, Any]:
    data = _load_toml(Path("pyproject.toml"))
    tool = data.get("tool", {})
    if not isinstance(tool, Mapping):
        return {}
    section = tool.get("gelfsink", {})
    if isinstance(section, Mapping):
        return {str(key): value for key, value in section.items()}
    return {}


def _load_explicit(path: str | os.PathLike[str] | None) -> Dict[str, Any]:
    candidate = path or os.environ.get(_CONFIG_PATH_ENV)
    if not candidate:
        return {}
    target = Path(candidate)
    if not target.exists():
        raise FileNotFoundError(f"gelfsink configuration file not found: {target}")
    return _load_file(target)


def _coerce_value(value: str) -> Any:
    stripped = value.strip()
    lowered = stripped.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        return int(stripped)
    except ValueError:
        try:
            return float(stripped)
        except ValueError:
            pass
    if stripped.startswith("[") or stripped.startswith("{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass
    return stripped


def _env_config() -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for env_key, raw_value in os.environ.items():
        if not env_key.startswith(_ENV_PREFIX):
            continue
        path = env_key[len(_ENV_PREFIX) :].split("__")
        target: Dict[str, Any] = data
        for segment in path[:-1]:
            child = target.setdefault(segment.lower(), {})
            target = cast(Dict[str, Any], child)
        leaf = path[-1]
        # static field keys keep their case; everything else is lowered
        key = leaf if target is data.get("static_fields") else leaf.lower()
        target[key] = _coerce_value(raw_value)
    return data


def load_configuration(
    overrides: Mapping[str, Any] | None = None,
    *,
    path: str | os.PathLike[str] | None = None,
) -> GelfSinkConfig:
    """Load configuration from supported sources in precedence order.

    Lowest first: defaults, the user config directory, the working directory,
    ``[tool.gelfsink]`` in ``pyproject.toml``, an explicit file (``path`` or
    ``$GELFSINK_CONFIG``), ``GELFSINK__*`` environment variables, overrides.
    """

    result: Dict[str, Any] = default_config()
    for mapping in (
        _load_user_config(),
        _load_local_config(),
        _load_pyproject(),
        _load_explicit(path),
        _env_config(),
        overrides or {},
    ):
        if mapping:
            _merge(result, mapping)
    return build_config(result)
