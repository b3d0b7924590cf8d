from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from url_query_cleaner.policy import TrackingPolicy
from url_query_cleaner.utils import parse_names_csv


@dataclass
class AppConfig:
    tracking: TrackingPolicy = field(default_factory=TrackingPolicy)
    remove: list[str] = field(default_factory=list)
    log_path: Path | None = None

    def __post_init__(self) -> None:
        self.remove = parse_names_csv(self.remove)
        self.log_path = Path(self.log_path) if self.log_path else None

    def blocklist(self) -> frozenset[str]:
        return self.tracking.resolve() | frozenset(self.remove)

    def with_overrides(
        self,
        allow: Iterable[str] = (),
        remove: Iterable[str] = (),
        log_path: Path | None = None,
    ) -> "AppConfig":
        """Return a copy with extra allowed categories, extra names and a log path applied."""
        tracking = TrackingPolicy.allowing(*self.tracking.allowed_categories(), *allow)
        return replace(
            self,
            tracking=tracking,
            remove=[*self.remove, *remove],
            log_path=log_path or self.log_path,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppConfig":
        tracking_data = data.get("tracking", {}) or {}
        if not isinstance(tracking_data, Mapping):
            raise ValueError("tracking must be a mapping of category to boolean")
        remove = data.get("remove", []) or []
        if not isinstance(remove, (str, list, tuple)):
            raise ValueError("remove must be a list or a comma-separated string")
        return cls(
            tracking=TrackingPolicy.from_mapping(tracking_data),
            remove=remove,
            log_path=data.get("log_path"),
        )


DEFAULT_CONFIG_PATH = Path("url-query-cleaner.yaml")
ENV_PREFIX = "URL_QUERY_CLEANER__"


def _deep_set(target: dict[str, Any], keys: list[str], value: Any) -> None:
    current = target
    for key in keys[:-1]:
        current = current.setdefault(key, {})
    current[keys[-1]] = value


def _parse_env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for key, value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = key[len(ENV_PREFIX) :].lower().split("__")
        if not path or any(not part for part in path):
            continue
        _deep_set(overrides, path, value)
    return overrides


def _merge_dicts(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    path: Path | str = DEFAULT_CONFIG_PATH,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Read the YAML config at ``path`` (if it exists) and apply env overrides.

    Overrides use ``URL_QUERY_CLEANER__`` plus the key path joined by ``__``,
    e.g. ``URL_QUERY_CLEANER__TRACKING__GCLID=true``.
    """
    config_path = Path(path)
    data: dict[str, Any] = {}
    if config_path.exists():
        raw = config_path.read_text(encoding="utf-8")
        loaded = yaml.safe_load(raw) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{config_path.name} must define a mapping at the top level")
        data = loaded

    env_overrides = _parse_env_overrides(os.environ if env is None else env)
    merged = _merge_dicts(data, env_overrides)
    return AppConfig.from_dict(merged)
