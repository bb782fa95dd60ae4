"""Configuration loader for trainer runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Sequence

from mcq_trainer.core import config as core_config
from mcq_trainer.core import workspace as workspace_mod

from .builder import ALL, DEFAULT_POOL_SIZE, SessionConfig, coerce_pool_size
from .loader import CorpusSource

CONFIG_FILENAME = "trainer.toml"
CONFIG_ENV = "MCQ_TRAINER_CONFIG"
ENV_PREFIX = "MCQ_TRAINER_"

_DEFAULT_LOG_LEVEL = "INFO"
_DEFAULT_MAX_WORKERS = 4
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class TrainerConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class TrainerConfig:
    """Fully resolved configuration for a trainer run."""

    sources: tuple[CorpusSource, ...]
    session: SessionConfig
    max_workers: int
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    sources: Optional[Sequence[Path]] = None
    search_text: Optional[str] = None
    topic_filter: Optional[str] = None
    difficulty_filter: Optional[str] = None
    pool_size: Optional[int] = None
    shuffle: Optional[bool] = None
    exclude_answered: Optional[bool] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Result of loading configuration, including workspace context."""

    config: TrainerConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise TrainerConfigError(str(exc)) from exc
    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        loaded_path = requested
        try:
            core_config.merge_defaults(
                table, core_config.load_toml(requested)
            )
        except core_config.TomlConfigError as exc:
            raise TrainerConfigError(str(exc)) from exc
    elif config_path is not None or (env_map.get(CONFIG_ENV) or "").strip():
        raise TrainerConfigError(f"Config file not found: {requested}")

    sources_table = table["sources"]
    session_table = table["session"]
    base_dir = loaded_path.parent if loaded_path else Path.cwd()

    if overrides.sources:
        sources = tuple(
            CorpusSource(Path(path).expanduser()) for path in overrides.sources
        )
    elif _env(env_map, "SOURCES") is not None:
        sources = tuple(
            CorpusSource(Path(part).expanduser())
            for part in _split_paths(_env(env_map, "SOURCES") or "")
        )
    else:
        sources = _sources_from_table(sources_table, base_dir)

    session = SessionConfig(
        search_text=_as_str(
            _pick_first(
                overrides.search_text,
                _env(env_map, "SEARCH"),
                session_table["search"],
            ),
            field="session.search",
        ),
        topic_filter=_as_filter(
            _pick_first(
                overrides.topic_filter,
                _env(env_map, "TOPIC"),
                session_table["topic"],
            ),
            field="session.topic",
        ),
        difficulty_filter=_as_filter(
            _pick_first(
                overrides.difficulty_filter,
                _env(env_map, "DIFFICULTY"),
                session_table["difficulty"],
            ),
            field="session.difficulty",
        ),
        pool_size=coerce_pool_size(
            _pick_first(
                overrides.pool_size,
                _env(env_map, "POOL_SIZE"),
                session_table["pool_size"],
            )
        ),
        shuffle=_as_bool(
            _pick_first(
                overrides.shuffle,
                _env(env_map, "SHUFFLE"),
                session_table["shuffle"],
            ),
            field="session.shuffle",
        ),
        exclude_answered=_as_bool(
            _pick_first(
                overrides.exclude_answered,
                _env(env_map, "EXCLUDE_ANSWERED"),
                session_table["exclude_answered"],
            ),
            field="session.exclude_answered",
        ),
    )

    max_workers = _as_positive_int(
        _pick_first(_env(env_map, "MAX_WORKERS"), sources_table["max_workers"]),
        field="sources.max_workers",
    )
    log_level = _as_str(
        _pick_first(
            overrides.log_level,
            _env(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        ),
        field="logging.level",
    ).strip().upper() or _DEFAULT_LOG_LEVEL

    config = TrainerConfig(
        sources=sources,
        session=session,
        max_workers=max_workers,
        log_level=log_level,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "sources": {
            "paths": [],
            "labels": [],
            "max_workers": _DEFAULT_MAX_WORKERS,
        },
        "session": {
            "search": "",
            "topic": ALL,
            "difficulty": ALL,
            "pool_size": DEFAULT_POOL_SIZE,
            "shuffle": True,
            "exclude_answered": True,
        },
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _sources_from_table(
    table: Mapping[str, object], base_dir: Path
) -> tuple[CorpusSource, ...]:
    paths = table["paths"]
    labels = table["labels"]
    if not isinstance(paths, list) or not all(
        isinstance(item, str) for item in paths
    ):
        raise TrainerConfigError("sources.paths must be a list of strings.")
    if not isinstance(labels, list) or not all(
        isinstance(item, str) for item in labels
    ):
        raise TrainerConfigError("sources.labels must be a list of strings.")
    if labels and len(labels) != len(paths):
        raise TrainerConfigError(
            "sources.labels must match sources.paths in length."
        )
    resolved = []
    for index, raw in enumerate(paths):
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        label = labels[index] if labels else ""
        resolved.append(CorpusSource(path, label))
    return tuple(resolved)


def _split_paths(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(os.pathsep) if part.strip()]


def _env(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _as_str(value: object, *, field: str) -> str:
    if not isinstance(value, str):
        raise TrainerConfigError(f"{field} must be a string.")
    return value


def _as_filter(value: object, *, field: str) -> str:
    text = _as_str(value, field=field).strip()
    return text or ALL


def _as_bool(value: object, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    raise TrainerConfigError(f"{field} must be a boolean.")


def _as_positive_int(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise TrainerConfigError(f"{field} must be a positive integer.")
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        raise TrainerConfigError(
            f"{field} must be a positive integer."
        ) from exc
    if number <= 0:
        raise TrainerConfigError(f"{field} must be a positive integer.")
    return number
