"""Configuration loading for jsdocmd (.jsdocmd.yml or plain option mappings)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".jsdocmd.yml"


class ConfigError(RuntimeError):
    """Raised when configuration is missing required values or cannot be parsed."""


@dataclass(frozen=True)
class Locale:
    """Labels used by the Markdown renderer."""

    params: str = "Params"
    returns: str = "Returns"
    example: str = "Examples"
    optional: str = "optional"
    default_as: str = "Default:"


# Option keys as they appear under ``i18n``.
_LOCALE_KEYS = {
    "Params": "params",
    "Returns": "returns",
    "Example": "example",
    "Optional": "optional",
    "DefaultAs": "default_as",
}


@dataclass
class PipelineConfig:
    """Effective settings for a documentation pipeline."""

    source_dir: Path
    match: List[str] = field(default_factory=list)
    locale: Locale = field(default_factory=Locale)
    max_workers: Optional[int] = None
    verbose: bool = False
    log_file: Optional[Path] = None

    @classmethod
    def from_options(
        cls, options: Mapping[str, Any], *, base_dir: Path | None = None
    ) -> "PipelineConfig":
        """Build a config from ``sourceDir``/``match``/``i18n`` style options.

        Relative ``sourceDir`` and ``logFile`` values are resolved against
        ``base_dir`` (or the current directory).
        """
        if not isinstance(options, Mapping):
            raise ConfigError("Options must be a mapping")

        source_value = _as_str(options.get("sourceDir"))
        if not source_value:
            raise ConfigError("The 'sourceDir' option is required")
        source_dir = Path(source_value).expanduser()
        if not source_dir.is_absolute():
            source_dir = (base_dir or Path.cwd()) / source_dir

        max_workers = _as_int(options.get("maxWorkers"))
        if max_workers is not None and max_workers < 1:
            raise ConfigError("'maxWorkers' must be a positive integer")

        log_file = None
        log_value = _as_str(options.get("logFile"))
        if log_value:
            log_file = Path(log_value).expanduser()
            if not log_file.is_absolute():
                log_file = (base_dir or Path.cwd()) / log_file

        verbose = options.get("verbose", False)
        if not isinstance(verbose, bool):
            raise ConfigError("'verbose' must be true or false")

        return cls(
            source_dir=source_dir.resolve(),
            match=_as_str_list(options.get("match")),
            locale=_build_locale(options.get("i18n")),
            max_workers=max_workers,
            verbose=verbose,
            log_file=log_file,
        )


def load_config(config_path: Path) -> PipelineConfig:
    """Load configuration from a .jsdocmd.yml file or the directory holding one."""
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_file}")

    text = config_file.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) if text.strip() else {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {config_file.name}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    return PipelineConfig.from_options(data, base_dir=config_file.parent)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _build_locale(value: Any) -> Locale:
    if value is None:
        return Locale()
    if not isinstance(value, Mapping):
        raise ConfigError("'i18n' must be a mapping of label overrides")
    overrides: Dict[str, str] = {}
    for key, label in value.items():
        attribute = _LOCALE_KEYS.get(str(key))
        if attribute is None:
            known = ", ".join(_LOCALE_KEYS)
            raise ConfigError(f"Unknown i18n key '{key}' (expected one of: {known})")
        text = _as_str(label)
        if text is None:
            raise ConfigError(f"i18n label '{key}' must be a string")
        overrides[attribute] = text
    return replace(Locale(), **overrides)


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigError(f"Expected an integer, got {value!r}") from exc
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        patterns: List[str] = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigError(f"'match' entries must be patterns, got {item!r}")
            patterns.append(item)
        return patterns
    raise ConfigError("'match' must be a pattern or a list of patterns")


__all__ = ["CONFIG_FILENAME", "ConfigError", "Locale", "PipelineConfig", "load_config"]
