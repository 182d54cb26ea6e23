"""Engine settings with YAML file and environment variable overrides.

Settings are resolved in this order, later sources winning:

    1. Built-in defaults (``float64`` scalars, tolerance ``5e-6``)
    2. A YAML mapping read from the first file found among:
       an explicit ``path`` argument, the file named by
       ``SPLINEKIT_CONFIG``, and ``~/.config/splinekit/settings.yaml``
    3. Individual environment overrides ``SPLINEKIT_DTYPE`` and
       ``SPLINEKIT_TOLERANCE``

Example settings file::

    dtype: float32
    tolerance: 1.0e-4
    log_level: DEBUG

Example:
    export SPLINEKIT_DTYPE=longdouble
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, fields, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from splinekit.errors import InvalidConfigurationError
from splinekit.types import is_finite, normalize_dtype

__all__ = [
    "SPLINEKIT_CONFIG",
    "SPLINEKIT_DTYPE",
    "SPLINEKIT_TOLERANCE",
    "Settings",
    "load_settings",
    "get_settings",
    "apply_logging",
    "clear_cache",
]

logger = logging.getLogger(__name__)

# Environment variable names
SPLINEKIT_CONFIG = "SPLINEKIT_CONFIG"
SPLINEKIT_DTYPE = "SPLINEKIT_DTYPE"
SPLINEKIT_TOLERANCE = "SPLINEKIT_TOLERANCE"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Resolved engine settings."""

    dtype: str = "float64"
    tolerance: float = 5e-6
    log_level: str = "WARNING"


def _user_config_path() -> Path:
    if sys.platform == "win32":
        config_base = Path(os.environ.get("APPDATA", "~")).expanduser()
    else:
        config_base = Path.home() / ".config"
    return config_base / "splinekit" / "settings.yaml"


def _find_config_file(path: Optional[Path | str]) -> Optional[Path]:
    if path is not None:
        explicit = Path(path).expanduser()
        if not explicit.exists():
            raise FileNotFoundError(f"settings file not found: {explicit}")
        return explicit

    env_path = os.environ.get(SPLINEKIT_CONFIG)
    if env_path:
        candidate = Path(env_path).expanduser()
        if not candidate.exists():
            raise FileNotFoundError(
                f"settings file named by {SPLINEKIT_CONFIG} not found: {candidate}")
        return candidate

    user_config = _user_config_path()
    if user_config.is_file():
        return user_config
    return None


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fp:
        try:
            data = yaml.safe_load(fp) or {}
        except yaml.YAMLError as exc:
            raise InvalidConfigurationError(
                f"settings file {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidConfigurationError(
            f"settings file {path} must contain a mapping",
            actual=type(data).__name__)
    return data


def _coerce(raw: Dict[str, Any], source: str) -> Dict[str, Any]:
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise InvalidConfigurationError(
            f"unknown settings in {source}: {', '.join(unknown)}",
            expected=", ".join(sorted(known)))

    values: Dict[str, Any] = {}
    if "dtype" in raw:
        values["dtype"] = normalize_dtype(str(raw["dtype"]))
    if "tolerance" in raw:
        try:
            tolerance = float(raw["tolerance"])
        except (TypeError, ValueError) as exc:
            raise InvalidConfigurationError(
                f"tolerance in {source} must be a number",
                actual=raw["tolerance"]) from exc
        if not is_finite(tolerance) or tolerance <= 0.0:
            raise InvalidConfigurationError(
                f"tolerance in {source} must be positive", actual=tolerance)
        values["tolerance"] = tolerance
    if "log_level" in raw:
        level = str(raw["log_level"]).upper()
        if level not in _LOG_LEVELS:
            raise InvalidConfigurationError(
                f"log_level in {source} is not a logging level",
                expected=", ".join(_LOG_LEVELS), actual=raw["log_level"])
        values["log_level"] = level
    return values


def load_settings(path: Optional[Path | str] = None) -> Settings:
    """Resolve settings from defaults, a settings file and the environment."""

    settings = Settings()

    config_file = _find_config_file(path)
    if config_file is not None:
        logger.debug("loading settings from %s", config_file)
        settings = replace(settings, **_coerce(_load_yaml(config_file), str(config_file)))

    env_values: Dict[str, Any] = {}
    if os.environ.get(SPLINEKIT_DTYPE):
        env_values["dtype"] = os.environ[SPLINEKIT_DTYPE]
    if os.environ.get(SPLINEKIT_TOLERANCE):
        env_values["tolerance"] = os.environ[SPLINEKIT_TOLERANCE]
    if env_values:
        settings = replace(settings, **_coerce(env_values, "environment"))

    return settings


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""

    return load_settings()


def apply_logging(settings: Optional[Settings] = None) -> None:
    """Set the ``splinekit`` logger level from ``settings.log_level``."""

    settings = settings or get_settings()
    logging.getLogger("splinekit").setLevel(settings.log_level)


def clear_cache() -> None:
    """Forget cached settings.

    Call this after changing the environment or the settings file.
    """
    get_settings.cache_clear()
