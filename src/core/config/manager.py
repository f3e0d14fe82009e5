"""
ConfigManager: dot-notation access to tunable game balance values.

Purpose
-------
- Serve balance values (experience rates, item rates, success curve,
  offline model) with hierarchical dot-notation keys.
- Back configuration with YAML defaults from the ``config/`` directory,
  deep-merged so balance can be split across files.
- Allow in-process overrides for tests and live tuning via ``set()``.

Static process settings (database URL, log level) are not here; see
``Config``.

Examples
--------
>>> ConfigManager.initialize()
>>> ConfigManager.get("skills.live_rates.mining")
30.0
>>> ConfigManager.get("skills.unknown", 0)
0
"""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional

import yaml

from src.core.config.config import Config
from src.core.logging.logger import get_logger

logger = get_logger(__name__)


class ConfigManagerError(RuntimeError):
    """Base error type for ConfigManager-related failures."""


class ConfigInitializationError(ConfigManagerError):
    """Raised when a YAML file cannot be parsed during initialization."""


__all__ = ["ConfigManager", "ConfigManagerError", "ConfigInitializationError"]


@dataclass
class ConfigMetrics:
    gets: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    sets: int = 0
    total_get_time_ms: float = 0.0

    def reset(self) -> None:
        self.gets = 0
        self.cache_hits = 0
        self.cache_misses = 0
        self.sets = 0
        self.total_get_time_ms = 0.0


_MISSING = object()


class ConfigManager:
    """
    YAML-backed balance configuration with in-memory overrides.

    Lookup order for ``get("a.b.c")``: overrides set via ``set()``, then YAML
    defaults, then the caller's ``default``.
    """

    _defaults: Dict[str, Any] = {}
    _overrides: Dict[str, Any] = {}
    _initialized: bool = False
    _config_dir: Optional[Path] = None
    _metrics: ConfigMetrics = ConfigMetrics()

    # =========================================================================
    # YAML LOADING
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = copy.deepcopy(value)

    @classmethod
    def _load_yaml_configs(cls, config_dir: Path) -> None:
        if not config_dir.exists():
            logger.warning(
                "Config directory not found; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return

        yaml_files = sorted(config_dir.rglob("*.yaml")) + sorted(config_dir.rglob("*.yml"))
        loaded_count = 0

        for yaml_file in yaml_files:
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise ConfigInitializationError(
                    f"Invalid YAML in {yaml_file.relative_to(config_dir)}: {exc}"
                ) from exc

            if isinstance(data, dict):
                cls._deep_merge_dict(cls._defaults, data)
                loaded_count += 1
                logger.debug(
                    "Loaded YAML config",
                    extra={"file": str(yaml_file.relative_to(config_dir))},
                )
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={
                        "file": str(yaml_file.relative_to(config_dir)),
                        "root_type": type(data).__name__,
                    },
                )

        logger.info(
            "YAML configs loaded",
            extra={
                "yaml_file_count": loaded_count,
                "top_level_keys": sorted(cls._defaults),
            },
        )

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    @classmethod
    def initialize(cls, config_dir: Optional[Path] = None) -> None:
        """
        Load YAML defaults (idempotent).

        Parameters
        ----------
        config_dir:
            Directory to scan for ``*.yaml`` files. Defaults to
            ``Config.CONFIG_DIR``.

        Raises
        ------
        ConfigInitializationError
            If a YAML file is malformed.
        """
        if cls._initialized:
            return

        cls._config_dir = Path(config_dir) if config_dir else Config.CONFIG_DIR
        cls._defaults = {}
        cls._load_yaml_configs(cls._config_dir)
        cls._initialized = True

    # =========================================================================
    # READS
    # =========================================================================

    @staticmethod
    def _resolve(tree: Dict[str, Any], key: str) -> Any:
        value: Any = tree
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return _MISSING
            value = value[part]
        return value

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Parameters
        ----------
        key:
            Dot-notation config path (e.g. ``"skills.item_rate.base_per_minute"``).
        default:
            Value returned when the key is absent.
        """
        start_time = time.perf_counter()
        cls._metrics.gets += 1

        if not cls._initialized:
            logger.warning(
                "ConfigManager accessed before explicit initialization; "
                "loading defaults now"
            )
            cls.initialize()

        try:
            if key in cls._overrides:
                cls._metrics.cache_hits += 1
                return cls._overrides[key]

            value = cls._resolve(cls._defaults, key)
            if value is _MISSING or value is None:
                cls._metrics.cache_misses += 1
                return default

            cls._metrics.cache_hits += 1
            return value
        finally:
            cls._metrics.total_get_time_ms += (time.perf_counter() - start_time) * 1000

    @classmethod
    def get_all_keys(cls) -> List[str]:
        return sorted(set(cls._defaults) | {k.split(".")[0] for k in cls._overrides})

    # =========================================================================
    # WRITES
    # =========================================================================

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """Override a single dot-notation key in memory."""
        cls._overrides[key] = value
        cls._metrics.sets += 1
        logger.info(
            "Configuration override applied",
            extra={"config_key": key, "value": value},
        )

    @classmethod
    def reset_overrides(cls) -> None:
        cls._overrides.clear()

    @classmethod
    def clear_cache(cls) -> None:
        """
        Drop loaded defaults and overrides and reset initialization status.

        Intended for tests.
        """
        cls._defaults = {}
        cls._overrides.clear()
        cls._initialized = False

    # =========================================================================
    # METRICS
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Dict[str, Any]:
        gets = cls._metrics.gets
        return {
            "initialized": cls._initialized,
            "gets": gets,
            "sets": cls._metrics.sets,
            "cache_hit_rate": (cls._metrics.cache_hits / gets) if gets else 0.0,
            "avg_get_time_ms": (cls._metrics.total_get_time_ms / gets) if gets else 0.0,
            "override_count": len(cls._overrides),
        }

    @classmethod
    def reset_metrics(cls) -> None:
        cls._metrics.reset()
