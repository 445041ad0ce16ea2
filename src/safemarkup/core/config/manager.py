"""
safemarkup configuration management (YAML-only).
"""
from __future__ import annotations

import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from safemarkup.core.exceptions import ConfigError
from safemarkup.core.utils.merge import deep_merge
from safemarkup.data import get_data_path, read_yaml as read_bundled_yaml

logger = logging.getLogger(__name__)

try:
    import yaml  # type: ignore
except Exception as err:  # pragma: no cover - surfaced at import time
    raise RuntimeError("PyYAML is required: pip install pyyaml") from err

try:
    from jsonschema import Draft202012Validator  # type: ignore
except Exception as err:  # pragma: no cover - surfaced at import time
    raise RuntimeError("jsonschema is required: pip install jsonschema") from err


ENV_PREFIX = "SAFEMARKUP_"


class ConfigManager:
    """Load, merge, and validate safemarkup configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: SAFEMARKUP_<section>__<key>=value
    2. Project config: <config_dir>/*.yaml (alphabetical order)
    3. Bundled defaults: safemarkup.data/config/*.yaml (alphabetical order)
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = Path(config_dir) if config_dir is not None else None
        self.schema_path = get_data_path("schemas", "config.schema.yaml")

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(
                f"Failed to load config file {path}: {exc}",
                context={"path": str(path)},
            ) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file {path} must contain a mapping at the top level",
                context={"path": str(path)},
            )
        return data

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        if not directory.is_dir():
            return cfg
        for path in sorted(directory.glob("*.yaml")):
            logger.debug("Merging config file %s", path)
            cfg = deep_merge(cfg, self.load_yaml(path))
        return cfg

    # ========== Environment overrides ==========

    def _coerce_type(self, value: str) -> Any:
        s = value.strip()
        low = s.lower()
        if low in {"true", "false"}:
            return low == "true"
        if re.fullmatch(r"[-+]?\d+", s):
            return int(s)
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return s
        return s

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            segs = raw.split("__")
            if not raw or any(seg == "" for seg in segs):
                raise ConfigError(
                    f"Malformed {ENV_PREFIX}* key: '{key}'",
                    context={"key": key},
                )
            yield segs, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        current = root
        for i, seg in enumerate(path):
            # Match existing keys case-insensitively so env vars can address camelCase keys.
            match = next((k for k in current if isinstance(k, str) and k.lower() == seg.lower()), seg)
            if i == len(path) - 1:
                current[match] = value
                return
            child = current.get(match)
            if not isinstance(child, dict):
                child = {}
                current[match] = child
            current = child

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, value in self._iter_env_overrides():
            logger.debug("Applying env override %s", "__".join(path))
            self._set_nested(cfg, path, value)

    # ========== Validation ==========

    def validate_schema(self, cfg: Dict[str, Any]) -> None:
        schema = self.load_yaml(self.schema_path)
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(cfg), key=lambda e: list(e.path))
        if errors:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err.path) or '<root>'}: {err.message}" for err in errors
            )
            raise ConfigError(f"Invalid configuration: {details}", context={"errors": len(errors)})

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load the merged configuration.

        Bundled defaults are read through the cached data helper; project
        files and environment overrides are re-read on every call.
        """
        cfg: Dict[str, Any] = {}
        for path in sorted(self.core_config_dir.glob("*.yaml")):
            cfg = deep_merge(cfg, copy.deepcopy(read_bundled_yaml("config", path.name)))
        if self.project_config_dir is not None:
            cfg = self._load_directory(self.project_config_dir, cfg)
        self.apply_env_overrides(cfg)
        if validate:
            self.validate_schema(cfg)
        return cfg

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key.

        Example:
            >>> ConfigManager().get("markup.charset")
            'utf-8'
        """
        current: Any = self.load_config(validate=False)
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


__all__ = ["ConfigManager", "ENV_PREFIX"]
