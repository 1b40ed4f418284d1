"""
Config system - Layered configuration for an analysis run.

Merge order (later overrides earlier):
1. Built-in defaults
2. YAML file (--config)
3. Environment variables (WARMAP_* prefix, '__' separates nested keys)
4. Explicit overrides (CLI flags)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .faults import ConfigFault


DEFAULTS: Dict[str, Any] = {
    "display": {
        "show_jsp": True,
        "show_html": True,
        "show_static": False,
        "show_request_params": False,
    },
    "spring": {
        "dispatcher_servlet": "org.springframework.web.servlet.DispatcherServlet",
        "context_listener": "org.springframework.web.context.ContextLoaderListener",
        "root_context": "/WEB-INF/applicationContext.xml",
        "scan_annotations": [
            "org.springframework.stereotype.Controller",
            "org.springframework.stereotype.Component",
            "org.springframework.stereotype.Service",
            "org.springframework.stereotype.Repository",
            "org.springframework.web.bind.annotation.RestController",
        ],
        "controller_annotations": [
            "org.springframework.stereotype.Controller",
            "org.springframework.web.bind.annotation.RestController",
        ],
    },
}


@dataclass
class DisplayConfig:
    """Which destination kinds the report shows."""
    show_jsp: bool = True
    show_html: bool = True
    show_static: bool = False
    show_request_params: bool = False


@dataclass
class SpringConfig:
    """Class names and defaults of the Spring conventions being replicated."""
    dispatcher_servlet: str = DEFAULTS["spring"]["dispatcher_servlet"]
    context_listener: str = DEFAULTS["spring"]["context_listener"]
    root_context: str = DEFAULTS["spring"]["root_context"]
    scan_annotations: List[str] = field(default_factory=lambda: list(DEFAULTS["spring"]["scan_annotations"]))
    controller_annotations: List[str] = field(
        default_factory=lambda: list(DEFAULTS["spring"]["controller_annotations"])
    )


@dataclass
class WarmapConfig:
    """Typed view of the merged configuration."""
    display: DisplayConfig = field(default_factory=DisplayConfig)
    spring: SpringConfig = field(default_factory=SpringConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WarmapConfig":
        """
        Build a typed config from merged data.

        Raises:
            ConfigFault: A section is not a mapping, a key is unknown, or a
                value has the wrong type
        """
        return cls(
            display=_section(DisplayConfig, "display", data.get("display", {})),
            spring=_section(SpringConfig, "spring", data.get("spring", {})),
        )


def _section(section_cls, name: str, data: Any):
    if not isinstance(data, dict):
        raise ConfigFault(name, f"expected a mapping, got {type(data).__name__}")

    defaults = DEFAULTS[name]
    values = {}
    for key, value in data.items():
        if key not in defaults:
            raise ConfigFault(f"{name}.{key}", "unknown key")
        expected = defaults[key]
        if isinstance(expected, list):
            if isinstance(value, str):
                value = [v for v in (p.strip() for p in value.split(",")) if v]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigFault(f"{name}.{key}", "expected a list of strings")
        elif not isinstance(value, type(expected)):
            raise ConfigFault(f"{name}.{key}", f"expected {type(expected).__name__}, got {type(value).__name__}")
        values[key] = value
    return section_cls(**values)


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Usage:
        ```python
        config = ConfigLoader.load(path="warmap.yaml", overrides={"display": {"show_static": True}}).to_config()
        ```
    """

    def __init__(self, env_prefix: str = "WARMAP_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = json.loads(json.dumps(DEFAULTS))

    @classmethod
    def load(
        cls,
        path: Optional[Union[str, Path]] = None,
        env_prefix: str = "WARMAP_",
        environ: Optional[Dict[str, str]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration with the documented merge order.

        Args:
            path: Optional YAML file
            env_prefix: Prefix for environment variables
            environ: Environment to read (defaults to os.environ)
            overrides: Explicit overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        if path is not None:
            loader._load_yaml_file(Path(path))

        loader._load_from_env(os.environ if environ is None else environ)

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigFault(str(path), f"cannot read file: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigFault(str(path), f"invalid YAML: {e}") from e

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigFault(str(path), "top level must be a mapping")
        self._merge_dict(self.config_data, data)

    def _load_from_env(self, environ: Dict[str, str]):
        """Load config from environment variables."""
        for key, value in environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert WARMAP_DISPLAY__SHOW_STATIC to nested dict."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False

        if value.startswith("["):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def to_config(self) -> WarmapConfig:
        return WarmapConfig.from_dict(self.config_data)
