"""Configuration loading utilities for the alteration monitor."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml # type: ignore

from .monitor import SCAN_INTERVAL_MIN

logger = logging.getLogger(__name__)

DEFAULT_CALLBACK_MODULE = "altermon.handlers"
DEFAULT_CALLBACK_FUNCTION = "log_changes"


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


@dataclass
class MonitorConfig:
    """Options describing which directories to watch and how."""

    directories: List[Path]
    scan_interval_min: float = SCAN_INTERVAL_MIN
    invokes_callback_for_each_file: bool = False
    recursive: bool = True
    include_patterns: List[str] = field(default_factory=list)
    exclude_patterns: List[str] = field(default_factory=list)


@dataclass
class CallbackConfig:
    """Handler invoked with detected changes, loaded by module and function name."""

    module: str = DEFAULT_CALLBACK_MODULE
    function: str = DEFAULT_CALLBACK_FUNCTION
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AppConfig:
    """Top-level configuration structure."""

    monitor: MonitorConfig
    callback: CallbackConfig = field(default_factory=CallbackConfig)


def load_config(path: Path) -> AppConfig:
    """Load and validate the YAML configuration file."""

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML configuration: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    monitor_cfg = _parse_monitor_config(data.get("monitor"), config_path=path)
    callback_cfg = _parse_callback_config(data.get("callback"))

    return AppConfig(monitor=monitor_cfg, callback=callback_cfg)


def _parse_monitor_config(raw: Any, *, config_path: Path) -> MonitorConfig:
    if not isinstance(raw, dict):
        raise ConfigError("'monitor' section must be a mapping")

    directories = _parse_directories(raw.get("directories"), config_path=config_path)

    interval = raw.get("scan_interval_min", SCAN_INTERVAL_MIN)
    if isinstance(interval, bool):
        raise ConfigError("monitor.scan_interval_min must be numeric")
    try:
        interval_val = float(interval)
    except (TypeError, ValueError) as exc:
        raise ConfigError("monitor.scan_interval_min must be numeric") from exc
    if interval_val <= 0:
        raise ConfigError("monitor.scan_interval_min must be positive")

    per_event = raw.get("invokes_callback_for_each_file", False)
    if not isinstance(per_event, bool):
        raise ConfigError("monitor.invokes_callback_for_each_file must be a boolean")

    recursive_flag = raw.get("recursive", True)
    if not isinstance(recursive_flag, bool):
        raise ConfigError("monitor.recursive must be a boolean")

    include_patterns = _ensure_str_list(raw.get("include_patterns", []), "monitor.include_patterns")
    exclude_patterns = _ensure_str_list(raw.get("exclude_patterns", []), "monitor.exclude_patterns")

    return MonitorConfig(
        directories=directories,
        scan_interval_min=interval_val,
        invokes_callback_for_each_file=per_event,
        recursive=recursive_flag,
        include_patterns=include_patterns,
        exclude_patterns=exclude_patterns,
    )


def _parse_directories(raw: Any, *, config_path: Path) -> List[Path]:
    names = _ensure_str_list(raw, "monitor.directories")
    if not names:
        raise ConfigError("monitor.directories must list at least one directory")

    directories: List[Path] = []
    for name in names:
        directory = Path(name)
        if not directory.is_absolute():
            directory = (config_path.parent / directory).resolve()
        if not directory.is_dir():
            raise ConfigError(f"Watch directory does not exist: {directory}")
        if directory in directories:
            logger.warning("Ignoring duplicate watch directory %s", directory)
            continue
        directories.append(directory)
    return directories


def _parse_callback_config(raw: Any) -> CallbackConfig:
    if raw is None:
        return CallbackConfig()
    if not isinstance(raw, dict):
        raise ConfigError("'callback' section must be a mapping")

    module = raw.get("module", DEFAULT_CALLBACK_MODULE)
    function = raw.get("function", DEFAULT_CALLBACK_FUNCTION)
    options = raw.get("options", {})

    if not isinstance(module, str) or not isinstance(function, str):
        raise ConfigError("callback.module and callback.function must be strings")
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ConfigError("callback.options must be a mapping if provided")

    logger.info("Using callback %s.%s", module, function)
    return CallbackConfig(module=module, function=function, options=options)


def _ensure_str_list(value: Any, field_name: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of strings")
    items: List[str] = []
    for elem in value:
        if not isinstance(elem, str):
            raise ConfigError(f"{field_name} must contain only strings")
        items.append(elem)
    return items
