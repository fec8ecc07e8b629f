"""Project configuration: defaults, ``tailshift.json`` loading and validation."""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tailshift.cascade.breakpoints import BREAKPOINT_TOLERANCE, BreakpointTable
from tailshift.mapper.theme import Theme
from tailshift.mapper.utilities import SPACING_TOLERANCE, UtilityMapper

__all__ = [
    "CONFIG_FILENAME",
    "ConfigValidationError",
    "TailshiftConfig",
    "apply_overrides",
    "load_config",
    "validate_config",
]

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "tailshift.json"

LOG_LEVELS = ("silent", "info", "verbose")
OUTPUT_MODES = ("write", "dry-run")

# camelCase key in the config file -> dataclass field.
_KEYS = {
    "include": "include",
    "exclude": "exclude",
    "ignoreSelectors": "ignore_selectors",
    "ignoreProperties": "ignore_properties",
    "disableArbitraryValues": "disable_arbitrary_values",
    "customSpacingScale": "custom_spacing_scale",
    "screens": "screens",
    "breakpointTolerance": "breakpoint_tolerance",
    "spacingTolerance": "spacing_tolerance",
    "logLevel": "log_level",
    "outputMode": "output_mode",
    "deleteCss": "delete_css",
    "skipExternal": "skip_external",
    "skipInternal": "skip_internal",
    "skipInline": "skip_inline",
}

_LIST_KEYS = ("include", "exclude", "ignoreSelectors", "ignoreProperties")
_BOOL_KEYS = ("disableArbitraryValues", "deleteCss", "skipExternal", "skipInternal", "skipInline")
_TOLERANCE_KEYS = ("breakpointTolerance", "spacingTolerance")


class ConfigValidationError(Exception):
    """Raised when a configuration file has one or more problems."""

    def __init__(self, errors: list[str], path: str | None = None) -> None:
        self.errors = errors
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(
            f"Invalid configuration{where} ({len(errors)} error(s)): " + "; ".join(errors)
        )


@dataclass(frozen=True)
class TailshiftConfig:
    include: tuple[str, ...] = (
        "**/*.css",
        "**/*.html",
        "**/*.htm",
        "**/*.js",
        "**/*.jsx",
        "**/*.tsx",
    )
    exclude: tuple[str, ...] = (
        "**/node_modules/**",
        "**/.git/**",
        "**/.next/**",
        "**/dist/**",
        "**/build/**",
        "**/coverage/**",
        "**/*.min.js",
        "**/.tailshift-backups/**",
    )
    ignore_selectors: tuple[str, ...] = ()
    ignore_properties: tuple[str, ...] = ()
    disable_arbitrary_values: bool = False
    custom_spacing_scale: Mapping[str, str] = field(default_factory=dict)
    screens: Mapping[str, Any] = field(default_factory=dict)
    breakpoint_tolerance: float = BREAKPOINT_TOLERANCE
    spacing_tolerance: float = SPACING_TOLERANCE
    log_level: str = "info"
    output_mode: str = "write"
    delete_css: bool = False
    skip_external: bool = False
    skip_internal: bool = False
    skip_inline: bool = False

    @property
    def dry_run(self) -> bool:
        return self.output_mode == "dry-run"

    def theme(self) -> Theme:
        return Theme().with_overrides(
            spacing=self.custom_spacing_scale or None, screens=self.screens or None
        )

    def breakpoint_table(self) -> BreakpointTable:
        if self.screens:
            return BreakpointTable.from_screens(self.screens, tolerance=self.breakpoint_tolerance)
        return BreakpointTable.default(tolerance=self.breakpoint_tolerance)

    def mapper(self) -> UtilityMapper:
        return UtilityMapper(
            self.theme(),
            spacing_tolerance=self.spacing_tolerance,
            allow_arbitrary=not self.disable_arbitrary_values,
        )

    def is_ignored_selector(self, selector: str) -> bool:
        return selector.strip() in self.ignore_selectors

    def is_ignored_property(self, prop: str) -> bool:
        return prop.strip().lower() in {p.lower() for p in self.ignore_properties}


def _is_string_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def validate_config(raw: object) -> list[str]:
    """Return every problem found in a raw configuration mapping."""
    if raw is None:
        return []
    if not isinstance(raw, dict):
        return ["Configuration must be an object"]

    errors = [f'Unknown configuration key: "{key}"' for key in raw if key not in _KEYS]

    for key in _LIST_KEYS:
        if key in raw and not _is_string_list(raw[key]):
            errors.append(f'"{key}" must be an array of strings')
    for key in _BOOL_KEYS:
        if key in raw and not isinstance(raw[key], bool):
            errors.append(f'"{key}" must be a boolean')
    for key in _TOLERANCE_KEYS:
        if key in raw:
            value = raw[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                errors.append(f'"{key}" must be a non-negative number')

    if "customSpacingScale" in raw:
        scale = raw["customSpacingScale"]
        if not isinstance(scale, dict):
            errors.append('"customSpacingScale" must be an object')
        else:
            for name, value in scale.items():
                if not isinstance(value, str):
                    errors.append(f'"customSpacingScale.{name}" must be a string')

    if "screens" in raw:
        screens = raw["screens"]
        if not isinstance(screens, dict):
            errors.append('"screens" must be an object')
        else:
            try:
                BreakpointTable.from_screens(screens)
            except ValueError as e:
                errors.append(f'"screens": {e}')

    if "logLevel" in raw and raw["logLevel"] not in LOG_LEVELS:
        errors.append(f'"logLevel" must be one of: {", ".join(LOG_LEVELS)}')
    if "outputMode" in raw and raw["outputMode"] not in OUTPUT_MODES:
        errors.append(f'"outputMode" must be one of: {", ".join(OUTPUT_MODES)}')
    return errors


def config_from_mapping(raw: Mapping[str, Any]) -> TailshiftConfig:
    """Build a config from an already validated camelCase mapping."""
    values: dict[str, Any] = {}
    for key, value in raw.items():
        name = _KEYS[key]
        if key in _LIST_KEYS:
            value = tuple(value)
        elif key in _TOLERANCE_KEYS:
            value = float(value)
        values[name] = value
    return TailshiftConfig(**values)


def load_config(root: str | Path, path: str | Path | None = None) -> TailshiftConfig:
    """Load ``tailshift.json`` from *root*, or the explicit *path*.

    A missing default file yields the defaults; a missing explicit file,
    malformed JSON or invalid keys raise :class:`ConfigValidationError`.
    """
    config_path = Path(path) if path is not None else Path(root) / CONFIG_FILENAME
    if not config_path.is_file():
        if path is not None:
            raise ConfigValidationError([f"Config file not found: {config_path}"])
        logger.debug("No %s in %s, using defaults", CONFIG_FILENAME, root)
        return TailshiftConfig()

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigValidationError(
            [f"Malformed JSON at line {e.lineno}, column {e.colno}: {e.msg}"],
            path=str(config_path),
        ) from e

    errors = validate_config(raw)
    if errors:
        raise ConfigValidationError(errors, path=str(config_path))
    logger.info("Loaded configuration from %s", config_path)
    return config_from_mapping(raw or {})


def apply_overrides(config: TailshiftConfig, **overrides: Any) -> TailshiftConfig:
    """Return a copy of *config* with the non-``None`` CLI overrides applied."""
    changes = {name: value for name, value in overrides.items() if value is not None}
    if not changes:
        return config
    return dataclasses.replace(config, **changes)
