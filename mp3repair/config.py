#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration management for mp3repair.
Loads defaults.yaml from the application directory and decodes typed
flag defaults with environment variable support.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .apppath import application_path, expand_references
from .errors import ConfigurationInvalid
from .output import OutputBus, WARNING

DEFAULT_CONFIG_FILE_NAME = "defaults.yaml"

_TRUE_STRINGS = {'1', 't', 'true', 'yes', 'y', 'on'}
_FALSE_STRINGS = {'0', 'f', 'false', 'no', 'n', 'off'}


@dataclass(frozen=True)
class IntBounds:
    """Inclusive bounds and default for an integer flag"""
    minimum: int
    default: int
    maximum: int

    def constrain(self, value: int) -> int:
        return max(self.minimum, min(value, self.maximum))


def parse_bool(value: str) -> bool:
    """Parse a boolean spelled the way flag values and YAML strings spell it."""
    lowered = value.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean value {value!r}")


class ConfigManager:
    """
    Configuration manager that loads flag defaults from a YAML file.

    The file is a mapping of section (command name, "common" or "command")
    to a mapping of flag name to default value. A missing file is the same
    as an empty one.
    """

    def __init__(self, config_path: Optional[Path] = None, data: Optional[Dict[str, Any]] = None):
        self.config_path = Path(config_path) if config_path else application_path() / DEFAULT_CONFIG_FILE_NAME
        self._config: Dict[str, Any] = {}
        if data is not None:
            self._config = data
        else:
            self.load()

    @classmethod
    def empty(cls) -> "ConfigManager":
        return cls(config_path=Path(DEFAULT_CONFIG_FILE_NAME), data={})

    def load(self) -> None:
        """Load the configuration file, if there is one"""
        if not self.config_path.exists():
            self._config = {}
            return
        if self.config_path.is_dir():
            raise ConfigurationInvalid("", "", f"{self.config_path} is a directory, not a file")
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationInvalid("", "", f"{self.config_path} cannot be parsed: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationInvalid("", "", f"{self.config_path} does not contain a mapping")
        self._config = data

    def section(self, name: str) -> Dict[str, Any]:
        value = self._config.get(name)
        return value if isinstance(value, dict) else {}

    def warn_unknown(self, bus: OutputBus, known: Dict[str, Dict[str, Any]]) -> None:
        """Warn about sections and keys no command recognizes; they are ignored."""
        for section_name, content in self._config.items():
            if section_name not in known:
                bus.write_error(f'Warning: the configuration file section "{section_name}" is not recognized and will be ignored')
                bus.log(WARNING, "unknown configuration section", {"section": section_name})
                continue
            if not isinstance(content, dict):
                raise ConfigurationInvalid(str(section_name), "", "section content is not a mapping")
            for key in content:
                if key not in known[section_name]:
                    bus.write_error(
                        f'Warning: the configuration file key "{key}" in section "{section_name}" is not recognized and will be ignored'
                    )
                    bus.log(WARNING, "unknown configuration key", {"section": section_name, "key": key})

    # ==================== Typed defaults ====================

    def bool_default(self, section: str, key: str, default: bool) -> bool:
        value = self.section(section).get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return parse_bool(expand_references(value))
            except ValueError as e:
                raise ConfigurationInvalid(section, key, str(e)) from e
        raise ConfigurationInvalid(section, key, f"expected a boolean, found {type(value).__name__} {value!r}")

    def string_default(self, section: str, key: str, default: str) -> str:
        value = self.section(section).get(key)
        if value is None:
            return expand_references(default)
        if isinstance(value, str):
            return expand_references(value)
        raise ConfigurationInvalid(section, key, f"expected a string, found {type(value).__name__} {value!r}")

    def int_default(self, section: str, key: str, bounds: IntBounds) -> int:
        value = self.section(section).get(key)
        if value is None:
            return bounds.default
        if isinstance(value, bool):
            raise ConfigurationInvalid(section, key, f"expected an integer, found boolean {value!r}")
        if isinstance(value, int):
            return bounds.constrain(value)
        if isinstance(value, str):
            try:
                return bounds.constrain(int(expand_references(value).strip()))
            except ValueError as e:
                raise ConfigurationInvalid(section, key, str(e)) from e
        raise ConfigurationInvalid(section, key, f"expected an integer, found {type(value).__name__} {value!r}")

    def __repr__(self) -> str:
        return f"ConfigManager(config={self.config_path})"
