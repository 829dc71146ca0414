#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
export command - writes the built-in flag defaults as defaults.yaml.
"""

import argparse
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..apppath import ensure_application_path
from ..config import ConfigManager, DEFAULT_CONFIG_FILE_NAME
from ..output import OutputBus, quote, ERROR, INFO
from .base import BaseCommand, Flag


def defaults_content() -> Dict[str, Dict[str, Any]]:
    """Built-in defaults of every command, keyed by configuration section"""
    from .dispatcher import default_descriptors

    descriptors = default_descriptors()
    content: Dict[str, Dict[str, Any]] = {
        "command": {"default": next(d.name for d in descriptors if d.is_default)},
    }
    for descriptor in descriptors:
        command_class = descriptor.initializer
        for section, flags in command_class.sections().items():
            content[section] = {flag.name: flag.built_in_default for flag in flags}
        if command_class.FLAGS:
            content[descriptor.name] = {flag.name: flag.built_in_default for flag in command_class.FLAGS}
    return content


class ExportCommand(BaseCommand):
    """Exports the defaults to the configuration file"""

    FLAGS = [
        Flag("defaults", bool, False, "write default program settings to the configuration file"),
        Flag("overwrite", bool, False, "overwrite a file that already exists"),
    ]

    def __init__(self, config: ConfigManager, bus: OutputBus, app_path: Optional[Path] = None):
        super().__init__(config, bus)
        self.app_path = app_path

    @property
    def name(self) -> str:
        return "export"

    def execute(self, options: argparse.Namespace) -> bool:
        if not options.defaults:
            self.report_nothing_to_do(options)
            return False
        self.log_start(options)
        content = yaml.safe_dump(defaults_content(), default_flow_style=False, sort_keys=True)
        try:
            directory = self.app_path or ensure_application_path()
        except OSError as e:
            self.bus.write_error(f"The application directory cannot be created: {e}")
            self.bus.log(ERROR, "cannot create directory", {"error": str(e)})
            return False
        path = Path(directory) / DEFAULT_CONFIG_FILE_NAME
        if path.is_file():
            return self.overwrite_file(path, content, options.overwrite)
        return self.create_file(path, content)

    def overwrite_file(self, path: Path, content: str, overwrite: bool) -> bool:
        if not overwrite:
            self.bus.write_error(f"The file {quote(str(path))} exists; set the overwrite flag to true if you want it overwritten")
            self.bus.log(ERROR, "overwrite is not permitted", {"-overwrite": False, "fileName": str(path)})
            return False
        backup = path.with_name(path.name + "-backup")
        try:
            os.replace(path, backup)
        except OSError as e:
            self.bus.write_error(f"The file {quote(str(path))} cannot be renamed to {quote(str(backup))}: {e}")
            self.bus.log(ERROR, "rename failed", {"error": str(e), "old": str(path), "new": str(backup)})
            return False
        if not self.create_file(path, content):
            return False
        try:
            backup.unlink()
        except OSError as e:
            self.bus.log(ERROR, "cannot delete file", {"fileName": str(backup), "error": str(e)})
        return True

    def create_file(self, path: Path, content: str) -> bool:
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            self.bus.write_error(f"The file {quote(str(path))} cannot be created: {e}.")
            self.bus.log(ERROR, "cannot create file", {"command": self.name, "fileName": str(path), "error": str(e)})
            return False
        self.bus.log(INFO, "defaults exported", {"fileName": str(path)})
        return True
