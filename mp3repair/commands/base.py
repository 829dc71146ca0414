#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base class for commands.
All commands (list, check, repair, postRepair, resetDatabase, export,
about) inherit from this.
"""

import argparse
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..apppath import expand_references
from ..config import ConfigManager, IntBounds, parse_bool
from ..errors import UserInputInvalid
from ..library import search
from ..library.model import Library
from ..library.search import SearchSettings
from ..output import OutputBus, ERROR, INFO

COMMON_SECTION = "common"


@dataclass(frozen=True)
class Flag:
    """A command line flag and its built-in default"""
    name: str
    kind: type
    default: Any
    help: str
    bounds: Optional[IntBounds] = None

    @property
    def built_in_default(self) -> Any:
        if self.kind is int and self.bounds is not None:
            return self.bounds.default
        return self.default

    def configured_default(self, config: ConfigManager, section: str) -> Any:
        """
        Default after applying the configuration file.

        Raises:
            ConfigurationInvalid: the configured value has the wrong type
        """
        if self.kind is bool:
            return config.bool_default(section, self.name, self.default)
        if self.kind is int:
            return config.int_default(section, self.name, self.bounds)
        return config.string_default(section, self.name, self.default)


SEARCH_FLAGS: List[Flag] = [
    Flag("topDir", str, "~/Music", "top directory specifying where to find music files"),
    Flag("ext", str, search.DEFAULT_EXTENSION, "extension identifying music files"),
    Flag("artistFilter", str, search.DEFAULT_FILTER, "regular expression specifying which artists to select"),
    Flag("albumFilter", str, search.DEFAULT_FILTER, "regular expression specifying which albums to select"),
]


def _bool_value(value: str) -> bool:
    try:
        return parse_bool(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


class CommandParser(argparse.ArgumentParser):
    """ArgumentParser that raises UserInputInvalid instead of exiting"""

    def error(self, message: str):
        raise UserInputInvalid(f'{self.prog}: {message}')


class BaseCommand(ABC):
    """
    Abstract base class for commands.

    Subclasses declare their flags in FLAGS; flags shared by the commands
    that walk the library are added when USES_SEARCH_FLAGS is set. Flag
    defaults come from the configuration file section named after the
    command ("common" for the shared flags), falling back to the built-in
    defaults.
    """

    FLAGS: List[Flag] = []
    USES_SEARCH_FLAGS = False

    def __init__(self, config: ConfigManager, bus: OutputBus):
        """
        Initialize command with configuration and output bus.

        Args:
            config: ConfigManager instance
            bus: OutputBus instance

        Raises:
            ConfigurationInvalid: a configured default has the wrong type
        """
        self.config = config
        self.bus = bus
        self.defaults = self.resolve_defaults()
        self.parser = self.build_parser()

    @property
    @abstractmethod
    def name(self) -> str:
        """Command name as typed on the command line"""
        pass

    @abstractmethod
    def execute(self, options: argparse.Namespace) -> bool:
        """
        Run the command with parsed flag values.

        Returns:
            True on success
        """
        pass

    @classmethod
    def sections(cls) -> Dict[str, List[Flag]]:
        """Flags grouped by configuration section"""
        result: Dict[str, List[Flag]] = {}
        if cls.USES_SEARCH_FLAGS:
            result[COMMON_SECTION] = list(SEARCH_FLAGS)
        return result

    def resolve_defaults(self) -> Dict[str, Any]:
        defaults: Dict[str, Any] = {}
        for section, flags in self.sections().items():
            for flag in flags:
                defaults[flag.name] = flag.configured_default(self.config, section)
        for flag in self.FLAGS:
            defaults[flag.name] = flag.configured_default(self.config, self.name)
        return defaults

    def all_flags(self) -> List[Flag]:
        flags: List[Flag] = []
        for section_flags in self.sections().values():
            flags.extend(section_flags)
        return flags + list(self.FLAGS)

    def build_parser(self) -> CommandParser:
        parser = CommandParser(prog=self.name, add_help=False, allow_abbrev=False)
        parser.add_argument('-help', '-h', action='help', help="show this help message and exit")
        for flag in self.all_flags():
            default = self.defaults[flag.name]
            if flag.kind is bool:
                parser.add_argument(
                    f'-{flag.name}', dest=flag.name, nargs='?', const=True, default=default,
                    type=_bool_value, metavar='true|false', help=f"{flag.help} (default {str(default).lower()})"
                )
            elif flag.kind is int:
                parser.add_argument(
                    f'-{flag.name}', dest=flag.name, type=int, default=default,
                    help=f"{flag.help} (default {default})"
                )
            else:
                parser.add_argument(
                    f'-{flag.name}', dest=flag.name, type=str, default=default,
                    help=f"{flag.help} (default {default!r})".replace("%", "%%")
                )
        return parser

    def parse_args(self, args: List[str]) -> argparse.Namespace:
        """
        Parse command line arguments into flag values.

        Raises:
            UserInputInvalid: unknown flag, unparseable or out of range value
        """
        options = self.parser.parse_args(args)
        for flag in self.all_flags():
            value = getattr(options, flag.name)
            if flag.kind is str:
                setattr(options, flag.name, expand_references(value))
            elif flag.kind is int and flag.bounds is not None:
                if not flag.bounds.minimum <= value <= flag.bounds.maximum:
                    self.bus.log(ERROR, "flag value out of range", {
                        "command": self.name, f"-{flag.name}": value,
                        "minimum": flag.bounds.minimum, "maximum": flag.bounds.maximum,
                    })
                    raise UserInputInvalid(
                        f'The "-{flag.name}" value you specified, {value}, must be in the range '
                        f'{flag.bounds.minimum}..{flag.bounds.maximum}'
                    )
        return options

    def run(self, args: List[str]) -> bool:
        """Parse args and execute. Returns True on success."""
        return self.execute(self.parse_args(args))

    # ==================== Helpers ====================

    def log_fields(self, options: argparse.Namespace) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"command": self.name}
        for flag in self.FLAGS:
            fields[f"-{flag.name}"] = getattr(options, flag.name)
        return fields

    def log_start(self, options: argparse.Namespace) -> None:
        self.bus.log(INFO, "executing command", self.log_fields(options))

    def report_nothing_to_do(self, options: argparse.Namespace) -> None:
        self.bus.write_error(f'You disabled all functionality for the command "{self.name}".')
        self.bus.log(ERROR, "the user disabled all functionality", self.log_fields(options))

    def search_settings(self, options: argparse.Namespace) -> SearchSettings:
        """
        Validate the search flags.

        Raises:
            UserInputInvalid: a search flag value is invalid
        """
        return SearchSettings.from_values(
            top_dir=options.topDir,
            extension=options.ext,
            artist_filter=options.artistFilter,
            album_filter=options.albumFilter,
        )

    def load_library(self, settings: SearchSettings) -> Optional[Library]:
        """Filtered library, or None when nothing was found"""
        library = search.load(settings, self.bus)
        return None if library.is_empty else library
