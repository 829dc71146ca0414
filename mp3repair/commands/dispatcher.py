#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command selection.

The entry point builds a Dispatcher from a list of CommandDescriptors.
The first command line argument names the command; when it is missing or
is a flag, the default command runs. The configuration file may name a
different default under "command: default".
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Set, Tuple

from ..config import ConfigManager
from ..errors import ConfigurationInvalid, UserInputInvalid
from ..output import OutputBus, quote, INFO
from .about import AboutCommand
from .base import BaseCommand
from .check import CheckCommand
from .export import ExportCommand
from .listing import ListCommand
from .postrepair import PostRepairCommand
from .repair import RepairCommand
from .resetdatabase import ResetDatabaseCommand

COMMAND_SECTION = "command"
DEFAULT_KEY = "default"


@dataclass(frozen=True)
class CommandDescriptor:
    """A command's name, whether it is the default, and how to create it"""
    name: str
    is_default: bool
    initializer: Callable[[ConfigManager, OutputBus], BaseCommand]


def default_descriptors() -> List[CommandDescriptor]:
    return [
        CommandDescriptor("about", False, AboutCommand),
        CommandDescriptor("check", False, CheckCommand),
        CommandDescriptor("export", False, ExportCommand),
        CommandDescriptor("list", True, ListCommand),
        CommandDescriptor("postRepair", False, PostRepairCommand),
        CommandDescriptor("repair", False, RepairCommand),
        CommandDescriptor("resetDatabase", False, ResetDatabaseCommand),
    ]


class Dispatcher:
    """Maps command line arguments to a command and runs it"""

    def __init__(self, descriptors: Dict[str, CommandDescriptor], default_name: str):
        self.descriptors = descriptors
        self.default_name = default_name

    def command_names(self) -> List[str]:
        return sorted(self.descriptors)

    def select(self, args: List[str]) -> Tuple[CommandDescriptor, List[str]]:
        """
        Pick the command for args (program name excluded).

        Returns:
            The descriptor and the arguments left for the command

        Raises:
            UserInputInvalid: the first argument names no command
        """
        if not args or args[0].startswith("-"):
            return self.descriptors[self.default_name], list(args)
        name = args[0]
        descriptor = self.descriptors.get(name)
        if descriptor is None:
            raise UserInputInvalid(
                f"There is no command named {quote(name)}; valid commands include {self.command_names()}"
            )
        return descriptor, list(args[1:])

    def dispatch(self, args: List[str], config: ConfigManager, bus: OutputBus) -> bool:
        """
        Create and run the selected command.

        Raises:
            UserInputInvalid: unknown command or bad flag values
            ConfigurationInvalid: the command's configured defaults are invalid
        """
        descriptor, remaining = self.select(args)
        bus.log(INFO, "command selected", {"command": descriptor.name, "args": remaining})
        command = descriptor.initializer(config, bus)
        return command.run(remaining)

    def known_configuration(self) -> Dict[str, Set[str]]:
        """Sections and keys the commands read from the configuration file"""
        known: Dict[str, Set[str]] = {COMMAND_SECTION: {DEFAULT_KEY}}
        for descriptor in self.descriptors.values():
            command_class = descriptor.initializer
            for section, flags in getattr(command_class, "sections", dict)().items():
                known.setdefault(section, set()).update(flag.name for flag in flags)
            known.setdefault(descriptor.name, set()).update(
                flag.name for flag in getattr(command_class, "FLAGS", [])
            )
        return known

    def warn_about_unknown_configuration(self, config: ConfigManager, bus: OutputBus) -> None:
        config.warn_unknown(bus, {section: dict.fromkeys(keys) for section, keys in self.known_configuration().items()})


def build_dispatcher(descriptors: List[CommandDescriptor], config: ConfigManager) -> Dispatcher:
    """
    Build a dispatcher from command descriptors.

    Exactly one descriptor must be the default unless the configuration
    names the default command.

    Raises:
        ValueError: duplicate names, or not exactly one default
        ConfigurationInvalid: the configured default names no command
    """
    by_name: Dict[str, CommandDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.name in by_name:
            raise ValueError(f"command {descriptor.name!r} is defined more than once")
        by_name[descriptor.name] = descriptor
    if not by_name:
        raise ValueError("no commands are defined")

    configured = config.string_default(COMMAND_SECTION, DEFAULT_KEY, "")
    if configured:
        if configured not in by_name:
            raise ConfigurationInvalid(
                COMMAND_SECTION, DEFAULT_KEY,
                f"{quote(configured)} is not a command; valid commands include {sorted(by_name)}"
            )
        return Dispatcher(by_name, configured)

    defaults = [d.name for d in descriptors if d.is_default]
    if len(defaults) != 1:
        raise ValueError(f"exactly one default command is required, found {len(defaults)}")
    return Dispatcher(by_name, defaults[0])
