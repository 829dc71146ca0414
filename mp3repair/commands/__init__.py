# mp3repair Commands
# One class per command line command, plus the dispatcher that picks one

from .base import BaseCommand, Flag, SEARCH_FLAGS
from .about import AboutCommand
from .check import CheckCommand
from .export import ExportCommand
from .listing import ListCommand
from .postrepair import PostRepairCommand
from .repair import RepairCommand
from .resetdatabase import ResetDatabaseCommand
from .dispatcher import CommandDescriptor, Dispatcher, build_dispatcher, default_descriptors

__all__ = [
    'BaseCommand',
    'Flag',
    'SEARCH_FLAGS',
    'AboutCommand',
    'CheckCommand',
    'ExportCommand',
    'ListCommand',
    'PostRepairCommand',
    'RepairCommand',
    'ResetDatabaseCommand',
    'CommandDescriptor',
    'Dispatcher',
    'build_dispatcher',
    'default_descriptors',
]
