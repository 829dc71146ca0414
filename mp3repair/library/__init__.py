# Library Model
# Artist/album/track graph, file name parsing, scanning and reconciliation

from .model import Library, Artist, Album, Track, BACKUP_DIRECTORY_NAME
from .names import parse_track_name, compose_track_name, canonicalize
from .search import SearchSettings, load, load_unfiltered, filter_library
from .reconcile import ConflictSet, reconcile, integrity_problems

__all__ = [
    'Library',
    'Artist',
    'Album',
    'Track',
    'BACKUP_DIRECTORY_NAME',
    'parse_track_name',
    'compose_track_name',
    'canonicalize',
    'SearchSettings',
    'load',
    'load_unfiltered',
    'filter_library',
    'ConflictSet',
    'reconcile',
    'integrity_problems',
]
