#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Scan the top directory into a Library.

Layout: <top dir>/<artist>/<album>/<track file>. Two loads are offered:
- unfiltered: everything, empty artists and albums included
- filtered: artist and album regular expressions applied, empty
  artists and albums dropped
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..errors import FilesystemUnavailable, UserInputInvalid
from ..output import OutputBus, ERROR, INFO, WARNING
from .model import Album, Artist, Library, Track

DEFAULT_EXTENSION = ".mp3"
DEFAULT_FILTER = ".*"
NO_MUSIC_FOUND = "No music files could be found using the specified parameters."


def validate_extension(extension: str, flag: str = "-ext") -> str:
    if not extension.startswith(".") or "." in extension[1:] or len(extension) < 2:
        raise UserInputInvalid(f'The {flag} value "{extension}" must contain exactly one \'.\' and \'.\' must be the first character')
    return extension


def compile_filter(pattern: str, flag: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise UserInputInvalid(f'The {flag} value "{pattern}" cannot be used: {e}') from e


@dataclass
class SearchSettings:
    """Where to look for music and which artists and albums to keep"""
    top_dir: Path
    extension: str
    artist_filter: re.Pattern
    album_filter: re.Pattern

    @classmethod
    def from_values(
        cls,
        top_dir: str,
        extension: str = DEFAULT_EXTENSION,
        artist_filter: str = DEFAULT_FILTER,
        album_filter: str = DEFAULT_FILTER
    ) -> "SearchSettings":
        """
        Validate raw flag values.

        Raises:
            UserInputInvalid: bad extension, bad regular expression, or a
                top directory that is not a directory
        """
        path = Path(top_dir)
        if not path.is_dir():
            raise UserInputInvalid(f'The -topDir value "{top_dir}" is not a directory')
        return cls(
            top_dir=path,
            extension=validate_extension(extension),
            artist_filter=compile_filter(artist_filter, "-artistFilter"),
            album_filter=compile_filter(album_filter, "-albumFilter"),
        )

    def artist_selected(self, name: str) -> bool:
        return self.artist_filter.search(name) is not None

    def album_selected(self, name: str) -> bool:
        return self.album_filter.search(name) is not None

    def is_track_file(self, name: str) -> bool:
        return name.lower().endswith(self.extension.lower())

    def to_fields(self) -> dict:
        return {
            "-topDir": str(self.top_dir),
            "-ext": self.extension,
            "-artistFilter": self.artist_filter.pattern,
            "-albumFilter": self.album_filter.pattern,
        }


def _list_directory(path: Path) -> List[os.DirEntry]:
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


def _read_directory(path: Path, bus: OutputBus) -> Optional[List[os.DirEntry]]:
    """Sorted entries of a directory, or None after reporting why it cannot be read."""
    try:
        return _list_directory(path)
    except OSError as e:
        bus.write_error(f'The directory "{path}" cannot be read: {e}')
        bus.log(ERROR, "cannot read directory", {"directory": str(path), "error": str(e)})
        return None


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file()
    except OSError:
        return False


def _scan(settings: SearchSettings, bus: OutputBus, filtered: bool) -> Library:
    library = Library(top_dir=settings.top_dir)
    try:
        artist_entries = _list_directory(settings.top_dir)
    except OSError as e:
        bus.log(ERROR, "cannot read directory", {"directory": str(settings.top_dir), "error": str(e)})
        raise FilesystemUnavailable(f'The directory "{settings.top_dir}" cannot be read: {e}') from e
    for artist_entry in artist_entries:
        if not _is_dir(artist_entry):
            continue
        if filtered and not settings.artist_selected(artist_entry.name):
            continue
        artist = Artist(name=artist_entry.name, path=Path(artist_entry.path))
        album_entries = _read_directory(artist.path, bus)
        for album_entry in album_entries or []:
            if not _is_dir(album_entry):
                continue
            if filtered and not settings.album_selected(album_entry.name):
                continue
            album = Album(name=album_entry.name, path=Path(album_entry.path))
            track_entries = _read_directory(album.path, bus)
            for track_entry in track_entries or []:
                if _is_file(track_entry) and settings.is_track_file(track_entry.name):
                    album.add_track(Track.from_file(album.path, track_entry.name, settings.extension))
            if filtered and not album.tracks:
                continue
            artist.add_album(album)
        if filtered and not artist.albums:
            continue
        library.add_artist(artist)
    library.sort()
    return library


def _warn_if_empty(library: Library, settings: SearchSettings, bus: OutputBus) -> None:
    if library.is_empty:
        bus.write_error(NO_MUSIC_FOUND)
        bus.log(WARNING, "cannot find any artist directories", settings.to_fields())


def load_unfiltered(settings: SearchSettings, bus: OutputBus) -> Library:
    """
    Load every artist, album and track under the top directory.

    Empty artists and albums are kept; directory read failures are
    reported and skipped.

    Raises:
        FilesystemUnavailable: the top directory cannot be read
    """
    library = _scan(settings, bus, filtered=False)
    _warn_if_empty(library, settings, bus)
    bus.log(INFO, "library loaded", {"filtered": False, "artists": len(library.artists)})
    return library


def load(settings: SearchSettings, bus: OutputBus) -> Library:
    """
    Load the artists and albums selected by the filters.

    Artists without selected albums and albums without tracks are dropped.
    When nothing is left the user is warned and an empty library returned.

    Raises:
        FilesystemUnavailable: the top directory cannot be read
    """
    library = _scan(settings, bus, filtered=True)
    _warn_if_empty(library, settings, bus)
    bus.log(INFO, "library loaded", {"filtered": True, "artists": len(library.artists)})
    return library


def filter_library(library: Library, settings: SearchSettings, bus: OutputBus) -> Library:
    """
    Apply the filters to a library that has already been loaded.

    Returns a pruned copy; the input is not changed and tag data is shared.
    """
    result = Library(top_dir=library.top_dir)
    for artist in library.artists:
        if not settings.artist_selected(artist.name):
            continue
        kept = Artist(name=artist.name, path=artist.path)
        for album in artist.albums:
            if album.tracks and settings.album_selected(album.name):
                kept.add_album(album.copy())
        if kept.albums:
            result.add_artist(kept)
    _warn_if_empty(result, settings, bus)
    return result
