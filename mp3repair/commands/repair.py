#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
repair command - rewrites track metadata to agree with the filesystem.

Responsibilities:
- Find tracks whose tags disagree with their artist, album and file names
- Report the planned repairs (-dryRun)
- Back up each track before touching it
- Rewrite only the conflicting frames
- Mark the library dirty after each successful rewrite
"""

import argparse
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Set

from ..config import ConfigManager
from ..errors import NoEditRequired, TagUnreadable, TagUnwritable
from ..library.model import Album, Library, Track
from ..library.reconcile import ConflictSet, reconcile
from ..output import OutputBus, quote, ERROR, INFO
from ..state import DirtyMarker
from ..tags import update_metadata
from .base import BaseCommand, Flag

NO_PROBLEMS_FOUND = "No repairable track defects found"


def conflicted_tracks(library: Library) -> List[Track]:
    """
    Tracks with at least one conflict, ordered by artist, album and number.

    Tags are read first for tracks that have not been read.
    """
    library.read_tags()
    tracks = [track for track in library.tracks() if reconcile(track).any()]
    tracks.sort(key=lambda t: (t.artist_name, t.album_name, t.parsed_number, t.file_name))
    return tracks


def repair_plan(tracks: List[Track]) -> List[str]:
    """Report lines grouped by artist and album"""
    lines = []
    last_artist: Optional[str] = None
    last_album: Optional[str] = None
    for track in tracks:
        if track.artist_name != last_artist:
            lines.append(quote(track.artist_name))
            last_artist = track.artist_name
            last_album = None
        if track.album_name != last_album:
            lines.append(f"    {quote(track.album_name)}")
            last_album = track.album_name
        clauses = "".join(f" {clause};" for clause in reconcile(track).repair_clauses())
        lines.append(f"        {track.parsed_number:2d} {quote(track.parsed_name)} need to repair{clauses}")
    return lines


def backup_path(track: Track) -> Path:
    return track.album.backup_directory / f"{track.parsed_number}.mp3"


class RepairExecutor:
    """
    Applies repairs in three phases: backup directories, backup copies,
    tag rewrites. A track is only rewritten once its backup is on disk.
    """

    def __init__(self, bus: OutputBus, marker: DirtyMarker):
        self.bus = bus
        self.marker = marker
        self.failures = 0

    def run(self, tracks: List[Track]) -> bool:
        """
        Repair every track.

        Returns:
            True if every track was backed up and rewritten
        """
        self.failures = 0
        albums = self.make_backup_directories(tracks)
        backed_up = self.backup_tracks([t for t in tracks if t.album in albums])
        self.failures += sum(1 for t in tracks if t.album not in albums)
        self.fix_tracks(backed_up)
        return self.failures == 0

    def make_backup_directories(self, tracks: List[Track]) -> Set[Album]:
        """Ensure each album's backup directory; returns the albums that have one"""
        albums: Dict[str, Album] = {}
        for track in tracks:
            albums.setdefault(str(track.album.path), track.album)
        ready: Set[Album] = set()
        for album_path in sorted(albums):
            album = albums[album_path]
            directory = album.backup_directory
            if directory.is_dir():
                ready.add(album)
                continue
            if directory.exists():
                self.report_directory_failure(directory, "file exists and is not a directory")
                continue
            try:
                directory.mkdir()
            except OSError as e:
                self.report_directory_failure(directory, str(e))
                continue
            ready.add(album)
        return ready

    def report_directory_failure(self, directory: Path, error: str) -> None:
        self.bus.write_error(f'The directory {quote(str(directory))} cannot be created: {error}.')
        self.bus.log(ERROR, "cannot create directory", {"command": "repair", "directory": str(directory), "error": error})

    def backup_tracks(self, tracks: List[Track]) -> List[Track]:
        """Copy each track to its backup file unless already there; returns backed-up tracks"""
        backed_up: List[Track] = []
        written: Dict[Path, Path] = {}
        for track in tracks:
            destination = backup_path(track)
            owner = written.get(destination)
            if owner is not None and owner != track.path:
                # another track with the same number already claimed this backup file
                self.report_backup_failure(track, destination, f"backup file already holds {owner}")
                continue
            if destination.exists():
                written[destination] = track.path
                backed_up.append(track)
                continue
            try:
                shutil.copyfile(track.path, destination)
            except OSError as e:
                self.report_backup_failure(track, destination, str(e))
                continue
            written[destination] = track.path
            self.bus.write_console(f"The track {quote(str(track.path))} has been backed up to {quote(str(destination))}.")
            backed_up.append(track)
        return backed_up

    def report_backup_failure(self, track: Track, destination: Path, error: str) -> None:
        self.failures += 1
        self.bus.write_error(f"The track {quote(str(track.path))} cannot be backed up.")
        self.bus.log(ERROR, "cannot copy file", {
            "command": "repair", "source": str(track.path), "destination": str(destination), "error": error,
        })

    def fix_tracks(self, tracks: List[Track]) -> None:
        for track in tracks:
            conflicts = reconcile(track)
            try:
                track.tag_data = update_metadata(track.path, **self.desired_values(track, conflicts))
            except NoEditRequired:
                self.bus.log(INFO, "no edit required", {"track": str(track.path)})
                continue
            except (TagUnreadable, TagUnwritable) as e:
                self.failures += 1
                self.bus.write_error(f"An error occurred repairing track {quote(str(track.path))}")
                self.bus.log(ERROR, "cannot edit track", {
                    "command": "repair", "directory": str(track.directory),
                    "fileName": track.file_name, "error": str(e),
                })
                continue
            track.tag_read_error = None
            self.marker.mark_dirty(self.bus)
            self.bus.write_console(f"{quote(str(track.path))} repaired.")

    @staticmethod
    def desired_values(track: Track, conflicts: ConflictSet) -> dict:
        return {
            "album": track.album_name if conflicts.album else None,
            "artist": track.artist_name if conflicts.artist else None,
            "title": track.parsed_name if conflicts.title else None,
            "track_number": track.parsed_number if conflicts.numbering else None,
        }


class RepairCommand(BaseCommand):
    """Repairs track metadata, or reports what a repair would do"""

    FLAGS = [
        Flag("dryRun", bool, False, "output what would have been repaired, but make no repairs"),
    ]
    USES_SEARCH_FLAGS = True

    def __init__(self, config: ConfigManager, bus: OutputBus, marker: Optional[DirtyMarker] = None):
        super().__init__(config, bus)
        self.marker = marker or DirtyMarker()

    @property
    def name(self) -> str:
        return "repair"

    def execute(self, options: argparse.Namespace) -> bool:
        settings = self.search_settings(options)
        self.log_start(options)
        library = self.load_library(settings)
        if library is None:
            return False
        tracks = conflicted_tracks(library)
        if not tracks:
            self.bus.write_console(NO_PROBLEMS_FOUND)
            return True
        if options.dryRun:
            for line in repair_plan(tracks):
                self.bus.write_console(line)
            return True
        return RepairExecutor(self.bus, self.marker).run(tracks)
