#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
In-memory music library: artists own albums, albums own tracks.

Tracks and albums carry a reference to their parent, attached when they are
added, so reporting code can name a track's album and artist.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional

from ..errors import TagUnreadable
from ..tags.id3v2 import TagData, read_tag_data
from .names import parse_track_name

BACKUP_DIRECTORY_NAME = "pre-repair-backup"


@dataclass(eq=False)
class Track:
    """A track file in an album directory"""
    file_name: str
    directory: Path
    parsed_name: str
    parsed_number: int
    album: Optional["Album"] = field(default=None, repr=False, compare=False)
    tag_data: Optional[TagData] = None
    tag_read_error: Optional[str] = None

    @classmethod
    def from_file(cls, directory: Path, file_name: str, extension: str) -> "Track":
        parsed = parse_track_name(file_name, extension)
        return cls(
            file_name=file_name,
            directory=Path(directory),
            parsed_name=parsed.name,
            parsed_number=parsed.number,
        )

    @property
    def path(self) -> Path:
        return self.directory / self.file_name

    @property
    def tags_read(self) -> bool:
        return self.tag_data is not None or self.tag_read_error is not None

    @property
    def album_name(self) -> str:
        return self.album.name if self.album else ""

    @property
    def artist_name(self) -> str:
        if self.album and self.album.artist:
            return self.album.artist.name
        return ""

    def read_tags(self, force: bool = False) -> None:
        """
        Populate tag_data from the file, or record why it could not be read.

        Reads at most once unless force is set.
        """
        if self.tags_read and not force:
            return
        try:
            self.tag_data = read_tag_data(self.path)
            self.tag_read_error = None
        except TagUnreadable as e:
            self.tag_data = None
            self.tag_read_error = str(e)

    def copy(self) -> "Track":
        """Copy without a parent; tag data is shared"""
        return Track(
            file_name=self.file_name,
            directory=self.directory,
            parsed_name=self.parsed_name,
            parsed_number=self.parsed_number,
            tag_data=self.tag_data,
            tag_read_error=self.tag_read_error,
        )


@dataclass(eq=False)
class Album:
    """An album directory within an artist directory"""
    name: str
    path: Path
    artist: Optional["Artist"] = field(default=None, repr=False, compare=False)
    tracks: List[Track] = field(default_factory=list)

    @property
    def backup_directory(self) -> Path:
        return self.path / BACKUP_DIRECTORY_NAME

    def add_track(self, track: Track) -> Track:
        track.album = self
        self.tracks.append(track)
        return track

    def sort(self) -> None:
        self.tracks.sort(key=lambda t: (t.parsed_number, t.file_name))

    def copy(self) -> "Album":
        """Copy without a parent, tracks included"""
        album = Album(name=self.name, path=self.path)
        for track in self.tracks:
            album.add_track(track.copy())
        return album


@dataclass(eq=False)
class Artist:
    """An artist directory within the top directory"""
    name: str
    path: Path
    albums: List[Album] = field(default_factory=list)

    def add_album(self, album: Album) -> Album:
        album.artist = self
        self.albums.append(album)
        return album

    def sort(self) -> None:
        self.albums.sort(key=lambda a: a.name)
        for album in self.albums:
            album.sort()

    def copy(self) -> "Artist":
        artist = Artist(name=self.name, path=self.path)
        for album in self.albums:
            artist.add_album(album.copy())
        return artist


@dataclass(eq=False)
class Library:
    """All artists found under a top directory"""
    top_dir: Path
    artists: List[Artist] = field(default_factory=list)

    def add_artist(self, artist: Artist) -> Artist:
        self.artists.append(artist)
        return artist

    def sort(self) -> None:
        self.artists.sort(key=lambda a: a.name)
        for artist in self.artists:
            artist.sort()

    def albums(self) -> Iterator[Album]:
        for artist in self.artists:
            yield from artist.albums

    def tracks(self) -> Iterator[Track]:
        for album in self.albums():
            yield from album.tracks

    def read_tags(self, force: bool = False) -> None:
        """Read the tags of every track"""
        for track in self.tracks():
            track.read_tags(force=force)

    @property
    def is_empty(self) -> bool:
        return not self.artists
