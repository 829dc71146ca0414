#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Issue trees produced by the check command.

Each analysis (empty folders, numbering gaps, integrity) yields a tree of
artists, albums and tracks carrying issue strings. Trees are merged by
name and number, sorted, and pruned of nodes without issues before they
are reported.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..library.model import Album, Library
from ..library.reconcile import integrity_problems
from ..output import quote


@dataclass
class CheckedTrack:
    number: int
    name: str
    issues: List[str] = field(default_factory=list)

    @property
    def key(self) -> Tuple[int, str]:
        return (self.number, self.name)

    def has_issues(self) -> bool:
        return bool(self.issues)


@dataclass
class CheckedAlbum:
    name: str
    issues: List[str] = field(default_factory=list)
    tracks: List[CheckedTrack] = field(default_factory=list)

    def has_issues(self) -> bool:
        return bool(self.issues) or any(t.has_issues() for t in self.tracks)


@dataclass
class CheckedArtist:
    name: str
    issues: List[str] = field(default_factory=list)
    albums: List[CheckedAlbum] = field(default_factory=list)

    def has_issues(self) -> bool:
        return bool(self.issues) or any(a.has_issues() for a in self.albums)


def to_checked(library: Library) -> List[CheckedArtist]:
    """An issue-free tree mirroring the library"""
    checked = []
    for artist in library.artists:
        checked_artist = CheckedArtist(name=artist.name)
        for album in artist.albums:
            checked_album = CheckedAlbum(name=album.name)
            for track in album.tracks:
                checked_album.tracks.append(CheckedTrack(number=track.parsed_number, name=track.parsed_name))
            checked_artist.albums.append(checked_album)
        checked.append(checked_artist)
    return checked


def prune_and_sort(tree: List[CheckedArtist]) -> List[CheckedArtist]:
    """Copy of tree without issue-free nodes; every level sorted"""
    result = []
    for artist in tree:
        if not artist.has_issues():
            continue
        albums = []
        for album in artist.albums:
            if not album.has_issues():
                continue
            tracks = [
                CheckedTrack(number=t.number, name=t.name, issues=sorted(t.issues))
                for t in album.tracks if t.has_issues()
            ]
            tracks.sort(key=lambda t: t.key)
            albums.append(CheckedAlbum(name=album.name, issues=sorted(album.issues), tracks=tracks))
        albums.sort(key=lambda a: a.name)
        result.append(CheckedArtist(name=artist.name, issues=sorted(artist.issues), albums=albums))
    result.sort(key=lambda a: a.name)
    return result


def merge(*trees: List[CheckedArtist]) -> List[CheckedArtist]:
    """
    Union issue trees by artist name, album name and track number.

    Issue lists of matching nodes are concatenated. The inputs are not
    modified; the result is pruned and sorted, so the order of the inputs
    does not matter.
    """
    artists: Dict[str, CheckedArtist] = {}
    for tree in trees:
        for artist in tree:
            merged_artist = artists.setdefault(artist.name, CheckedArtist(name=artist.name))
            merged_artist.issues.extend(artist.issues)
            for album in artist.albums:
                merged_album = next((a for a in merged_artist.albums if a.name == album.name), None)
                if merged_album is None:
                    merged_album = CheckedAlbum(name=album.name)
                    merged_artist.albums.append(merged_album)
                merged_album.issues.extend(album.issues)
                for track in album.tracks:
                    merged_track = next((t for t in merged_album.tracks if t.key == track.key), None)
                    if merged_track is None:
                        merged_track = CheckedTrack(number=track.number, name=track.name)
                        merged_album.tracks.append(merged_track)
                    merged_track.issues.extend(track.issues)
    return prune_and_sort(list(artists.values()))


def render(tree: List[CheckedArtist]) -> List[str]:
    """Report lines for a merged tree"""
    lines = []
    for artist in tree:
        lines.append(artist.name)
        lines.extend(f"  {issue}" for issue in artist.issues)
        for album in artist.albums:
            lines.append(f"    {album.name}")
            lines.extend(f"      {issue}" for issue in album.issues)
            for track in album.tracks:
                lines.append(f"        {track.number:2d} {track.name}")
                lines.extend(f"          {issue}" for issue in track.issues)
    return lines


# ==================== Analyses ====================

def empty_folder_issues(library: Library) -> Tuple[List[CheckedArtist], bool]:
    """
    Flag artists without albums and albums without tracks.

    Expects an unfiltered library. Returns the tree and whether anything
    was found.
    """
    tree = to_checked(library)
    found = False
    for checked_artist, artist in zip(tree, library.artists):
        if not artist.albums:
            checked_artist.issues.append("no albums found")
            found = True
            continue
        for checked_album, album in zip(checked_artist.albums, artist.albums):
            if not album.tracks:
                checked_album.issues.append("no tracks found")
                found = True
    return tree, found


def gap_issues(album: Album) -> List[str]:
    """
    Numbering problems within one album.

    Reports reused numbers, numbers missing from 1..N (N tracks), and
    numbers outside 1..N+M where M is the count of missing numbers.
    """
    used: Dict[int, str] = {}
    issues = []
    for track in album.tracks:
        number = track.parsed_number
        if number in used:
            issues.append(f"track {number} used by {quote(used[number])} and {quote(track.parsed_name)}")
        else:
            used[number] = track.parsed_name
    track_count = len(album.tracks)
    missing = [n for n in range(1, track_count + 1) if n not in used]
    issues.extend(f"missing track {n}" for n in missing)
    highest = track_count + len(missing)
    for number, name in used.items():
        if number < 1 or number > highest:
            issues.append(
                f"track {number} ({quote(name)}) is not a valid track number; valid tracks are 1..{highest}"
            )
    return sorted(issues)


def gap_analysis(library: Library) -> Tuple[List[CheckedArtist], bool]:
    tree = to_checked(library)
    found = False
    for checked_artist, artist in zip(tree, library.artists):
        for checked_album, album in zip(checked_artist.albums, artist.albums):
            issues = gap_issues(album)
            if issues:
                checked_album.issues.extend(issues)
                found = True
    return tree, found


def integrity_analysis(library: Library) -> Tuple[List[CheckedArtist], bool]:
    """Read every track's tags and flag disagreements with the filesystem"""
    library.read_tags()
    tree = to_checked(library)
    found = False
    for checked_artist, artist in zip(tree, library.artists):
        for checked_album, album in zip(checked_artist.albums, artist.albums):
            for checked_track, track in zip(checked_album.tracks, album.tracks):
                problems = integrity_problems(track)
                if problems:
                    checked_track.issues.extend(problems)
                    found = True
    return tree, found
