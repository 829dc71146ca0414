#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
list command - shows artists, albums and tracks.

Tracks can be listed in track number order ("numeric", only meaningful
within an album) or by name ("alpha"), optionally with descriptive tag
details and ID3 diagnostics.
"""

import argparse
from typing import List

from ..errors import TagUnreadable
from ..library.model import Album, Track
from ..output import quote, ERROR, INFO, WARNING
from ..tags import describe_id3v2, read_details, read_id3v1
from .base import BaseCommand, Flag

NUMERIC_SORTING = "numeric"
ALPHABETIC_SORTING = "alpha"


class ListCommand(BaseCommand):
    """Lists the filtered library"""

    FLAGS = [
        Flag("includeArtists", bool, True, "include artist names in listing"),
        Flag("includeAlbums", bool, True, "include album names in listing"),
        Flag("includeTracks", bool, False, "include track names in listing"),
        Flag("annotate", bool, False, "annotate listings with album and artist data"),
        Flag("details", bool, False, "include details with tracks"),
        Flag("diagnostic", bool, False, "include diagnostic information with tracks"),
        Flag("sort", str, NUMERIC_SORTING,
             "track sorting, 'numeric' in track number order, or 'alpha' in track name order"),
    ]
    USES_SEARCH_FLAGS = True

    @property
    def name(self) -> str:
        return "list"

    def execute(self, options: argparse.Namespace) -> bool:
        if not (options.includeArtists or options.includeAlbums or options.includeTracks):
            self.report_nothing_to_do(options)
            return False
        settings = self.search_settings(options)
        self.log_start(options)
        if options.includeTracks and self.validate_sorting(options):
            self.bus.log(INFO, "one or more flags were overridden", self.log_fields(options))
        library = self.load_library(settings)
        if library is None:
            return False
        if options.includeArtists:
            for artist in library.artists:
                self.bus.write_console(f"Artist: {artist.name}")
                self.list_albums(options, artist.albums, "  ")
        else:
            albums = [album for artist in library.artists for album in artist.albums]
            self.list_albums(options, albums, "")
        return True

    def validate_sorting(self, options: argparse.Namespace) -> bool:
        """
        Settle the track sorting value.

        Returns:
            True if the value given was replaced
        """
        sorting = options.sort
        if sorting == ALPHABETIC_SORTING:
            return False
        if sorting == NUMERIC_SORTING:
            if options.includeAlbums:
                return False
            self.bus.write_error(
                f'The "-sort" value you specified, {quote(sorting)}, is not valid unless '
                f'"-includeAlbums" is true; track sorting will be alphabetic'
            )
            self.bus.log(WARNING, "numeric track sorting is not applicable", {
                "-sort": sorting, "-includeAlbums": options.includeAlbums,
            })
            options.sort = ALPHABETIC_SORTING
            return True
        self.bus.write_error(f'The "-sort" value you specified, {quote(sorting)}, is not valid')
        self.bus.log(WARNING, "flag value is not valid", {"command": self.name, "-sort": sorting})
        options.sort = NUMERIC_SORTING if options.includeAlbums else ALPHABETIC_SORTING
        return True

    def list_albums(self, options: argparse.Namespace, albums: List[Album], prefix: str) -> None:
        if not options.includeAlbums:
            tracks = [track for album in albums for track in album.tracks]
            self.list_tracks(options, tracks, prefix)
            return
        labelled = []
        for album in albums:
            if not options.includeArtists and options.annotate:
                artist_name = album.artist.name if album.artist else ""
                label = f"{quote(album.name)} by {quote(artist_name)}"
            else:
                label = album.name
            labelled.append((label, album))
        labelled.sort(key=lambda pair: pair[0])
        for label, album in labelled:
            self.bus.write_console(f"{prefix}Album: {label}")
            self.list_tracks(options, album.tracks, prefix + "  ")

    def track_label(self, options: argparse.Namespace, track: Track) -> str:
        if not options.annotate or options.includeAlbums:
            return track.parsed_name
        parts = [quote(track.parsed_name), "on", quote(track.album_name)]
        if not options.includeArtists:
            parts.extend(["by", quote(track.artist_name)])
        return " ".join(parts)

    def list_tracks(self, options: argparse.Namespace, tracks: List[Track], prefix: str) -> None:
        if not options.includeTracks:
            return
        if options.sort == NUMERIC_SORTING:
            for track in sorted(tracks, key=lambda t: (t.parsed_number, t.parsed_name)):
                self.bus.write_console(f"{prefix}{track.parsed_number:2d}. {track.parsed_name}")
                self.list_track_details(options, track, prefix + "  ")
                self.list_track_diagnostics(options, track, prefix + "  ")
        else:
            labelled = sorted(((self.track_label(options, t), t) for t in tracks), key=lambda pair: pair[0])
            for label, track in labelled:
                self.bus.write_console(f"{prefix}{label}")
                self.list_track_details(options, track, prefix + "  ")
                self.list_track_diagnostics(options, track, prefix + "  ")

    def list_track_details(self, options: argparse.Namespace, track: Track, prefix: str) -> None:
        if not options.details:
            return
        try:
            details = read_details(track.path)
        except TagUnreadable as e:
            self.bus.log(ERROR, "cannot get details", {"error": str(e), "track": str(track.path)})
            self.bus.write_error(
                f"The details are not available for track {quote(track.parsed_name)} on album "
                f"{quote(track.album_name)} by artist {quote(track.artist_name)}: {quote(str(e))}"
            )
            return
        if not details:
            return
        self.bus.write_console(f"{prefix}Details:")
        for key, value in details.items():
            self.bus.write_console(f"{prefix}  {key} = {quote(value)}")

    def list_track_diagnostics(self, options: argparse.Namespace, track: Track, prefix: str) -> None:
        if not options.diagnostic:
            return
        try:
            for line in describe_id3v2(track.path):
                self.bus.write_console(f"{prefix}{line}")
        except TagUnreadable as e:
            self.report_read_error(track, "ID3V2", str(e))
        try:
            v1 = read_id3v1(track.path)
        except OSError as e:
            self.report_read_error(track, "ID3V1", str(e))
            return
        if v1 is None:
            self.report_read_error(track, "ID3V1", "no ID3V1 tag found")
            return
        for line in v1.describe():
            self.bus.write_console(f"{prefix}{line}")

    def report_read_error(self, track: Track, metadata: str, error: str) -> None:
        self.bus.log(ERROR, "metadata read error", {"metadata": metadata, "track": str(track.path), "error": error})
