"""
Compare what the filesystem says about a track with what its tag says.

The filesystem facts are the artist directory name, the album directory
name, and the track name and number parsed from the file name. Names are
canonicalized on both sides before comparison.
"""

from dataclasses import dataclass
from typing import List

from ..errors import NotReady
from ..output import quote
from .model import Track
from .names import names_differ

TAGS_NOT_RECOGNIZED = "differences cannot be determined: tags were not recognized"


@dataclass(frozen=True)
class ConflictSet:
    """Which of the four reconciled facts disagree"""
    numbering: bool = False
    title: bool = False
    album: bool = False
    artist: bool = False

    def any(self) -> bool:
        return self.numbering or self.title or self.album or self.artist

    def repair_clauses(self) -> List[str]:
        """Clauses for the repair plan, in fixed order"""
        clauses = []
        if self.numbering:
            clauses.append("track numbering")
        if self.title:
            clauses.append("track name")
        if self.album:
            clauses.append("album name")
        if self.artist:
            clauses.append("artist name")
        return clauses


def reconcile(track: Track) -> ConflictSet:
    """
    Compute the conflicts between a track's tag and its location.

    A track whose tag could not be read has no conflicts.

    Raises:
        NotReady: the track's tags have not been read yet
    """
    if not track.tags_read:
        raise NotReady(f"tags for {track.path} have not been read")
    if track.tag_read_error is not None or track.tag_data is None:
        return ConflictSet()
    tags = track.tag_data
    return ConflictSet(
        numbering=tags.track_number != track.parsed_number,
        title=names_differ(track.parsed_name, tags.title),
        album=names_differ(track.album_name, tags.album),
        artist=names_differ(track.artist_name, tags.artist),
    )


def integrity_problems(track: Track) -> List[str]:
    """
    Describe each disagreement between a track's tag and its location.

    Raises:
        NotReady: the track's tags have not been read yet
    """
    if not track.tags_read:
        raise NotReady(f"tags for {track.path} have not been read")
    if track.tag_read_error is not None or track.tag_data is None:
        return [TAGS_NOT_RECOGNIZED]
    conflicts = reconcile(track)
    tags = track.tag_data
    problems = []
    if conflicts.numbering:
        problems.append(f"metadata track number [{tags.track_number}] does not agree with track number {track.parsed_number}")
    if conflicts.title:
        problems.append(f"metadata track name [{quote(tags.title)}] does not agree with track name {quote(track.parsed_name)}")
    if conflicts.album:
        problems.append(f"metadata album name [{quote(tags.album)}] does not agree with album name {quote(track.album_name)}")
    if conflicts.artist:
        problems.append(f"metadata artist name [{quote(tags.artist)}] does not agree with artist name {quote(track.artist_name)}")
    return sorted(problems)
