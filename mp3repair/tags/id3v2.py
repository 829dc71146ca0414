#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ID3V2 tag reading and writing, built on mutagen.

Only four frames matter for reconciliation:
- TALB: album name
- TPE1: artist name
- TIT2: track title
- TRCK: track number ("n" or "n/total")

MCDI (music CD identifier) is captured as a fingerprint showing that the
tag was actually read. Everything else passes through a rewrite untouched.
"""

import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from mutagen import MutagenError
from mutagen.id3 import (
    ID3, ID3NoHeaderError, ID3v1SaveOptions, Encoding,
    TALB, TPE1, TIT2, TRCK,
)

from ..errors import NoEditRequired, TagUnreadable, TagUnwritable
from .id3v1 import read_trailer_bytes

BYTE_ORDER_MARK = "\ufeff"

ALBUM_FRAME = "TALB"
ARTIST_FRAME = "TPE1"
TITLE_FRAME = "TIT2"
TRACK_FRAME = "TRCK"
FINGERPRINT_FRAME = "MCDI"

_FRAME_CLASSES = {
    ALBUM_FRAME: TALB,
    ARTIST_FRAME: TPE1,
    TITLE_FRAME: TIT2,
    TRACK_FRAME: TRCK,
}

# Descriptive frames shown by "list -details"
DETAIL_FRAMES = {
    "TCOM": "Composer",
    "TEXT": "Lyricist",
    "TIT3": "Subtitle",
    "TIT1": "Content Group",
    "TKEY": "Key",
    "TBPM": "BPM",
    "TPE3": "Conductor",
    "TPE2": "Orchestra/Band",
    "TPE4": "Remixer",
    "TSRC": "ISRC",
    "TPUB": "Publisher",
    "TENC": "Encoder",
}

_TRACK_PATTERN = re.compile(r'^([0-9]+)')


@dataclass
class TagData:
    """The reconciliation facts held in a track's ID3V2 tag"""
    album: str
    artist: str
    title: str
    track_number: int
    fingerprint: bytes = b""


def _clean(value: str) -> str:
    return value.lstrip(BYTE_ORDER_MARK)


def _text(tags: ID3, frame_id: str) -> str:
    frame = tags.get(frame_id)
    if frame is None or not frame.text:
        return ""
    return _clean("/".join(str(t) for t in frame.text))


def parse_track_frame(value: str) -> int:
    """
    Interpret TRCK text.

    Returns 0 for an empty value; raises ValueError when the value does not
    start with a digit.
    """
    value = _clean(value).strip()
    if not value:
        return 0
    match = _TRACK_PATTERN.match(value)
    if not match:
        raise ValueError(f"invalid track number {value!r}")
    return int(match.group(1))


def load_tags(path: Union[str, Path]) -> ID3:
    """
    Load the ID3V2 tag of a file.

    Raises:
        TagUnreadable: no ID3V2 header, or the tag cannot be parsed
    """
    try:
        return ID3(str(path), load_v1=False)
    except ID3NoHeaderError as e:
        raise TagUnreadable(f"no ID3V2 tag found in {path}: {e}") from e
    except (MutagenError, OSError, ValueError) as e:
        raise TagUnreadable(f"ID3V2 tag in {path} cannot be read: {e}") from e


def tag_data_from(tags: ID3) -> TagData:
    try:
        track_number = parse_track_frame(_text(tags, TRACK_FRAME))
    except ValueError as e:
        raise TagUnreadable(str(e)) from e
    fingerprint = tags.get(FINGERPRINT_FRAME)
    return TagData(
        album=_text(tags, ALBUM_FRAME),
        artist=_text(tags, ARTIST_FRAME),
        title=_text(tags, TITLE_FRAME),
        track_number=track_number,
        fingerprint=bytes(fingerprint.data) if fingerprint is not None else b"",
    )


def read_tag_data(path: Union[str, Path]) -> TagData:
    """
    Read the reconciliation facts from a file's ID3V2 tag.

    Args:
        path: audio file path

    Returns:
        TagData; a missing TRCK frame reads as track number 0

    Raises:
        TagUnreadable: the tag is missing or unparseable
    """
    return tag_data_from(load_tags(path))


def _choose_encoding(existing: Optional[Encoding], text: str, major: int) -> Encoding:
    fallback = Encoding.UTF8 if major == 4 else Encoding.UTF16
    if existing is None:
        existing = Encoding.LATIN1
    if existing == Encoding.LATIN1:
        try:
            text.encode('latin-1')
            return Encoding.LATIN1
        except UnicodeEncodeError:
            return fallback
    if major != 4 and existing in (Encoding.UTF16BE, Encoding.UTF8):
        return Encoding.UTF16
    return existing


def _track_text(tags: ID3, number: int) -> str:
    """New TRCK text for number, keeping any "/total" suffix."""
    current = _text(tags, TRACK_FRAME)
    if "/" in current:
        return f"{number}/{current.split('/', 1)[1]}"
    return str(number)


def _pending_changes(
    tags: ID3,
    album: Optional[str],
    artist: Optional[str],
    title: Optional[str],
    track_number: Optional[int]
) -> Dict[str, str]:
    changes: Dict[str, str] = {}
    for frame_id, value in ((ALBUM_FRAME, album), (ARTIST_FRAME, artist), (TITLE_FRAME, title)):
        if value is not None and _text(tags, frame_id) != value:
            changes[frame_id] = value
    if track_number is not None:
        try:
            current: Optional[int] = parse_track_frame(_text(tags, TRACK_FRAME))
        except ValueError:
            current = None
        if current != track_number:
            changes[TRACK_FRAME] = _track_text(tags, track_number)
    return changes


def update_metadata(
    path: Union[str, Path],
    album: Optional[str] = None,
    artist: Optional[str] = None,
    title: Optional[str] = None,
    track_number: Optional[int] = None
) -> TagData:
    """
    Rewrite the reconciliation frames of a file's ID3V2 tag.

    Only supplied values that differ from the file are written. The new tag
    is written to a temporary copy in the same directory which then replaces
    the original, so the file is either fully updated or untouched. The tag
    keeps its major version and any ID3V1 trailer is kept byte for byte.

    Args:
        path: audio file path
        album: new TALB value, or None to leave it alone
        artist: new TPE1 value, or None to leave it alone
        title: new TIT2 value, or None to leave it alone
        track_number: new TRCK number, or None to leave it alone

    Returns:
        TagData read back from the rewritten file

    Raises:
        TagUnreadable: the existing tag cannot be parsed
        NoEditRequired: the file already holds the requested values
        TagUnwritable: the rewritten file could not be produced
    """
    path = Path(path)
    tags = load_tags(path)
    changes = _pending_changes(tags, album, artist, title, track_number)
    if not changes:
        raise NoEditRequired(f"no edit required for {path}")

    major = 4 if tags.version[1] == 4 else 3
    for frame_id, text in changes.items():
        existing = tags.get(frame_id)
        encoding = _choose_encoding(existing.encoding if existing is not None else None, text, major)
        tags.setall(frame_id, [_FRAME_CLASSES[frame_id](encoding=encoding, text=[text])])

    try:
        trailer = read_trailer_bytes(path)
    except OSError as e:
        raise TagUnwritable(f"{path} cannot be read: {e}") from e

    try:
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        os.close(fd)
    except OSError as e:
        raise TagUnwritable(f"temporary file for {path} cannot be created: {e}") from e
    try:
        shutil.copyfile(path, temp_name)
        shutil.copymode(path, temp_name)
        if major == 3:
            tags.update_to_v23()
        tags.save(temp_name, v1=ID3v1SaveOptions.REMOVE, v2_version=major)
        with open(temp_name, 'ab') as f:
            if trailer:
                f.write(trailer)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_name, path)
    except (MutagenError, OSError) as e:
        try:
            os.remove(temp_name)
        except OSError:
            pass
        raise TagUnwritable(f"{path} cannot be rewritten: {e}") from e

    return read_tag_data(path)


# ==================== Diagnostics ====================

def _encoding_name(frame) -> str:
    try:
        return Encoding(frame.encoding).name
    except (AttributeError, ValueError):
        return "none"


def describe_frame(frame) -> str:
    """One diagnostic line for a frame"""
    frame_id = frame.FrameID
    if frame_id == FINGERPRINT_FRAME:
        return f"{frame_id} = {bytes(frame.data).hex(' ')}"
    if frame_id == "APIC":
        return f"{frame_id} = {frame.mime} picture, type {int(frame.type)}, {len(frame.data)} bytes"
    if hasattr(frame, 'text') and frame_id.startswith('T'):
        values = [_clean(str(t)) for t in frame.text]
        return f"{frame_id} = {_encoding_name(frame)} {values!r}"
    return f"{frame_id} = {frame.pprint()}"


def describe_id3v2(path: Union[str, Path]) -> List[str]:
    """
    Diagnostic lines for a file's ID3V2 tag: version, then one line per frame.

    Raises:
        TagUnreadable: the tag is missing or unparseable
    """
    tags = load_tags(path)
    lines = [f"ID3V2 Version: {tags.version[1]}"]
    for key in sorted(tags.keys()):
        lines.append(f"ID3V2 {describe_frame(tags[key])}")
    return lines


def read_details(path: Union[str, Path]) -> Dict[str, str]:
    """
    Descriptive frames present in a file's ID3V2 tag, keyed by label.

    Raises:
        TagUnreadable: the tag is missing or unparseable
    """
    tags = load_tags(path)
    details: Dict[str, str] = {}
    for frame_id, label in DETAIL_FRAMES.items():
        value = _text(tags, frame_id)
        if value:
            details[label] = value
    year = _text(tags, "TDRC")
    if year:
        details["Year"] = year
    genre = tags.get("TCON")
    if genre is not None and genre.genres:
        details["Genre"] = "/".join(genre.genres)
    return dict(sorted(details.items()))
