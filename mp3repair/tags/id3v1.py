"""
ID3V1 trailer reader.

The trailer is the last 128 bytes of the file and is only read for the
diagnostic listing; nothing in mp3repair writes it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from mutagen.id3 import TCON

TRAILER_LENGTH = 128
SIGNATURE = b"TAG"
CODE_PAGE = "cp1252"


@dataclass
class Id3v1Metadata:
    """Decoded ID3V1 fields"""
    title: str
    artist: str
    album: str
    year: str
    comment: str
    track: Optional[int]
    genre_index: int

    @property
    def genre(self) -> str:
        genres = TCON.GENRES
        if 0 <= self.genre_index < len(genres):
            return genres[self.genre_index]
        return "unknown genre"

    def describe(self) -> List[str]:
        """Lines for the diagnostic listing"""
        lines = [
            f"ID3V1 title: {self.title!r}",
            f"ID3V1 artist: {self.artist!r}",
            f"ID3V1 album: {self.album!r}",
            f"ID3V1 year: {self.year!r}",
            f"ID3V1 comment: {self.comment!r}",
        ]
        if self.track is not None:
            lines.append(f"ID3V1 track: {self.track}")
        lines.append(f"ID3V1 genre: {self.genre!r}")
        return lines


def _text(raw: bytes) -> str:
    return raw.decode(CODE_PAGE, errors="replace").rstrip("\x00 ")


def parse_trailer(trailer: bytes) -> Optional[Id3v1Metadata]:
    """
    Decode a 128-byte ID3V1 trailer.

    Returns None when the data is short or lacks the TAG signature.
    """
    if len(trailer) < TRAILER_LENGTH or not trailer.startswith(SIGNATURE):
        return None
    trailer = trailer[-TRAILER_LENGTH:]
    # ID3V1.1: a zero byte before a non-zero track byte ends a 28 byte comment
    if trailer[125] == 0 and trailer[126] != 0:
        comment = _text(trailer[97:125])
        track: Optional[int] = trailer[126]
    else:
        comment = _text(trailer[97:127])
        track = None
    return Id3v1Metadata(
        title=_text(trailer[3:33]),
        artist=_text(trailer[33:63]),
        album=_text(trailer[63:93]),
        year=_text(trailer[93:97]),
        comment=comment,
        track=track,
        genre_index=trailer[127],
    )


def read_trailer_bytes(path: Union[str, Path]) -> Optional[bytes]:
    """Return the raw 128-byte trailer if the file carries one."""
    with open(path, 'rb') as f:
        f.seek(0, 2)
        size = f.tell()
        if size < TRAILER_LENGTH:
            return None
        f.seek(size - TRAILER_LENGTH)
        data = f.read(TRAILER_LENGTH)
    if not data.startswith(SIGNATURE):
        return None
    return data


def read_id3v1(path: Union[str, Path]) -> Optional[Id3v1Metadata]:
    """
    Read the ID3V1 trailer of a file.

    Args:
        path: audio file path

    Returns:
        Id3v1Metadata, or None if the file has no trailer

    Raises:
        OSError: the file cannot be read
    """
    data = read_trailer_bytes(path)
    if data is None:
        return None
    return parse_trailer(data)
