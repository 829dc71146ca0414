"""
Shared fixtures: a private application directory, a recording output bus,
and helpers that lay out artist/album/track trees with real ID3 tags.
"""

import io
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest
from mutagen.id3 import ID3, Encoding, TALB, TPE1, TIT2, TRCK

from mp3repair.config import ConfigManager
from mp3repair.output import OutputBus
from mp3repair.state import DirtyMarker

# Stand-in for audio frames; never decoded
PAYLOAD = b"\xff\xfb\x90\x00" + bytes(range(256)) * 2


def id3v1_trailer(
    title: str = "",
    artist: str = "",
    album: str = "",
    year: str = "",
    comment: str = "",
    track: Optional[int] = None,
    genre: int = 255
) -> bytes:
    def field(value: str, length: int) -> bytes:
        return value.encode("cp1252")[:length].ljust(length, b"\x00")

    data = b"TAG" + field(title, 30) + field(artist, 30) + field(album, 30) + field(year, 4)
    if track is None:
        data += field(comment, 30)
    else:
        data += field(comment, 28) + b"\x00" + bytes([track])
    return data + bytes([genre])


def write_track(
    path: Path,
    album: Optional[str] = None,
    artist: Optional[str] = None,
    title: Optional[str] = None,
    track: Optional[str] = None,
    version: int = 3,
    encoding: Encoding = Encoding.LATIN1,
    frames: Iterable = (),
    tagged: bool = True,
    v1: Optional[bytes] = None
) -> Path:
    """Write a fake audio file, with an ID3V2 tag unless tagged is False"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(PAYLOAD)
    if tagged:
        tags = ID3()
        for frame_class, value in ((TALB, album), (TPE1, artist), (TIT2, title), (TRCK, track)):
            if value is not None:
                tags.add(frame_class(encoding=encoding, text=[value]))
        for frame in frames:
            tags.add(frame)
        tags.save(str(path), v2_version=version, v1=0)
    if v1 is not None:
        with open(path, 'ab') as f:
            f.write(v1)
    return path


def build_library(top: Path, layout: Dict[str, Dict[str, Dict[str, Optional[dict]]]]) -> Path:
    """
    Create <top>/<artist>/<album>/<file> from a nested mapping.

    A file's value is the keyword arguments for write_track, or None for a
    file with consistent tags derived from its location.
    """
    top.mkdir(parents=True, exist_ok=True)
    for artist, albums in layout.items():
        (top / artist).mkdir(exist_ok=True)
        for album, files in albums.items():
            (top / artist / album).mkdir(exist_ok=True)
            for file_name, tag_args in files.items():
                if tag_args is None:
                    number, _, name = file_name.partition(" ")
                    tag_args = {
                        "album": album,
                        "artist": artist,
                        "title": name.rsplit(".", 1)[0],
                        "track": str(int(number)),
                    }
                write_track(top / artist / album / file_name, **tag_args)
    return top


class RecordingBus(OutputBus):
    """OutputBus writing to in-memory streams"""

    def __init__(self):
        super().__init__(console=io.StringIO(), error=io.StringIO(), logger=logging.getLogger("mp3repair.tests"))

    @property
    def console_text(self) -> str:
        return self.console.getvalue()

    @property
    def error_text(self) -> str:
        return self.error.getvalue()

    @property
    def console_lines(self):
        return self.console_text.splitlines()


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def app_home(tmp_path, monkeypatch):
    home = tmp_path / "app-home"
    monkeypatch.setenv("MP3REPAIR_HOME", str(home))
    return home


@pytest.fixture
def config():
    return ConfigManager.empty()


@pytest.fixture
def marker(tmp_path):
    return DirtyMarker(tmp_path / "state")


@pytest.fixture
def music(tmp_path):
    return tmp_path / "Music"
