import os
import stat

import pytest
from mutagen.id3 import ID3, Encoding, MCDI, TCOM, TCON, TDRC, TRCK

from conftest import PAYLOAD, id3v1_trailer, write_track

from mp3repair.errors import NoEditRequired, TagUnreadable, TagUnwritable
from mp3repair.tags import describe_id3v2, read_details, read_tag_data, update_metadata
from mp3repair.tags.id3v2 import parse_track_frame


@pytest.fixture
def track_file(tmp_path):
    return write_track(tmp_path / "01 Song.mp3", album="Album", artist="Artist", title="Song", track="1")


class TestRead:

    def test_reads_reconciled_frames(self, track_file):
        data = read_tag_data(track_file)
        assert (data.album, data.artist, data.title, data.track_number) == ("Album", "Artist", "Song", 1)
        assert data.fingerprint == b""

    def test_track_with_total(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", title="a", track="3/12")
        assert read_tag_data(path).track_number == 3

    def test_missing_track_frame_is_zero(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", title="a")
        assert read_tag_data(path).track_number == 0

    def test_non_numeric_track_frame_is_unreadable(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", title="a", track="one")
        with pytest.raises(TagUnreadable):
            read_tag_data(path)

    def test_file_without_tag_is_unreadable(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", tagged=False)
        with pytest.raises(TagUnreadable):
            read_tag_data(path)

    def test_byte_order_mark_is_removed(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", title="\ufeffTitle", version=4, encoding=Encoding.UTF8)
        assert read_tag_data(path).title == "Title"

    def test_utf16_text(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", artist="Björk", encoding=Encoding.UTF16)
        assert read_tag_data(path).artist == "Björk"

    def test_fingerprint(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", title="a", frames=[MCDI(data=b"\x01\x02\x03")])
        assert read_tag_data(path).fingerprint == b"\x01\x02\x03"


@pytest.mark.parametrize("value, expected", [("", 0), ("7", 7), ("07/10", 7), ("\ufeff4", 4)])
def test_parse_track_frame(value, expected):
    assert parse_track_frame(value) == expected


def test_parse_track_frame_rejects_non_digit():
    with pytest.raises(ValueError):
        parse_track_frame("x1")


def test_parse_track_frame_rejects_non_ascii_digits():
    with pytest.raises(ValueError):
        parse_track_frame("\u0661")


class TestUpdate:

    def test_rewrites_only_requested_frames(self, track_file):
        data = update_metadata(track_file, album="New Album")
        assert data.album == "New Album"
        assert (data.artist, data.title, data.track_number) == ("Artist", "Song", 1)

    def test_keeps_version_and_other_frames(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", album="old", title="a",
                           frames=[TCOM(encoding=Encoding.LATIN1, text=["Bach"])])
        update_metadata(path, album="new")
        tags = ID3(str(path))
        assert tags.version[1] == 3
        assert str(tags["TCOM"]) == "Bach"

    def test_keeps_version_4(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", album="old", version=4)
        update_metadata(path, album="new")
        assert ID3(str(path)).version[1] == 4

    def test_keeps_audio_and_id3v1_trailer(self, tmp_path):
        trailer = id3v1_trailer(title="v1 title", track=1)
        path = write_track(tmp_path / "a.mp3", album="old", v1=trailer)
        update_metadata(path, album="new")
        assert path.read_bytes().endswith(PAYLOAD + trailer)

    def test_keeps_file_permissions(self, track_file):
        os.chmod(track_file, 0o644)
        update_metadata(track_file, album="New Album")
        assert stat.S_IMODE(os.stat(track_file).st_mode) == 0o644

    def test_track_number_keeps_total(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", title="a", track="3/12")
        update_metadata(path, track_number=5)
        assert str(ID3(str(path))["TRCK"]) == "5/12"

    def test_adds_missing_frames(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", title="a")
        data = update_metadata(path, album="Album", track_number=2)
        assert data.album == "Album"
        assert data.track_number == 2

    def test_no_edit_required(self, track_file):
        before = track_file.read_bytes()
        with pytest.raises(NoEditRequired):
            update_metadata(track_file, album="Album", title="Song", track_number=1)
        assert track_file.read_bytes() == before

    def test_latin1_frame_upgraded_for_wide_text(self, tmp_path):
        v3 = write_track(tmp_path / "v3.mp3", album="old")
        update_metadata(v3, album="Ελληνικά")
        frame = ID3(str(v3))["TALB"]
        assert frame.encoding == Encoding.UTF16
        assert str(frame) == "Ελληνικά"

        v4 = write_track(tmp_path / "v4.mp3", album="old", version=4)
        update_metadata(v4, album="Ελληνικά")
        assert ID3(str(v4))["TALB"].encoding == Encoding.UTF8

    def test_latin1_frame_kept_when_possible(self, track_file):
        update_metadata(track_file, album="Café")
        assert ID3(str(track_file))["TALB"].encoding == Encoding.LATIN1

    def test_unreadable_tag(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", tagged=False)
        with pytest.raises(TagUnreadable):
            update_metadata(path, album="x")

    def test_temporary_file_failure_leaves_original(self, track_file, monkeypatch):
        def refuse(*args, **kwargs):
            raise OSError("disk full")

        before = track_file.read_bytes()
        monkeypatch.setattr("mp3repair.tags.id3v2.tempfile.mkstemp", refuse)
        with pytest.raises(TagUnwritable):
            update_metadata(track_file, album="new")
        assert track_file.read_bytes() == before

    def test_rename_failure_leaves_original_and_no_temporary_file(self, track_file, monkeypatch):
        def refuse(*args, **kwargs):
            raise OSError("busy")

        before = track_file.read_bytes()
        monkeypatch.setattr("mp3repair.tags.id3v2.os.replace", refuse)
        with pytest.raises(TagUnwritable):
            update_metadata(track_file, album="new")
        assert track_file.read_bytes() == before
        assert sorted(os.listdir(track_file.parent)) == [track_file.name]


class TestDiagnostics:

    def test_describe_id3v2(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", album="Album", title="a",
                           frames=[MCDI(data=b"\xab\xcd")])
        lines = describe_id3v2(path)
        assert lines[0] == "ID3V2 Version: 3"
        assert "ID3V2 TALB = LATIN1 ['Album']" in lines
        assert "ID3V2 MCDI = ab cd" in lines

    def test_read_details(self, tmp_path):
        path = write_track(tmp_path / "a.mp3", title="a", version=4, frames=[
            TCOM(encoding=Encoding.UTF8, text=["Bach"]),
            TCON(encoding=Encoding.UTF8, text=["Baroque"]),
            TDRC(encoding=Encoding.UTF8, text=["1721"]),
        ])
        assert read_details(path) == {"Composer": "Bach", "Genre": "Baroque", "Year": "1721"}

    def test_read_details_without_descriptive_frames(self, track_file):
        assert read_details(track_file) == {}
