import pytest
from mutagen.id3 import Encoding, TCOM

from conftest import build_library, id3v1_trailer

from mp3repair.commands.listing import ListCommand


@pytest.fixture
def library_dir(music):
    return build_library(music, {
        "Beta": {"Second": {"01 zeta.mp3": None}},
        "Alpha": {
            "First": {"02 two.mp3": None, "01 one.mp3": None},
            "Other": {"01 alpha.mp3": None},
        },
    })


def run_list(config, bus, music, *flags):
    return ListCommand(config, bus).run(["-topDir", str(music), *flags])


def test_default_lists_artists_and_albums(library_dir, config, bus):
    assert run_list(config, bus, library_dir)
    assert bus.console_lines == [
        "Artist: Alpha",
        "  Album: First",
        "  Album: Other",
        "Artist: Beta",
        "  Album: Second",
    ]


def test_tracks_in_numeric_order(library_dir, config, bus):
    assert run_list(config, bus, library_dir, "-includeTracks", "-artistFilter", "Alpha", "-albumFilter", "First")
    assert bus.console_lines == [
        "Artist: Alpha",
        "  Album: First",
        "     1. one",
        "     2. two",
    ]


def test_command_keeps_no_flags_between_runs(library_dir, config, bus):
    command = ListCommand(config, bus)
    assert command.run(["-topDir", str(library_dir), "-includeTracks", "-artistFilter", "Beta"])
    assert command.run(["-topDir", str(library_dir), "-artistFilter", "Beta"])
    assert bus.console_lines == [
        "Artist: Beta",
        "  Album: Second",
        "     1. zeta",
        "Artist: Beta",
        "  Album: Second",
    ]
    assert not hasattr(command, "options")


def test_numeric_sort_without_albums_becomes_alphabetic(library_dir, config, bus):
    assert run_list(config, bus, library_dir, "-includeTracks", "-includeAlbums=false", "-artistFilter", "Alpha")
    assert bus.console_lines == [
        "Artist: Alpha",
        "  alpha",
        "  one",
        "  two",
    ]
    assert bus.error_text.count("track sorting will be alphabetic") == 1


def test_annotated_tracks(library_dir, config, bus):
    assert run_list(config, bus, library_dir, "-includeTracks", "-includeAlbums=false",
                    "-includeArtists=false", "-annotate", "-sort", "alpha")
    assert bus.console_lines == [
        '"alpha" on "Other" by "Alpha"',
        '"one" on "First" by "Alpha"',
        '"two" on "First" by "Alpha"',
        '"zeta" on "Second" by "Beta"',
    ]


def test_annotated_albums(library_dir, config, bus):
    assert run_list(config, bus, library_dir, "-includeArtists=false", "-annotate")
    assert bus.console_lines == [
        'Album: "First" by "Alpha"',
        'Album: "Other" by "Alpha"',
        'Album: "Second" by "Beta"',
    ]


def test_invalid_sort_value(library_dir, config, bus):
    assert run_list(config, bus, library_dir, "-includeTracks", "-sort", "random", "-artistFilter", "Beta")
    assert 'The "-sort" value you specified, "random", is not valid' in bus.error_text
    assert bus.console_lines == ["Artist: Beta", "  Album: Second", "     1. zeta"]


def test_nothing_included(library_dir, config, bus):
    assert not run_list(config, bus, library_dir, "-includeArtists=false", "-includeAlbums=false")
    assert 'You disabled all functionality for the command "list".' in bus.error_text


def test_no_music(music, config, bus):
    music.mkdir()
    assert not run_list(config, bus, music)
    assert "No music files could be found" in bus.error_text


def test_details_and_diagnostics(music, config, bus):
    build_library(music, {"A": {"B": {"01 t.mp3": {
        "album": "B", "artist": "A", "title": "t", "track": "1",
        "frames": [TCOM(encoding=Encoding.LATIN1, text=["Bach"])],
        "v1": id3v1_trailer(title="t", track=1, genre=17),
    }}}})
    assert run_list(config, bus, music, "-includeTracks", "-details", "-diagnostic")
    lines = bus.console_lines
    assert lines[:5] == [
        "Artist: A",
        "  Album: B",
        "     1. t",
        "      Details:",
        '        Composer = "Bach"',
    ]
    assert "      ID3V2 Version: 3" in lines
    assert "      ID3V2 TCOM = LATIN1 ['Bach']" in lines
    assert "      ID3V1 title: 't'" in lines
    assert "      ID3V1 genre: 'Rock'" in lines


def test_details_unavailable(music, config, bus):
    build_library(music, {"A": {"B": {"01 t.mp3": {"tagged": False}}}})
    assert run_list(config, bus, music, "-includeTracks", "-details")
    assert 'The details are not available for track "t" on album "B" by artist "A"' in bus.error_text
