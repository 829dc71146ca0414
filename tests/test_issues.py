import copy
from pathlib import Path

from mp3repair.commands.issues import (
    CheckedAlbum,
    CheckedArtist,
    CheckedTrack,
    empty_folder_issues,
    gap_analysis,
    gap_issues,
    merge,
    render,
)
from mp3repair.library.model import Album, Artist, Library, Track


def album_with(*file_names):
    album = Album(name="X", path=Path("/music/A/X"))
    for file_name in file_names:
        album.add_track(Track.from_file(album.path, file_name, ".mp3"))
    return album


class TestGaps:

    def test_duplicate_and_missing(self):
        album = album_with("01 a.mp3", "01 b.mp3", "03 c.mp3")
        assert gap_issues(album) == ['missing track 2', 'track 1 used by "a" and "b"']

    def test_out_of_range(self):
        album = album_with("00 zero.mp3", "01 one.mp3", "09 nine.mp3")
        assert gap_issues(album) == [
            'missing track 2',
            'missing track 3',
            'track 0 ("zero") is not a valid track number; valid tracks are 1..5',
            'track 9 ("nine") is not a valid track number; valid tracks are 1..5',
        ]

    def test_missing_numbers_fill_the_valid_range(self):
        album = album_with("01 a.mp3", "02 b.mp3", "04 d.mp3")
        assert gap_issues(album) == ['missing track 3']

    def test_complete_album(self):
        assert gap_issues(album_with("01 a.mp3", "02 b.mp3")) == []

    def test_empty_album(self):
        assert gap_issues(album_with()) == []

    def test_gap_analysis_tree(self):
        library = Library(top_dir=Path("/music"))
        artist = library.add_artist(Artist(name="A", path=Path("/music/A")))
        artist.add_album(album_with("02 b.mp3"))
        tree, found = gap_analysis(library)
        assert found
        assert tree[0].albums[0].issues == [
            'missing track 1',
        ]


def test_empty_folder_issues():
    library = Library(top_dir=Path("/music"))
    library.add_artist(Artist(name="Lonely", path=Path("/music/Lonely")))
    artist = library.add_artist(Artist(name="Full", path=Path("/music/Full")))
    artist.add_album(Album(name="Hollow", path=Path("/music/Full/Hollow")))
    artist.add_album(album_with("01 a.mp3"))
    tree, found = empty_folder_issues(library)
    assert found
    assert render(merge(tree)) == [
        "Full",
        "    Hollow",
        "      no tracks found",
        "Lonely",
        "  no albums found",
    ]


def test_empty_folder_issues_none_found():
    library = Library(top_dir=Path("/music"))
    artist = library.add_artist(Artist(name="A", path=Path("/music/A")))
    artist.add_album(album_with("01 a.mp3"))
    tree, found = empty_folder_issues(library)
    assert not found
    assert merge(tree) == []


def tree_a():
    return [CheckedArtist(name="A", albums=[
        CheckedAlbum(name="X", issues=["missing track 2"], tracks=[CheckedTrack(1, "a")]),
    ])]


def tree_b():
    return [CheckedArtist(name="A", albums=[
        CheckedAlbum(name="X", tracks=[CheckedTrack(1, "a", ["bad title"]), CheckedTrack(3, "c")]),
        CheckedAlbum(name="W", issues=["no tracks found"]),
    ])]


def tree_c():
    return [
        CheckedArtist(name="B", issues=["no albums found"]),
        CheckedArtist(name="A", albums=[CheckedAlbum(name="X", tracks=[CheckedTrack(1, "a", ["another"])])]),
    ]


class TestMerge:

    def test_commutative(self):
        assert merge(tree_a(), tree_b()) == merge(tree_b(), tree_a())

    def test_associative(self):
        left = merge(merge(tree_a(), tree_b()), tree_c())
        right = merge(tree_a(), merge(tree_b(), tree_c()))
        assert left == right

    def test_does_not_mutate_inputs(self):
        a, b = tree_a(), tree_b()
        before = copy.deepcopy((a, b))
        merge(a, b)
        assert (a, b) == before

    def test_prunes_and_sorts(self):
        merged = merge(tree_a(), tree_b(), tree_c())
        assert [artist.name for artist in merged] == ["A", "B"]
        assert [album.name for album in merged[0].albums] == ["W", "X"]
        tracks = merged[0].albums[1].tracks
        assert [(t.number, t.name, t.issues) for t in tracks] == [(1, "a", ["another", "bad title"])]

    def test_render(self):
        assert render(merge(tree_a(), tree_b(), tree_c())) == [
            "A",
            "    W",
            "      no tracks found",
            "    X",
            "      missing track 2",
            "         1 a",
            "          another",
            "          bad title",
            "B",
            "  no albums found",
        ]
