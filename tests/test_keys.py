import pytest

from blobdrive.core.errors import InvalidKeyError
from blobdrive.core.keys import directory_prefix, first_segment, join, remainder, segments, upload_key


def test_segments_keeps_empty_parts():
    assert segments("my/share/file1.jpg") == ["my", "share", "file1.jpg"]
    assert segments("a//b") == ["a", "", "b"]
    assert segments("share/") == ["share", ""]
    assert segments("readme.txt") == ["readme.txt"]


def test_segments_rejects_empty_key():
    with pytest.raises(InvalidKeyError):
        segments("")


def test_join_inverts_segments():
    for key in ["readme.txt", "my/share/file1.jpg", "a//b", "share/", "/leading", "/"]:
        assert join(segments(key)) == key


def test_join_rejects_empty_list():
    with pytest.raises(InvalidKeyError):
        join([])


def test_first_segment():
    assert first_segment("my/share/file1.jpg") == "my"
    assert first_segment("readme.txt") == "readme.txt"
    assert first_segment("/x") == ""


def test_remainder_strips_prefix_and_delimiter():
    assert remainder("my/share/file1.jpg", 2) == "share/file1.jpg"
    assert remainder("share/", 5) == ""


def test_remainder_out_of_range():
    with pytest.raises(InvalidKeyError):
        remainder("share", 5)
    with pytest.raises(InvalidKeyError):
        remainder("share", 9)


def test_directory_prefix_and_upload_key():
    assert directory_prefix([]) == ""
    assert directory_prefix(["my", "share"]) == "my/share/"
    assert upload_key([], "photo.jpg") == "photo.jpg"
    assert upload_key(["my", "share"], "photo.jpg") == "my/share/photo.jpg"
    assert upload_key(["my", "share"], "photo.jpg") == directory_prefix(["my", "share"]) + "photo.jpg"
    with pytest.raises(InvalidKeyError):
        upload_key(["my"], "nested/photo.jpg")
    with pytest.raises(InvalidKeyError):
        upload_key(["my"], "")
