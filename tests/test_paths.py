# tests/test_paths.py
import pytest

from ftpclient.core.paths import get_directory_name, get_ftp_path, is_root_directory


@pytest.mark.parametrize("raw, expected", [
    ("/a/b/c", "/a/b/c"),
    ("/a/b/c/", "/a/b/c"),
    ("//a///b", "/a/b"),
    ("\\a\\b", "/a/b"),
    ("/", "/"),
    ("///", "/"),
    ("", "./"),
    (None, "./"),
    ("a/b", "a/b"),
])
def test_get_ftp_path(raw, expected):
    assert get_ftp_path(raw) == expected


@pytest.mark.parametrize("path, parent", [
    ("/a/b/c", "/a/b"),
    ("/a", "/"),
    ("a/b", "a"),
    ("a", "./"),
    ("./a", "."),
    ("/", "/"),
])
def test_get_directory_name(path, parent):
    assert get_directory_name(path) == parent


def test_root_and_current_directory():
    assert is_root_directory("/")
    assert is_root_directory(".")
    assert is_root_directory("./")
    assert not is_root_directory("/a")
