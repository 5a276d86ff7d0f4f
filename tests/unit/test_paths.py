"""Unit tests for path helpers and the path length validator."""

import pytest

from gridacl.domain.exceptions import InvalidPathLength
from gridacl.domain.paths import (
    MAX_DIR_LENGTH,
    MAX_FILENAME_LENGTH,
    MAX_PATH_LENGTH,
    basename,
    dirname,
    ensure_valid_path,
    path_join,
    rm_last_slash,
    validate_path_lengths,
)
from gridacl.domain.value_objects import PathLengthErrorKind


def test_limits() -> None:
    """Grid limits: 1067 total, 640 for the directory, the rest for the name."""
    assert MAX_PATH_LENGTH == 1067
    assert MAX_DIR_LENGTH == 640
    assert MAX_FILENAME_LENGTH == 427


def test_path_at_every_limit_is_valid() -> None:
    """Directory of 640 chars and name of 426 chars (1067 total) passes."""
    dir_path = "/" + "d" * (MAX_DIR_LENGTH - 1)
    path = dir_path + "/" + "f" * (MAX_PATH_LENGTH - MAX_DIR_LENGTH - 1)
    assert len(path) == MAX_PATH_LENGTH
    assert len(dirname(path)) == MAX_DIR_LENGTH
    assert validate_path_lengths(path) is None


def test_full_path_too_long() -> None:
    """A 1068-char path fails with the full path error, checked first."""
    path = "/" + "a" * 600 + "/" + "b" * 466
    assert len(path) == 1068
    error = validate_path_lengths(path)
    assert error is not None
    assert error.kind is PathLengthErrorKind.FULL_PATH
    assert error.full_path == path


def test_dirname_too_long() -> None:
    """A 641-char directory with a short name fails on the directory."""
    path = "/" + "a" * 640 + "/file"
    error = validate_path_lengths(path)
    assert error is not None
    assert error.kind is PathLengthErrorKind.DIRNAME
    assert error.dir_path == "/" + "a" * 640


def test_basename_too_long() -> None:
    """A 428-char name under a short directory fails on the name."""
    path = "/z/" + "n" * 428
    error = validate_path_lengths(path)
    assert error is not None
    assert error.kind is PathLengthErrorKind.BASENAME
    assert error.file_path == "n" * 428


def test_error_codes() -> None:
    assert PathLengthErrorKind.FULL_PATH.value == "ERR_BAD_PATH_LENGTH"
    assert PathLengthErrorKind.DIRNAME.value == "ERR_BAD_DIRNAME_LENGTH"
    assert PathLengthErrorKind.BASENAME.value == "ERR_BAD_BASENAME_LENGTH"


def test_ensure_valid_path_raises_first_violation() -> None:
    """ensure_valid_path raises for the first bad path, carrying the structured error."""
    bad = "/z/" + "n" * 428
    with pytest.raises(InvalidPathLength) as exc_info:
        ensure_valid_path("/z/home/u", bad)
    assert exc_info.value.error_code == "ERR_BAD_BASENAME_LENGTH"
    assert exc_info.value.error.full_path == bad


def test_ensure_valid_path_accepts_good_paths() -> None:
    ensure_valid_path("/z/home/u", "/z/home/u/file.txt")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/z/home/u/file", "/z/home/u"),
        ("/z/home/u/", "/z/home"),
        ("/z", "/"),
        ("/", "/"),
    ],
)
def test_dirname(path: str, expected: str) -> None:
    assert dirname(path) == expected


def test_basename_and_join() -> None:
    assert basename("/z/home/u/file") == "file"
    assert basename("/z/home/u/") == "u"
    assert path_join("/z/home", "u", "file") == "/z/home/u/file"
    assert path_join("/", "z", "home") == "/z/home"


def test_rm_last_slash() -> None:
    assert rm_last_slash("/z/home/") == "/z/home"
    assert rm_last_slash("/z/home") == "/z/home"
    assert rm_last_slash("/") == "/"
