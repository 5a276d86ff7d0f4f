"""Grid path helpers and the path length validator.

The grid rejects paths whose full, directory or file-name part is longer than
its catalog columns allow. Every operation that accepts a path checks it here
before issuing any remote call.
"""

import posixpath

from gridacl.domain.exceptions import InvalidPathLength
from gridacl.domain.value_objects import PathLengthError, PathLengthErrorKind

MAX_PATH_LENGTH = 1067
MAX_DIR_LENGTH = 640
MAX_FILENAME_LENGTH = MAX_PATH_LENGTH - MAX_DIR_LENGTH


def rm_last_slash(path: str) -> str:
    """Strip trailing slashes, keeping the root as ``/``."""
    stripped = path.rstrip("/")
    return stripped or ("/" if path.startswith("/") else "")


def dirname(path: str) -> str:
    """Parent collection of ``path``. The root is its own parent."""
    parent = posixpath.dirname(rm_last_slash(path))
    return parent or "/"


def basename(path: str) -> str:
    return posixpath.basename(rm_last_slash(path))


def path_join(*parts: str) -> str:
    return rm_last_slash(posixpath.join(*parts))


def validate_path_lengths(path: str) -> PathLengthError | None:
    """Return the first length violation of ``path``, or None if it is acceptable."""
    dir_path = dirname(path)
    file_path = basename(path)
    if len(path) > MAX_PATH_LENGTH:
        return PathLengthError(PathLengthErrorKind.FULL_PATH, full_path=path)
    if len(dir_path) > MAX_DIR_LENGTH:
        return PathLengthError(
            PathLengthErrorKind.DIRNAME, full_path=path, dir_path=dir_path
        )
    if len(file_path) > MAX_FILENAME_LENGTH:
        return PathLengthError(
            PathLengthErrorKind.BASENAME, full_path=path, file_path=file_path
        )
    return None


def ensure_valid_path(*paths: str) -> None:
    """Raise InvalidPathLength for the first path that fails validation."""
    for path in paths:
        error = validate_path_lengths(path)
        if error is not None:
            raise InvalidPathLength(error)
