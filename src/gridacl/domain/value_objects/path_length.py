"""Path length violations reported by the path validator."""

from dataclasses import dataclass
from enum import StrEnum


class PathLengthErrorKind(StrEnum):
    """Which length limit a path violated."""

    FULL_PATH = "ERR_BAD_PATH_LENGTH"
    DIRNAME = "ERR_BAD_DIRNAME_LENGTH"
    BASENAME = "ERR_BAD_BASENAME_LENGTH"


@dataclass(frozen=True)
class PathLengthError:
    """A rejected path, with the component that was too long."""

    kind: PathLengthErrorKind
    full_path: str
    dir_path: str | None = None
    file_path: str | None = None
