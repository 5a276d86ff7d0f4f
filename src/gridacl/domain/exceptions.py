"""Domain exceptions."""

from gridacl.domain.value_objects.path_length import PathLengthError


class GridACLError(Exception):
    """Base exception for gridacl."""

    pass


class PermissionDenied(GridACLError):
    """User does not have permission for the requested action."""

    pass


class InvalidPathLength(GridACLError):
    """A path exceeds the length limits imposed by the grid."""

    def __init__(self, error: PathLengthError) -> None:
        super().__init__(f"{error.kind.value}: {error.full_path}")
        self.error = error

    @property
    def error_code(self) -> str:
        return self.error.kind.value


class ConnectError(GridACLError):
    """Connecting to the grid failed."""

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class RemoteOperationError(GridACLError):
    """A grant, listing, query or move call against the grid failed."""

    def __init__(
        self,
        operation: str,
        path: str | None,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(f"{operation} failed for {path}: {message}")
        self.operation = operation
        self.path = path
        self.status_code = status_code


class NotFound(GridACLError):
    """Requested resource was not found."""

    def __init__(self, kind: str, path: str) -> None:
        super().__init__(kind, path)
        self.kind = kind
        self.path = path


class ValidationError(GridACLError):
    """Validation failed for input data."""

    pass
