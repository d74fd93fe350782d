"""Errors raised by the path authority."""


class PathAuthorityError(Exception):
    """Base class for path confinement errors."""


class PathEscapeError(PathAuthorityError, PermissionError):
    """A resolved path falls outside the base directory."""

    def __init__(self, path, base_directory):
        self.path = path
        self.base_directory = base_directory
        super().__init__(f"Path '{path}' attempts to access outside the base directory")


class PathOutsideBaseError(PathAuthorityError, ValueError):
    """The hierarchy walker was asked to start outside the base directory."""

    def __init__(self, target_directory, base_directory):
        self.target_directory = target_directory
        self.base_directory = base_directory
        super().__init__(f"Directory '{target_directory}' is not inside base directory '{base_directory}'")
