"""Custom exceptions for orgdo services."""


class DocumentError(Exception):
    """Base class for document I/O failures.

    Attributes:
        path: Path to the file or directory involved
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str):
        """Initialize DocumentError.

        Args:
            path: Path to the file or directory involved
            message: Human-readable error message
        """
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class DocumentReadError(DocumentError):
    """Raised when an outline file or directory cannot be read."""

    def __init__(self, path: str, message: str = "Could not read document"):
        super().__init__(path, message)


class DocumentWriteError(DocumentError):
    """Raised when saving an outline fails.

    The target file is left as it was before the save.
    """

    def __init__(self, path: str, message: str = "Could not write document"):
        super().__init__(path, message)
