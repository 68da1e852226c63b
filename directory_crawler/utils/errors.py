"""
Custom exception classes and error handling utilities.
"""

import errno as errno_codes
import traceback
from typing import Optional, Dict, Any


class DirectoryCrawlerError(Exception):
    """Base exception for all directory crawler errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(DirectoryCrawlerError):
    """Exception raised for configuration-related issues."""
    pass


class ValidationError(DirectoryCrawlerError):
    """Exception raised for invalid configuration values."""
    pass


class CrawlError(DirectoryCrawlerError):
    """Exception raised while traversing a path."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        errno: Optional[int] = None
    ):
        details = dict(details or {})
        if path is not None:
            details.setdefault("path", path)
        super().__init__(message, details)
        self.path = path
        self.errno = errno


class NotFoundError(CrawlError):
    """The crawled path does not exist."""

    def __init__(self, path: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"No such file or directory: '{path}'",
            path=path,
            details=details,
            errno=errno_codes.ENOENT
        )


class StatError(CrawlError):
    """The path exists but could not be inspected."""
    pass


class ListError(CrawlError):
    """Directory enumeration failed."""
    pass


class ArchiveError(CrawlError):
    """The archive stream is malformed or could not be decoded."""
    pass


class StreamError(CrawlError):
    """Reading an emitted file or archive entry failed."""
    pass


class ConsumerError(CrawlError):
    """An observer reported a failure while consuming an emitted stream."""
    pass


def crawl_error_from_os_error(
    error: OSError,
    path: str,
    error_class: type = StatError
) -> CrawlError:
    """
    Translate an ``OSError`` raised by a filesystem primitive.

    Args:
        error: The original error
        path: Path the primitive was called with
        error_class: Error class used when the path exists

    Returns:
        NotFoundError for missing paths, error_class otherwise
    """
    if isinstance(error, FileNotFoundError):
        return NotFoundError(path, {"reason": str(error)})

    return error_class(
        f"{error.strerror or error}: '{path}'",
        path=path,
        details={"reason": str(error)},
        errno=error.errno
    )


def handle_error(
    error: Exception,
    logger,
    context: Optional[Dict[str, Any]] = None,
    reraise: bool = True
) -> None:
    """
    Handle and log errors with context information.

    Args:
        error: The exception that occurred
        logger: Logger instance to use for logging
        context: Additional context information
        reraise: Whether to reraise the exception after logging
    """
    error_context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **(context or {})
    }

    if isinstance(error, DirectoryCrawlerError):
        error_context.update(error.details)

    logger.error(
        "Error occurred: %s",
        error,
        extra={"context": error_context}
    )
    logger.debug("".join(traceback.format_exception(type(error), error, error.__traceback__)))

    if reraise:
        raise error
