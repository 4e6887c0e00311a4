"""Exception hierarchy for phonebook.

The request tree itself never raises for the one failure it knows about,
a name collision, which is reported through boolean returns. These
exceptions belong to the collaborators around it: the HTTP transports, the
book loader, configuration, and the command line. Each carries an
``exit_code`` from :mod:`phonebook.exit_codes`; :func:`phonebook.app.main`
turns them into a clean process exit.

Subclass hierarchy::

    PhonebookError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- BookParseError      (exit 7)
    +-- ConfigError         (exit 1)
"""

from phonebook.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_BOOK_PARSE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class PhonebookError(Exception):
    """Base exception for all phonebook errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(PhonebookError):
    """Raised for invalid CLI arguments or an unknown route path."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(PhonebookError):
    """Raised when the API answers 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(PhonebookError):
    """Raised when the API answers 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(PhonebookError):
    """Raised for 5xx answers and for 4xx answers without a dedicated class."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(PhonebookError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class BookParseError(PhonebookError):
    """Raised when a book definition cannot be loaded or fails validation."""

    exit_code = EXIT_BOOK_PARSE_ERROR


class ConfigError(PhonebookError):
    """Raised for configuration problems (invalid project file, bad env values)."""

    exit_code = EXIT_GENERIC_FAILURE
