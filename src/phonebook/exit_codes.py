"""Numeric process exit codes for the ``phonebook`` command line.

Each constant maps to an error category and is referenced by the matching
:class:`~phonebook.exceptions.PhonebookError` subclass, so shell wrappers
can branch on ``$?`` without parsing stderr.

Example::

    $ phonebook call api.yaml users.get
    $ echo $?
    4   # EXIT_NOT_FOUND -- the API answered 404
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or a route path that does not exist in the book."""

EXIT_AUTH_FAILURE = 3
"""The API rejected the request with 401 or 403."""

EXIT_NOT_FOUND = 4
"""The API answered 404."""

EXIT_SERVER_ERROR = 5
"""The API answered with any other 4xx or a 5xx status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_BOOK_PARSE_ERROR = 7
"""The book definition could not be read or validated."""
