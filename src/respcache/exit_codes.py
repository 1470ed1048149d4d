"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a failure category reported by the ``respcache``
CLI.  Shell wrappers can inspect the exit code to tell a bad config apart
from an unreachable API without parsing stderr.

Example::

    $ respcache get https://api.example.com/missing
    $ echo $?
    4   # EXIT_NOT_FOUND
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_NOT_FOUND = 4
"""The remote API answered HTTP 404."""

EXIT_HTTP_ERROR = 5
"""The remote API answered with any other non-2xx status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CONFIG_ERROR = 7
"""The storage backend or configuration file is invalid."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C."""
