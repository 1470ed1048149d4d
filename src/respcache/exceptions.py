"""Exception hierarchy for respcache.

All exceptions inherit from :class:`RespcacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`respcache.exit_codes`.
The CLI entry point in :func:`respcache.app.main` catches ``RespcacheError``
and exits with that code.

Transport failures are deliberately absent from this hierarchy: errors
raised by :mod:`httpx` reach the caller unchanged.

Subclass hierarchy::

    RespcacheError          (exit 1)
    +-- ConfigurationError  (exit 7)
    +-- StorageIOError      (exit 1)
"""

from respcache.exit_codes import EXIT_CONFIG_ERROR, EXIT_GENERIC_FAILURE


class RespcacheError(Exception):
    """Base exception for all respcache errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(RespcacheError):
    """Raised for an invalid backend selection or an unreadable config file.

    Examples are an unsupported storage type, an ``external`` backend
    without an endpoint URI, or an ``external`` backend requested where
    networking is not allowed.  Raised at construction time and never
    caught by the library.
    """

    exit_code = EXIT_CONFIG_ERROR


class StorageIOError(RespcacheError):
    """Raised by a storage backend when a read, write, or delete fails.

    Storage adapters absorb this at their public boundary: ``get_item``
    reports a miss and the mutating operations return ``False``.
    """

    exit_code = EXIT_GENERIC_FAILURE
