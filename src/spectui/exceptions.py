"""Exception hierarchy for spectui.

All exceptions inherit from :class:`SpectuiError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`spectui.exit_codes`.
The top-level error handler in :func:`spectui.app.main` catches
``SpectuiError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Inside an interactive session most of these never propagate: broken
references become inline leaves, validation failures become a status
message, and network failures become failed history entries.

Subclass hierarchy::

    SpectuiError (exit 1)
    +-- ValidationError         (exit 2)
    +-- NotFoundError           (exit 4)
    +-- ConnectionError_        (exit 6)
    +-- SpecParseError          (exit 7)
    |   +-- MalformedDocumentError (exit 7)
    +-- BrokenReferenceError    (exit 7)
    +-- ConfigError             (exit 1)
"""

from __future__ import annotations

from spectui.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SPEC_PARSE_ERROR,
)


class SpectuiError(Exception):
    """Base exception for all spectui errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`spectui.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ValidationError(SpectuiError):
    """Raised when a request cannot be built from the current draft.

    Carries the names of the offending fields so the request builder can
    flag each of them next to its input.

    Args:
        message: Human-readable description.
        fields: Names of the parameters that failed validation.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields: list[str] = list(fields or [])


class NotFoundError(SpectuiError):
    """Raised when a component or history entry does not exist."""

    exit_code = EXIT_NOT_FOUND


class ConnectionError_(SpectuiError):
    """Raised on network-level failures while fetching a remote document.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(SpectuiError):
    """Raised when the OpenAPI document cannot be read or decoded."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class MalformedDocumentError(SpecParseError):
    """Raised at load time for structural problems the resolver cannot repair.

    For example a path item that is neither an object nor a reference, or a
    ``paths`` section that is not a mapping.
    """


class BrokenReferenceError(SpectuiError):
    """Raised when a ``$ref`` target is absent or the pointer is malformed.

    Args:
        ref: The offending ``$ref`` string.
        reason: Why the reference could not be followed.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(self, ref: str, reason: str):
        super().__init__(f"Cannot resolve $ref '{ref}': {reason}")
        self.ref = ref
        self.reason = reason


class ConfigError(SpectuiError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
