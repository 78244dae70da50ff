"""Exception hierarchy for adminlens.

All exceptions inherit from :class:`AdminlensError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`adminlens.exit_codes`.
The top-level error handler in :func:`adminlens.app.main` catches
``AdminlensError`` and exits with the appropriate code.

The discovery and shape engines never raise for bad *data*: malformed paths,
foreign paths, and dangling ``$ref`` pointers all degrade to a best-effort
result.  They raise :class:`ContractError` only when a caller breaks the
type-level contract of a function (e.g. ``None`` where a list is required).

Subclass hierarchy::

    AdminlensError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ContractError       (exit 2)
    +-- SpecParseError      (exit 7)
    +-- ConfigError         (exit 1)
"""

from adminlens.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class AdminlensError(Exception):
    """Base exception for all adminlens errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(AdminlensError):
    """Raised for invalid CLI arguments or missing required options."""

    exit_code = EXIT_INVALID_USAGE


class ContractError(AdminlensError, TypeError):
    """Raised when an engine function is called with arguments of the wrong kind.

    These are caller bugs, not data problems, so they fail immediately
    instead of degrading.  Also a :class:`TypeError` so generic callers can
    catch it the usual way.
    """

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(AdminlensError):
    """Raised when an API description or JSON payload cannot be loaded or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(AdminlensError):
    """Raised for configuration problems (missing products, invalid JSON)."""

    exit_code = EXIT_GENERIC_FAILURE
