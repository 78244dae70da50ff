"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~adminlens.exceptions.AdminlensError` subclass.

Example::

    $ adminlens discover missing.json --base-url http://localhost/api/v1/admin
    $ echo $?
    7   # EXIT_SPEC_PARSE_ERROR -- the description could not be loaded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments, or an engine call broke its contract."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API description or payload could not be read or parsed."""
