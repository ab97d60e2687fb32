"""
Exceptions raised by tempscope.

Every error derives from TempScopeError and from the closest builtin exception, so callers
may catch either ``TempScopeError`` or e.g. ``ValueError`` / ``OSError``.
"""

# Classes --------------------------------------------------------------------------------------------------------------

class TempScopeError(Exception):
    """Base class for all tempscope errors."""


class InvalidOptionsError(TempScopeError, ValueError):
    """Conflicting or malformed file/directory options. Raised before any I/O."""


class RootUnavailableError(TempScopeError, OSError):
    """The platform temporary directory root could not be resolved."""


class ExhaustedRetriesError(TempScopeError, FileExistsError):
    """No free name was found under the root within the allowed number of attempts."""


class WriteFailureError(TempScopeError, OSError):
    """Writing content to a temporary file failed. The native error is available as ``__cause__``."""


class CleanupFailureError(TempScopeError, OSError):
    """
    Removing a temporary resource during task teardown failed.

    The native error is available as ``__cause__``. When the task callback itself failed, this
    error is not raised; it is attached to the callback's exception instead, see attach_cleanup_error().
    """


# Methods --------------------------------------------------------------------------------------------------------------

def attach_cleanup_error(exc: BaseException, cleanup_error: CleanupFailureError) -> BaseException:
    """
    Attach a cleanup failure to the exception raised by a task callback.

    The callback's exception stays the primary error. The cleanup failure is stored
    on ``exc.__cleanup_error__`` and described in a note so it shows up in the traceback.

    Returns:
        The same exception object, for use in ``raise attach_cleanup_error(...)``.
    """
    exc.__cleanup_error__ = cleanup_error
    exc.add_note(f"Cleanup also failed: {cleanup_error}")
    return exc


def cleanup_error_of(exc: BaseException) -> CleanupFailureError | None:
    """Return the cleanup failure attached to exc, or None."""
    return getattr(exc, "__cleanup_error__", None)
