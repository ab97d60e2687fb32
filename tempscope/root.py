#
# Tempscope Temporary Root
#

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable

# Local ----------------------------------------------------------------------------------------------------------------
from .errors import RootUnavailableError

logger = logging.getLogger(__name__)


# Private methods ------------------------------------------------------------------------------------------------------

def _platform_temp_dir() -> str:
    # Resolve symlinks such as /var -> /private/var on macOS
    return os.path.realpath(tempfile.gettempdir())


# Classes --------------------------------------------------------------------------------------------------------------

class RootResolver:
    """
    Resolves the directory under which every temporary path is created.

    The root is resolved on first access to ``path`` and cached for the lifetime of the
    resolver; later accesses never query the environment again. First resolution is
    guarded by a lock, so concurrent readers all observe the same value.

    Args:
        path: Pin the root to this directory instead of asking the platform.
        resolve: Callable returning the root. Defaults to the real path of
            ``tempfile.gettempdir()``, which honors TMPDIR, TEMP and TMP.

    Raises:
        ValueError: If both path and resolve are given.

    Examples:
        >>> RootResolver().path
        PosixPath('/tmp')
        >>> RootResolver(path="/var/scratch").path
        PosixPath('/var/scratch')
    """

    def __init__(
            self,
            path: str | os.PathLike[str] | None = None,
            *,
            resolve: Callable[[], str | os.PathLike[str]] | None = None,
    ) -> None:
        if path is not None and resolve is not None:
            raise ValueError("path and resolve are mutually exclusive")
        if path is not None:
            pinned = path
            resolve = lambda: pinned
        self._resolve = resolve or _platform_temp_dir
        self._path: Path | None = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        state = str(self._path) if self._path is not None else "unresolved"
        return f"{type(self).__name__}({state})"

    @property
    def path(self) -> Path:
        """
        The resolved root directory.

        Raises:
            RootUnavailableError: If resolution fails or does not yield an existing directory.
        """
        if self._path is None:
            with self._lock:
                if self._path is None:
                    self._path = self._resolve_once()
        return self._path

    @property
    def resolved(self) -> bool:
        """Whether the root has been resolved already."""
        return self._path is not None

    def _resolve_once(self) -> Path:
        try:
            root = Path(self._resolve())
        except Exception as exc:
            raise RootUnavailableError(f"Temporary root could not be resolved: {exc}") from exc
        if not root.is_dir():
            raise RootUnavailableError(f"Temporary root is not an existing directory: {root}")
        logger.debug("Resolved temporary root: %s", root)
        return root


# Module state ---------------------------------------------------------------------------------------------------------

DEFAULT_RESOLVER = RootResolver()


# Methods --------------------------------------------------------------------------------------------------------------

def temp_root() -> Path:
    """
    Get the root temporary directory path of the process, e.g. ``/tmp``.

    Resolved once on first call, then returned unchanged.
    """
    return DEFAULT_RESOLVER.path
