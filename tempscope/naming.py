"""
Unique temporary path generation under a resolved root.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import uuid
from pathlib import Path
from typing import Callable

# Local ----------------------------------------------------------------------------------------------------------------
from .errors import ExhaustedRetriesError
from .options import DirectoryOptions, FileOptions, NoOverride, WithExtension, WithName
from .root import RootResolver

logger = logging.getLogger(__name__)

# Constants ------------------------------------------------------------------------------------------------------------

DEFAULT_MAX_ATTEMPTS = 16


# Classes --------------------------------------------------------------------------------------------------------------

class PathNameGenerator:
    """
    Produces temporary paths that do not exist under the root at generation time.

    Names are built from a random token (``uuid4().hex``, 122 bits of entropy). Each
    candidate is checked for existence and a new token is drawn on collision, up to
    max_attempts candidates in total.

    Args:
        resolver: Source of the root directory.
        max_attempts: Number of candidates tried before giving up. Must be >= 1.
        token: Callable returning a fresh random token. Defaults to ``uuid.uuid4().hex``.

    Raises:
        ValueError: If max_attempts < 1.

    Examples:
        >>> gen = PathNameGenerator(RootResolver(path="/tmp"))
        >>> gen.file_path(WithExtension("png"))
        PosixPath('/tmp/a9fb0decd08179eb6cf4691568aa2018.png')
        >>> gen.file_path(WithName("unicorn.png"))
        PosixPath('/tmp/f7f62bfd4e2a05f1589947647ed3f9ec/unicorn.png')
        >>> gen.dir_path(DirectoryOptions(prefix="a"))
        PosixPath('/tmp/a_3c085674ad31223b9653c88f725d6b41')
    """

    def __init__(
            self,
            resolver: RootResolver,
            *,
            max_attempts: int = DEFAULT_MAX_ATTEMPTS,
            token: Callable[[], str] | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.resolver = resolver
        self.max_attempts = max_attempts
        self._token = token or _uuid_token

    @property
    def root(self) -> Path:
        return self.resolver.path

    def file_path(self, options: FileOptions | None = None) -> Path:
        """
        Generate a temporary file path.

        For WithName the random part is the parent directory, which is the component
        checked for collisions. The returned path's parent does not exist yet.

        Raises:
            ExhaustedRetriesError: If every candidate collided.
            RootUnavailableError: If the root cannot be resolved.
        """
        options = options or NoOverride()
        match options:
            case WithName(name=name):
                parent = self._unique(lambda token: token)
                return parent / name
            case WithExtension():
                return self._unique(lambda token: token + options.suffix)
            case NoOverride():
                return self._unique(lambda token: token)
        raise TypeError(f"unsupported file options: {options!r}")

    def dir_path(self, options: DirectoryOptions | None = None) -> Path:
        """
        Generate a temporary directory path. The directory is not created.

        Raises:
            ExhaustedRetriesError: If every candidate collided.
            RootUnavailableError: If the root cannot be resolved.
        """
        options = options or DirectoryOptions()
        if options.prefix is None:
            return self._unique(lambda token: token)
        prefix = options.prefix
        return self._unique(lambda token: f"{prefix}_{token}")

    def _unique(self, compose: Callable[[str], str]) -> Path:
        root = self.root
        for attempt in range(1, self.max_attempts + 1):
            candidate = root / compose(self._token())
            if not candidate.exists():
                return candidate
            logger.warning("Temporary name collision (attempt %d/%d): %s", attempt, self.max_attempts, candidate)
        raise ExhaustedRetriesError(
            f"No free temporary name under {root} after {self.max_attempts} attempts"
        )


# Private methods ------------------------------------------------------------------------------------------------------

def _uuid_token() -> str:
    return uuid.uuid4().hex
