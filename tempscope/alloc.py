#
# Tempscope Resource Allocation
#

# Standard library -----------------------------------------------------------------------------------------------------
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

# Local ----------------------------------------------------------------------------------------------------------------
from .errors import ExhaustedRetriesError, WriteFailureError
from .io import DEFAULT_CHUNK_SIZE, Content, StreamContent, content_kind, write_content, write_content_async
from .naming import PathNameGenerator
from .options import DirectoryOptions, FileOptions, NoOverride, WithName, file_options
from .root import DEFAULT_RESOLVER
from .shutil import remove_path

logger = logging.getLogger(__name__)


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Allocation:
    """
    A temporary resource handed out by ResourceAllocator.

    Attributes:
        path: Path given to the caller.
        owned: Entry whose removal releases the resource. Equal to path, except for
            files with an explicit name, where it is the random parent directory.
    """

    path: Path
    owned: Path


class ResourceAllocator:
    """
    Materializes temporary paths on disk.

    File allocations reserve a path only; nothing is created unless content is written,
    or the file has an explicit name, in which case its random parent directory is created.
    Directory allocations always create the directory.

    Args:
        generator: Source of unique candidate paths.
    """

    def __init__(self, generator: PathNameGenerator) -> None:
        self.generator = generator

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.generator.resolver!r})"

    @property
    def root(self) -> Path:
        return self.generator.root

    def allocate_file(self, options: FileOptions | None = None) -> Allocation:
        """
        Reserve a temporary file path.

        Raises:
            ExhaustedRetriesError: If no free name could be found.
            RootUnavailableError: If the root cannot be resolved.
        """
        options = options or NoOverride()
        if isinstance(options, WithName):
            parent = self._create_dir(lambda: self.generator.file_path(options).parent)
            allocation = Allocation(path=parent / options.name, owned=parent)
        else:
            path = self.generator.file_path(options)
            allocation = Allocation(path=path, owned=path)
        logger.debug("Allocated temporary file path: %s", allocation.path)
        return allocation

    def allocate_dir(self, options: DirectoryOptions | None = None) -> Allocation:
        """
        Create a temporary directory.

        Raises:
            ExhaustedRetriesError: If no free name could be found.
            RootUnavailableError: If the root cannot be resolved.
            OSError: If the directory cannot be created (propagated).
        """
        path = self._create_dir(lambda: self.generator.dir_path(options))
        logger.debug("Created temporary directory: %s", path)
        return Allocation(path=path, owned=path)

    async def allocate_file_async(self, options: FileOptions | None = None) -> Allocation:
        """
        Async variant of allocate_file(), run in a worker thread.

        If the awaiting task is cancelled, the allocation still completes in the
        worker thread and is removed again before CancelledError propagates.
        """
        return await self._allocate_shielded(self.allocate_file, options)

    async def allocate_dir_async(self, options: DirectoryOptions | None = None) -> Allocation:
        """Async variant of allocate_dir(), with the same cancellation handling as allocate_file_async()."""
        return await self._allocate_shielded(self.allocate_dir, options)

    def write_sync(self, content: Content, options: FileOptions | None = None, *, encoding: str = "utf-8") -> Allocation:
        """
        Write text or a binary buffer to a new temporary file.

        Raises:
            TypeError: If content is not str or bytes-like. Raised before anything is allocated.
            WriteFailureError: If writing fails. Nothing is left on disk.
        """
        content_kind(content, allow_streams=False)
        allocation = self.allocate_file(options)
        try:
            nbytes = write_content(allocation.path, content, encoding=encoding)
        except BaseException as exc:
            self._discard(allocation, exc)
            if isinstance(exc, OSError):
                raise WriteFailureError(f"Failed to write temporary file {allocation.path}: {exc}") from exc
            raise
        logger.debug("Wrote %d bytes to temporary file: %s", nbytes, allocation.path)
        return allocation

    async def write(
            self,
            content: Content | StreamContent,
            options: FileOptions | None = None,
            *,
            encoding: str = "utf-8",
            chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> Allocation:
        """
        Write text, a binary buffer or a binary stream to a new temporary file.

        Streams are drained completely before returning.

        Raises:
            TypeError: If content type is unsupported. Raised before anything is allocated.
            WriteFailureError: If writing fails. Nothing is left on disk.
        """
        content_kind(content)
        allocation = await self.allocate_file_async(options)
        try:
            nbytes = await write_content_async(allocation.path, content, encoding=encoding, chunk_size=chunk_size)
        except BaseException as exc:
            await asyncio.to_thread(self._discard, allocation, exc)
            if isinstance(exc, OSError):
                raise WriteFailureError(f"Failed to write temporary file {allocation.path}: {exc}") from exc
            raise
        logger.debug("Wrote %d bytes to temporary file: %s", nbytes, allocation.path)
        return allocation

    async def _allocate_shielded(self, allocate: Callable[..., Allocation], options) -> Allocation:
        future = asyncio.ensure_future(asyncio.to_thread(allocate, options))
        try:
            return await asyncio.shield(future)
        except asyncio.CancelledError as exc:
            # The worker thread cannot be interrupted: wait for it, then undo what it created
            await asyncio.wait([future])
            if not future.cancelled() and future.exception() is None:
                await asyncio.to_thread(self._discard, future.result(), exc)
            raise

    def _create_dir(self, candidate: Callable[[], Path]) -> Path:
        # Existence checks in the generator do not cover a concurrent creator, mkdir does
        for _ in range(self.generator.max_attempts):
            path = candidate()
            try:
                path.mkdir(parents=True, exist_ok=False)
            except FileExistsError:
                logger.warning("Temporary directory appeared before creation: %s", path)
                continue
            return path
        raise ExhaustedRetriesError(
            f"No free temporary directory under {self.root} after {self.generator.max_attempts} attempts"
        )

    def _discard(self, allocation: Allocation, exc: BaseException) -> None:
        # A FileExistsError on a plain file means the entry belongs to someone else
        if isinstance(exc, FileExistsError) and allocation.owned == allocation.path:
            return
        try:
            remove_path(allocation.owned)
        except OSError as discard_exc:
            logger.error("Failed to remove abandoned temporary resource %s: %s", allocation.owned, discard_exc)
            exc.add_note(f"Abandoned temporary resource could not be removed: {allocation.owned}")


# Module state ---------------------------------------------------------------------------------------------------------

DEFAULT_ALLOCATOR = ResourceAllocator(PathNameGenerator(DEFAULT_RESOLVER))


# Methods --------------------------------------------------------------------------------------------------------------

def temp_file_path(
        *,
        extension: str | None = None,
        name: str | None = None,
        allocator: ResourceAllocator | None = None,
) -> Path:
    """
    Get a temporary file path you can write to. The file itself is not created.

    Args:
        extension: File extension, e.g. "png". Mutually exclusive with name.
        name: Exact file name, placed in a new random directory. Mutually exclusive with extension.
        allocator: Allocator to use instead of the process default.

    Raises:
        InvalidOptionsError: If both extension and name are given, or a value is malformed.
        ExhaustedRetriesError: If no free name could be found.
        RootUnavailableError: If the root cannot be resolved.

    Examples:
        >>> temp_file_path()
        PosixPath('/tmp/4f504b9edb5ba0e89451617bf9f971dd')
        >>> temp_file_path(extension="png")
        PosixPath('/tmp/a9fb0decd08179eb6cf4691568aa2018.png')
        >>> temp_file_path(name="unicorn.png")
        PosixPath('/tmp/f7f62bfd4e2a05f1589947647ed3f9ec/unicorn.png')
    """
    options = file_options(extension=extension, name=name)
    return (allocator or DEFAULT_ALLOCATOR).allocate_file(options).path


def temp_dir_path(*, prefix: str | None = None, allocator: ResourceAllocator | None = None) -> Path:
    """
    Get a temporary directory path. The directory is created for you.

    Args:
        prefix: Prepended to the random directory name as "<prefix>_<random>".
        allocator: Allocator to use instead of the process default.

    Raises:
        InvalidOptionsError: If prefix is malformed.
        ExhaustedRetriesError: If no free name could be found.
        RootUnavailableError: If the root cannot be resolved.

    Examples:
        >>> temp_dir_path()
        PosixPath('/tmp/2f3d094aec2cb1b93bb0f4cffce5ebd6')
        >>> temp_dir_path(prefix="a")
        PosixPath('/tmp/a_3c085674ad31223b9653c88f725d6b41')
    """
    options = DirectoryOptions(prefix=prefix)
    return (allocator or DEFAULT_ALLOCATOR).allocate_dir(options).path


async def write_temp_file(
        content: Content | StreamContent,
        *,
        extension: str | None = None,
        name: str | None = None,
        encoding: str = "utf-8",
        allocator: ResourceAllocator | None = None,
) -> Path:
    """
    Write data to a random temporary file.

    Args:
        content: str, bytes-like object, or binary stream (async iterable of bytes,
            or an object with a ``read(size)`` method).
        extension: File extension. Mutually exclusive with name.
        name: Exact file name. Mutually exclusive with extension.
        encoding: Encoding for str content.
        allocator: Allocator to use instead of the process default.

    Raises:
        InvalidOptionsError: If both extension and name are given.
        TypeError: If content type is unsupported.
        WriteFailureError: If writing fails.

    Examples:
        >>> await write_temp_file("🦄")
        PosixPath('/tmp/2f3d094aec2cb1b93bb0f4cffce5ebd6')
    """
    options = file_options(extension=extension, name=name)
    allocation = await (allocator or DEFAULT_ALLOCATOR).write(content, options, encoding=encoding)
    return allocation.path


def write_temp_file_sync(
        content: Content,
        *,
        extension: str | None = None,
        name: str | None = None,
        encoding: str = "utf-8",
        allocator: ResourceAllocator | None = None,
) -> Path:
    """
    Synchronously write data to a random temporary file.

    Same as write_temp_file(), but streams are not accepted.

    Examples:
        >>> write_temp_file_sync(b"\\x00\\x01", extension="bin")
        PosixPath('/tmp/2f3d094aec2cb1b93bb0f4cffce5ebd6.bin')
    """
    options = file_options(extension=extension, name=name)
    return (allocator or DEFAULT_ALLOCATOR).write_sync(content, options, encoding=encoding).path
