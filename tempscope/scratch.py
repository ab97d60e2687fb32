#
# Tempscope Scoped Temp Files and Directories
#

# Standard library -----------------------------------------------------------------------------------------------------
import asyncio
import inspect
import logging
from contextlib import asynccontextmanager, contextmanager
from functools import partial
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Coroutine, Iterator, TypeVar

# Local ----------------------------------------------------------------------------------------------------------------
from .alloc import DEFAULT_ALLOCATOR, Allocation, ResourceAllocator
from .errors import CleanupFailureError, attach_cleanup_error
from .io import Content, StreamContent, content_kind
from .options import DirectoryOptions, file_options
from .shutil import remove_path

logger = logging.getLogger(__name__)

T = TypeVar("T")

TaskCallback = Callable[[Path], T | Awaitable[T]]


# Methods --------------------------------------------------------------------------------------------------------------

def run_file_task(
        callback: TaskCallback[T],
        *,
        extension: str | None = None,
        name: str | None = None,
        allocator: ResourceAllocator | None = None,
) -> Coroutine[Any, Any, T]:
    """
    Run callback with a temporary file path, then remove the file.

    The file is not created; callback may write to the path. Removal happens whether
    callback returns, raises, or returns an awaitable that fails, and completes before
    the returned coroutine finishes or re-raises.

    Options are validated when this function is called, before a coroutine is created,
    so InvalidOptionsError is raised at the call site rather than on await.

    Args:
        callback: Called with the temporary path. May return a value or an awaitable.
        extension: File extension. Mutually exclusive with name.
        name: Exact file name, placed in a new random directory. Mutually exclusive with extension.
        allocator: Allocator to use instead of the process default.

    Returns:
        Coroutine resolving to the callback's (awaited) return value.

    Raises:
        InvalidOptionsError: If both extension and name are given. Raised immediately.
        CleanupFailureError: If callback succeeded but the file could not be removed.
            If callback failed, its exception is re-raised with the cleanup failure attached.

    Examples:
        >>> await run_file_task(lambda p: p.write_text("data"), extension="txt")
        4
    """
    options = file_options(extension=extension, name=name)
    allocator = allocator or DEFAULT_ALLOCATOR
    return _run_scoped(partial(allocator.allocate_file_async, options), callback)


def run_dir_task(
        callback: TaskCallback[T],
        *,
        prefix: str | None = None,
        allocator: ResourceAllocator | None = None,
) -> Coroutine[Any, Any, T]:
    """
    Run callback with a new temporary directory, then remove the directory and its contents.

    Same validation and cleanup guarantees as run_file_task().

    Examples:
        >>> async def build(d):
        ...     (d / "out.txt").write_text("ok")
        ...     return sorted(p.name for p in d.iterdir())
        >>> await run_dir_task(build, prefix="build")
        ['out.txt']
    """
    options = DirectoryOptions(prefix=prefix)
    allocator = allocator or DEFAULT_ALLOCATOR
    return _run_scoped(partial(allocator.allocate_dir_async, options), callback)


def run_write_task(
        content: Content | StreamContent,
        callback: TaskCallback[T],
        *,
        extension: str | None = None,
        name: str | None = None,
        encoding: str = "utf-8",
        allocator: ResourceAllocator | None = None,
) -> Coroutine[Any, Any, T]:
    """
    Write content to a temporary file, run callback with its path, then remove the file.

    Same validation and cleanup guarantees as run_file_task(); an unsupported content
    type is also rejected at call time. If writing fails, callback is not called.

    Examples:
        >>> await run_write_task("🦄", lambda p: p.read_text())
        '🦄'
    """
    options = file_options(extension=extension, name=name)
    content_kind(content)
    allocator = allocator or DEFAULT_ALLOCATOR
    return _run_scoped(partial(allocator.write, content, options, encoding=encoding), callback)


@contextmanager
def temp_file(
        *,
        extension: str | None = None,
        name: str | None = None,
        allocator: ResourceAllocator | None = None,
) -> Iterator[Path]:
    """
    Context manager that provides a Path to a temporary file.
    The file (and the random directory holding a named file) is removed upon exiting the 'with' block.
    """
    options = file_options(extension=extension, name=name)
    allocation = (allocator or DEFAULT_ALLOCATOR).allocate_file(options)
    with _scoped(allocation) as path:
        yield path


@contextmanager
def temp_dir(*, prefix: str | None = None, allocator: ResourceAllocator | None = None) -> Iterator[Path]:
    """
    Context manager that provides a Path object to a temporary directory.
    The directory and its contents are automatically removed upon exiting the 'with' block.
    """
    allocation = (allocator or DEFAULT_ALLOCATOR).allocate_dir(DirectoryOptions(prefix=prefix))
    with _scoped(allocation) as path:
        yield path


@asynccontextmanager
async def atemp_file(
        *,
        extension: str | None = None,
        name: str | None = None,
        allocator: ResourceAllocator | None = None,
) -> AsyncIterator[Path]:
    """Async variant of temp_file(), for use with 'async with'."""
    options = file_options(extension=extension, name=name)
    allocation = await (allocator or DEFAULT_ALLOCATOR).allocate_file_async(options)
    async with _ascoped(allocation) as path:
        yield path


@asynccontextmanager
async def atemp_dir(*, prefix: str | None = None, allocator: ResourceAllocator | None = None) -> AsyncIterator[Path]:
    """Async variant of temp_dir(), for use with 'async with'."""
    options = DirectoryOptions(prefix=prefix)
    allocation = await (allocator or DEFAULT_ALLOCATOR).allocate_dir_async(options)
    async with _ascoped(allocation) as path:
        yield path


# Private methods ------------------------------------------------------------------------------------------------------

async def _run_scoped(acquire: Callable[[], Awaitable[Allocation]], callback: TaskCallback[T]) -> T:
    allocation = await acquire()
    async with _ascoped(allocation) as path:
        result = callback(path)
        if inspect.isawaitable(result):
            result = await result
    return result


@contextmanager
def _scoped(allocation: Allocation) -> Iterator[Path]:
    try:
        yield allocation.path
    except BaseException as exc:
        cleanup_error = _release(allocation)
        if cleanup_error is not None:
            attach_cleanup_error(exc, cleanup_error)
        raise
    cleanup_error = _release(allocation)
    if cleanup_error is not None:
        raise cleanup_error


@asynccontextmanager
async def _ascoped(allocation: Allocation) -> AsyncIterator[Path]:
    try:
        yield allocation.path
    except BaseException as exc:
        # Runs on cancellation too
        cleanup_error = await asyncio.to_thread(_release, allocation)
        if cleanup_error is not None:
            attach_cleanup_error(exc, cleanup_error)
        raise
    cleanup_error = await asyncio.to_thread(_release, allocation)
    if cleanup_error is not None:
        raise cleanup_error


def _release(allocation: Allocation) -> CleanupFailureError | None:
    """Remove the owned entry once. Returns the failure instead of raising it."""
    try:
        remove_path(allocation.owned)
    except OSError as exc:
        logger.error("Failed to remove temporary resource %s: %s", allocation.owned, exc)
        error = CleanupFailureError(f"Failed to remove temporary resource {allocation.owned}: {exc}")
        error.__cause__ = exc
        return error
    logger.debug("Released temporary resource: %s", allocation.owned)
    return None
