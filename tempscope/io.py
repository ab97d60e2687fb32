"""
Content persistence for temporary files: text, binary buffers and binary streams.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import asyncio
import inspect
import os
from collections.abc import Iterable, Mapping
from typing import Any, AsyncIterable, AsyncIterator, Literal, Protocol, Union

# Constants ------------------------------------------------------------------------------------------------------------
DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1MB

_EXHAUSTED = object()


# Classes --------------------------------------------------------------------------------------------------------------

class Readable(Protocol):
    """Binary stream with a ``read(size)`` method, either plain or a coroutine."""

    def read(self, size: int = -1, /) -> Any: ...


Buffer = Union[bytes, bytearray, memoryview]
Content = Union[str, Buffer]
StreamContent = Union[AsyncIterable[bytes], Iterable[bytes], Readable]

ContentKind = Literal["text", "buffer", "stream"]


# Methods --------------------------------------------------------------------------------------------------------------

def content_kind(content: Any, *, allow_streams: bool = True) -> ContentKind:
    """
    Classify content as text, binary buffer or binary stream.

    Buffers are any object supporting the buffer protocol (bytes, bytearray, memoryview,
    array.array, ...). Streams are async or plain iterables of bytes chunks, or objects with
    a ``read`` method. Mappings are not streams.

    Args:
        content: Value to classify.
        allow_streams: If False, streams are rejected.

    Raises:
        TypeError: If content is of an unsupported type, or a stream when streams are not allowed.

    Examples:
        >>> content_kind("hello")
        'text'
        >>> content_kind(b"\\x00\\x01")
        'buffer'
        >>> content_kind(open("data.bin", "rb"))
        'stream'
    """
    if isinstance(content, str):
        return "text"
    if _is_buffer(content):
        return "buffer"
    if _is_stream(content):
        if not allow_streams:
            raise TypeError(
                f"streams are only supported by the async writer, got {type(content).__name__}"
            )
        return "stream"
    raise TypeError(
        f"content must be str, a bytes-like object or a binary stream, got {type(content).__name__}"
    )


def as_buffer(content: Content, encoding: str = "utf-8") -> memoryview:
    """
    Return content as a flat byte view, encoding text with the given encoding.

    Raises:
        TypeError: If content is neither str nor a bytes-like object.
    """
    if isinstance(content, str):
        return memoryview(content.encode(encoding))
    if not _is_buffer(content):
        raise TypeError(f"content must be str or a bytes-like object, got {type(content).__name__}")
    view = memoryview(content)
    if not view.c_contiguous:
        view = memoryview(view.tobytes())
    return view.cast("B")


def write_content(path: str | os.PathLike[str], content: Content, *, encoding: str = "utf-8") -> int:
    """
    Write text or a binary buffer to a new file.

    The file must not exist yet; it is opened in exclusive creation mode.

    Returns:
        Number of bytes written.

    Raises:
        FileExistsError: If path already exists.
        TypeError: If content type is unsupported.
        OSError: On any I/O failure (propagated).
    """
    data = as_buffer(content, encoding)
    with open(path, "xb") as f:
        f.write(data)
    return data.nbytes


async def write_content_async(
        path: str | os.PathLike[str],
        content: Content | StreamContent,
        *,
        encoding: str = "utf-8",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Write text, a binary buffer or a binary stream to a new file without blocking the event loop.

    Streams are drained chunk by chunk until exhausted; the file is complete and closed
    when the coroutine returns. Blocking calls run in a worker thread.

    Args:
        path: Target file, must not exist yet.
        content: str, bytes-like object, async or plain iterable of bytes, or object with a
            ``read(size)`` method returning bytes (plain or coroutine).
        encoding: Encoding for str content.
        chunk_size: Read size for ``read``-style streams. Must be positive.

    Returns:
        Number of bytes written.

    Raises:
        ValueError: If chunk_size is not positive.
        TypeError: If content type is unsupported or a stream yields non-binary chunks.
        OSError: On any I/O failure (propagated).
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    if content_kind(content) != "stream":
        return await asyncio.to_thread(write_content, path, content, encoding=encoding)

    written = 0
    f = await asyncio.to_thread(open, path, "xb")
    try:
        async for chunk in iter_stream(content, chunk_size):
            await asyncio.to_thread(f.write, chunk)
            written += chunk.nbytes
    finally:
        await asyncio.to_thread(f.close)
    return written


async def iter_stream(stream: StreamContent, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[memoryview]:
    """
    Iterate over a binary stream as byte views until it is exhausted.

    A coroutine ``read`` is preferred, since async iteration of e.g. asyncio.StreamReader
    is line based. Other async iterables are consumed directly. A plain ``read`` and plain
    iteration run in a worker thread since they may block.

    Raises:
        TypeError: If the stream yields anything but bytes-like chunks.
    """
    read = getattr(stream, "read", None)
    if not inspect.iscoroutinefunction(read) and hasattr(stream, "__aiter__"):
        async for chunk in stream:
            yield _binary_chunk(chunk)
        return

    if not callable(read):
        # Plain iterable of chunks, e.g. a generator; next() may block
        iterator = iter(stream)
        while (chunk := await asyncio.to_thread(next, iterator, _EXHAUSTED)) is not _EXHAUSTED:
            yield _binary_chunk(chunk)
        return

    while True:
        if inspect.iscoroutinefunction(read):
            chunk = await read(chunk_size)
        else:
            chunk = await asyncio.to_thread(read, chunk_size)
        if not chunk:
            return
        yield _binary_chunk(chunk)


# Private methods ------------------------------------------------------------------------------------------------------

def _is_buffer(obj: Any) -> bool:
    try:
        memoryview(obj)
    except TypeError:
        return False
    return True


def _binary_chunk(chunk: Any) -> memoryview:
    if isinstance(chunk, str) or not _is_buffer(chunk):
        raise TypeError(f"binary stream expected, got a {type(chunk).__name__} chunk")
    return as_buffer(chunk)


def _is_stream(obj: Any) -> bool:
    if hasattr(obj, "__aiter__") or callable(getattr(obj, "read", None)):
        return True
    # Mappings iterate over keys, never over content
    return isinstance(obj, Iterable) and not isinstance(obj, Mapping)
