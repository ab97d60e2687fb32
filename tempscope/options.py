"""
Options for temporary file and directory names.

File options are a tagged variant: a file name is either fully random (NoOverride),
random with an extension (WithExtension), or a caller-given name inside a random
directory (WithName). file_options() maps keyword arguments onto exactly one variant.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import os
from dataclasses import dataclass

# Local ----------------------------------------------------------------------------------------------------------------
from .errors import InvalidOptionsError


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class NoOverride:
    """Random file name with no extension."""


@dataclass(frozen=True)
class WithExtension:
    """
    Random file name followed by an extension.

    Attributes:
        extension: Extension with or without the leading dot, e.g. "png" or ".png".
    """

    extension: str

    def __post_init__(self) -> None:
        if not isinstance(self.extension, str):
            raise TypeError(f"extension must be a str, got {type(self.extension).__name__}")
        if not self.extension.removeprefix("."):
            raise InvalidOptionsError(f"extension must not be empty: {self.extension!r}")
        _reject_separators("extension", self.extension)

    @property
    def suffix(self) -> str:
        """Extension normalized to a single leading dot."""
        return "." + self.extension.removeprefix(".")


@dataclass(frozen=True)
class WithName:
    """
    Exact file name placed inside a freshly generated random directory.

    Attributes:
        name: Final path component, used verbatim.
    """

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise TypeError(f"name must be a str, got {type(self.name).__name__}")
        if not self.name or self.name in (".", ".."):
            raise InvalidOptionsError(f"name must be a plain file name: {self.name!r}")
        _reject_separators("name", self.name)


FileOptions = NoOverride | WithExtension | WithName


@dataclass(frozen=True)
class DirectoryOptions:
    """
    Options for temporary directory names.

    Attributes:
        prefix: Prepended to the random directory name as "<prefix>_<random>". None for no prefix.
    """

    prefix: str | None = None

    def __post_init__(self) -> None:
        if self.prefix is None:
            return
        if not isinstance(self.prefix, str):
            raise TypeError(f"prefix must be a str or None, got {type(self.prefix).__name__}")
        if not self.prefix:
            raise InvalidOptionsError("prefix must not be empty, use None for no prefix")
        _reject_separators("prefix", self.prefix)


# Methods --------------------------------------------------------------------------------------------------------------

def file_options(extension: str | None = None, name: str | None = None) -> FileOptions:
    """
    Build the FileOptions variant for keyword-style arguments.

    Args:
        extension: File extension for a random file name. Mutually exclusive with name.
        name: Exact file name. Mutually exclusive with extension.

    Returns:
        NoOverride, WithExtension or WithName.

    Raises:
        InvalidOptionsError: If both extension and name are given, or a value is malformed.
        TypeError: If a value is not a str.

    Examples:
        >>> file_options()
        NoOverride()
        >>> file_options(extension="png")
        WithExtension(extension='png')
        >>> file_options(name="unicorn.png")
        WithName(name='unicorn.png')
    """
    if extension is not None and name is not None:
        raise InvalidOptionsError(
            f"extension and name are mutually exclusive, got extension={extension!r} and name={name!r}"
        )
    if extension is not None:
        return WithExtension(extension)
    if name is not None:
        return WithName(name)
    return NoOverride()


# Private methods ------------------------------------------------------------------------------------------------------

def _reject_separators(field: str, value: str) -> None:
    separators = {os.sep, "/"}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in value for sep in separators):
        raise InvalidOptionsError(f"{field} must not contain a path separator: {value!r}")
