"""
Removal of temporary filesystem entries.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import os
import shutil
from pathlib import Path


# Methods --------------------------------------------------------------------------------------------------------------

def remove_path(path: str | os.PathLike[str], *, missing_ok: bool = True) -> bool:
    """
    Removes a file, symlink or directory tree.

    Directories are deleted recursively with all their contents. Symlinks are removed
    themselves, never followed, even when they point to a directory.

    Args:
        path: Entry to remove.
        missing_ok: If True, a missing entry is not an error.
            If False, raises FileNotFoundError if the entry doesn't exist.

    Returns:
        bool: True if something was removed, False if the entry was already missing.

    Raises:
        FileNotFoundError: If path doesn't exist (when missing_ok=False).
        PermissionError: If lacking permission to delete the entry or its contents.
        OSError: If deletion fails for other reasons.

    Examples:
        >>> remove_path("/tmp/2f3d094aec2cb1b93bb0f4cffce5ebd6")
        True
        >>> remove_path("/tmp/does-not-exist")
        False
    """
    entry = Path(path)

    # lexists: a dangling symlink still has to go
    if not os.path.lexists(entry):
        if missing_ok:
            return False
        raise FileNotFoundError(f"Path not found: {entry}")

    if entry.is_dir() and not entry.is_symlink():
        shutil.rmtree(entry)
    else:
        # File or symlink (including symlinks to directories)
        entry.unlink()
    return True
