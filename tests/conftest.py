#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
from pathlib import Path

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from tempscope.alloc import ResourceAllocator
from tempscope.naming import PathNameGenerator
from tempscope.root import RootResolver


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture
def resolver(tmp_path: Path) -> RootResolver:
    """Root pinned to the per-test tmp_path, so tests never touch the real temp directory."""
    return RootResolver(path=tmp_path)


@pytest.fixture
def generator(resolver: RootResolver) -> PathNameGenerator:
    return PathNameGenerator(resolver)


@pytest.fixture
def allocator(generator: PathNameGenerator) -> ResourceAllocator:
    return ResourceAllocator(generator)


@pytest.fixture
def tokens():
    """Factory for a deterministic token source yielding the given tokens in order."""

    def _tokens(*values: str):
        it = iter(values)
        return lambda: next(it)

    return _tokens
