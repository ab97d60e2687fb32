#
# Tempscope - Naming Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import re
from pathlib import Path

# Third Party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from tempscope.errors import ExhaustedRetriesError
from tempscope.naming import DEFAULT_MAX_ATTEMPTS, PathNameGenerator
from tempscope.options import DirectoryOptions, NoOverride, WithExtension, WithName
from tempscope.root import RootResolver

HEX32 = re.compile(r"^[0-9a-f]{32}$")


# Tests ----------------------------------------------------------------------------------------------------------------

class TestFilePath:
    def test_default_is_random_hex_under_root(self, generator: PathNameGenerator, tmp_path: Path):
        path = generator.file_path()
        assert path.parent == tmp_path
        assert HEX32.match(path.name)
        assert not path.exists()

    def test_no_override_same_as_none(self, tokens, tmp_path: Path):
        gen = PathNameGenerator(RootResolver(path=tmp_path), token=tokens("aa", "bb"))
        assert gen.file_path(NoOverride()) == tmp_path / "aa"
        assert gen.file_path(None) == tmp_path / "bb"

    @pytest.mark.parametrize("extension", ["png", ".png"])
    def test_extension_appended(self, tokens, tmp_path: Path, extension):
        gen = PathNameGenerator(RootResolver(path=tmp_path), token=tokens("abc"))
        assert gen.file_path(WithExtension(extension)) == tmp_path / "abc.png"

    def test_name_nested_in_random_parent(self, generator: PathNameGenerator, tmp_path: Path):
        path = generator.file_path(WithName("unicorn.png"))
        assert path.name == "unicorn.png"
        assert path.parent.parent == tmp_path
        assert HEX32.match(path.parent.name)
        # Only the name is computed, nothing is created
        assert not path.parent.exists()

    def test_uniqueness(self, generator: PathNameGenerator):
        paths = [generator.file_path() for _ in range(200)]
        paths += [generator.file_path(WithExtension("txt")) for _ in range(200)]
        paths += [generator.file_path(WithName("same.txt")) for _ in range(200)]
        assert len(set(paths)) == len(paths)


class TestDirPath:
    def test_default(self, tokens, tmp_path: Path):
        gen = PathNameGenerator(RootResolver(path=tmp_path), token=tokens("d1"))
        path = gen.dir_path()
        assert path == tmp_path / "d1"
        assert not path.exists()

    def test_prefix(self, tokens, tmp_path: Path):
        gen = PathNameGenerator(RootResolver(path=tmp_path), token=tokens("d1"))
        assert gen.dir_path(DirectoryOptions(prefix="a")) == tmp_path / "a_d1"

    def test_prefix_with_random_token(self, generator: PathNameGenerator):
        path = generator.dir_path(DirectoryOptions(prefix="cache"))
        prefix, _, token = path.name.partition("_")
        assert prefix == "cache"
        assert HEX32.match(token)


class TestCollisions:
    def test_existing_entry_skipped(self, tokens, tmp_path: Path, caplog: pytest.LogCaptureFixture):
        (tmp_path / "taken").write_text("x")
        gen = PathNameGenerator(RootResolver(path=tmp_path), token=tokens("taken", "free"))

        with caplog.at_level(logging.WARNING, logger="tempscope.naming"):
            path = gen.file_path()

        assert path == tmp_path / "free"
        assert "collision" in caplog.text

    def test_collision_on_extension_variant(self, tokens, tmp_path: Path):
        (tmp_path / "t1.txt").write_text("x")
        gen = PathNameGenerator(RootResolver(path=tmp_path), token=tokens("t1", "t2"))
        assert gen.file_path(WithExtension("txt")) == tmp_path / "t2.txt"

    def test_collision_on_named_file_parent(self, tokens, tmp_path: Path):
        (tmp_path / "p1").mkdir()
        gen = PathNameGenerator(RootResolver(path=tmp_path), token=tokens("p1", "p2"))
        assert gen.file_path(WithName("a.txt")) == tmp_path / "p2" / "a.txt"

    def test_exhausted_retries(self, tmp_path: Path):
        (tmp_path / "same").mkdir()
        calls = {"count": 0}

        def token():
            calls["count"] += 1
            return "same"

        gen = PathNameGenerator(RootResolver(path=tmp_path), max_attempts=3, token=token)
        with pytest.raises(ExhaustedRetriesError, match=r"after 3 attempts"):
            gen.dir_path()
        assert calls["count"] == 3

    def test_exhausted_retries_is_file_exists_error(self, tmp_path: Path):
        (tmp_path / "same").write_text("x")
        gen = PathNameGenerator(RootResolver(path=tmp_path), max_attempts=1, token=lambda: "same")
        with pytest.raises(FileExistsError):
            gen.file_path()

    def test_default_max_attempts(self, generator: PathNameGenerator):
        assert generator.max_attempts == DEFAULT_MAX_ATTEMPTS

    @pytest.mark.parametrize("max_attempts", [0, -1])
    def test_invalid_max_attempts(self, resolver: RootResolver, max_attempts):
        with pytest.raises(ValueError, match=r"max_attempts"):
            PathNameGenerator(resolver, max_attempts=max_attempts)
