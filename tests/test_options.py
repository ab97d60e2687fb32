#
# Tempscope - Options Tests
#

# Third Party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from tempscope.errors import InvalidOptionsError
from tempscope.options import DirectoryOptions, NoOverride, WithExtension, WithName, file_options


# Tests ----------------------------------------------------------------------------------------------------------------

class TestFileOptions:
    def test_no_arguments_is_no_override(self):
        assert file_options() == NoOverride()

    def test_extension_only(self):
        assert file_options(extension="png") == WithExtension("png")

    def test_name_only(self):
        assert file_options(name="unicorn.png") == WithName("unicorn.png")

    @pytest.mark.parametrize(
        "extension,name",
        [
            ("png", "unicorn.png"),
            (".txt", "a"),
            ("x", "x"),
        ],
    )
    def test_extension_and_name_are_mutually_exclusive(self, extension, name):
        with pytest.raises(InvalidOptionsError, match=r"(?i)mutually exclusive"):
            file_options(extension=extension, name=name)

    @pytest.mark.parametrize("extension,suffix", [("png", ".png"), (".png", ".png"), ("tar.gz", ".tar.gz")])
    def test_extension_suffix_single_leading_dot(self, extension, suffix):
        assert WithExtension(extension).suffix == suffix

    @pytest.mark.parametrize("extension", ["", "."])
    def test_empty_extension_rejected(self, extension):
        with pytest.raises(InvalidOptionsError, match=r"(?i)empty"):
            WithExtension(extension)

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "../escape.txt"])
    def test_malformed_name_rejected(self, name):
        with pytest.raises(InvalidOptionsError):
            WithName(name)

    def test_non_str_rejected(self):
        with pytest.raises(TypeError):
            WithExtension(123)
        with pytest.raises(TypeError):
            WithName(b"raw")

    def test_variants_are_immutable(self):
        opts = WithName("a.txt")
        with pytest.raises(AttributeError):
            opts.name = "b.txt"


class TestDirectoryOptions:
    def test_default_has_no_prefix(self):
        assert DirectoryOptions().prefix is None

    def test_prefix(self):
        assert DirectoryOptions(prefix="cache").prefix == "cache"

    @pytest.mark.parametrize("prefix", ["", "a/b"])
    def test_malformed_prefix_rejected(self, prefix):
        with pytest.raises(InvalidOptionsError):
            DirectoryOptions(prefix=prefix)

    def test_non_str_prefix_rejected(self):
        with pytest.raises(TypeError):
            DirectoryOptions(prefix=1)
