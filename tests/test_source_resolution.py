"""Tests for source glob resolution, path safety and platform exclusion."""

import logging
import os
import shutil
import tempfile
from pathlib import Path

import pytest

from ccode.exceptions import PathSafetyError
from ccode.project.model import BuildTarget
from ccode.project.sources import ExclusionFilter, SourceResolver, resolve_include_dirs
from ccode.vars import Interpolator, VariableStore


LINUX = BuildTarget("linux", "x86_64", "gcc")
WINDOWS = BuildTarget("windows", "x86_64", "vc")


class TestSourceResolver:

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir) / "package"
        for relative in [
            "src/main.cpp",
            "src/util.c",
            "src/notes.txt",
            "src/sub/deep.cpp",
            "src/gfx_win/d3d.cpp",
            "src/gfx_linux/gl.cpp",
            "src/file_nob/never.cpp",
            "test/test_main.cpp",
        ]:
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("// source\n")
        (self.root / "include").mkdir()

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_glob_sorted_and_filtered(self):
        result = SourceResolver(str(self.root), LINUX).resolve(["src/**/*.cpp"])

        assert result.files == ["src/gfx_linux/gl.cpp", "src/main.cpp", "src/sub/deep.cpp"]
        assert result.excluded == ["src/file_nob/never.cpp", "src/gfx_win/d3d.cpp"]
        assert result.unmatched == []

    def test_platform_exclusion_follows_target(self):
        result = SourceResolver(str(self.root), WINDOWS).resolve(["src/**/*.cpp"])

        assert "src/gfx_win/d3d.cpp" in result.files
        assert "src/gfx_linux/gl.cpp" in result.excluded

    def test_overlapping_patterns_deduplicated(self):
        result = SourceResolver(str(self.root), LINUX).resolve(["src/main.cpp", "src/*.cpp", "src/*.c"])

        assert result.files == ["src/main.cpp", "src/util.c"]
        assert result.patterns_used["src/*.cpp"] == ["src/main.cpp"]

    def test_unmatched_pattern_reported(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = SourceResolver(str(self.root), LINUX).resolve(["missing/*.c", "src/*.c"])

        assert result.files == ["src/util.c"]
        assert result.unmatched == ["missing/*.c"]
        assert "matched no files" in caplog.text

    def test_directories_are_not_sources(self):
        result = SourceResolver(str(self.root), LINUX).resolve(["src/*"])
        assert "src/sub" not in result.files
        assert "src/notes.txt" in result.files

    def test_patterns_are_interpolated(self):
        store = VariableStore({'DIRS': ["src", "test"], 'EXT': "cpp"})
        resolver = SourceResolver(str(self.root), LINUX, Interpolator(store))

        result = resolver.resolve(["$(DIRS)/*.$(EXT)"])

        assert result.files == ["src/main.cpp", "test/test_main.cpp"]

    @pytest.mark.parametrize("pattern", ["../outside/*.c", "src/../../x.c", "/etc/*.conf"])
    def test_unsafe_patterns_rejected(self, pattern):
        with pytest.raises(PathSafetyError):
            SourceResolver(str(self.root), LINUX).resolve([pattern])

    def test_interpolated_traversal_rejected(self):
        store = VariableStore({'UP': ".."})
        resolver = SourceResolver(str(self.root), LINUX, Interpolator(store))
        with pytest.raises(PathSafetyError):
            resolver.resolve(["$(UP)/*.c"])

    @pytest.mark.skipif(os.name == 'nt', reason="symlinks need privileges on Windows")
    def test_symlink_escaping_root_rejected(self):
        outside = Path(self.temp_dir) / "outside.c"
        outside.write_text("// outside\n")
        os.symlink(outside, self.root / "src" / "link.c")

        with pytest.raises(PathSafetyError):
            SourceResolver(str(self.root), LINUX).resolve(["src/*.c"])

    def test_include_dirs_split(self):
        existing, missing = resolve_include_dirs(str(self.root), ["include", "generated"])
        assert existing == ["include"]
        assert missing == ["generated"]


class TestExclusionFilter:

    def test_only_directory_components_count(self):
        exclusion = ExclusionFilter(LINUX)
        assert exclusion.is_excluded("src/impl_mac/file.cpp")
        assert not exclusion.is_excluded("src/impl/file_mac.cpp")
        assert not exclusion.is_excluded("src/impl_linux/file.cpp")

    def test_unknown_suffixes_kept(self):
        exclusion = ExclusionFilter(LINUX)
        assert not exclusion.is_excluded("src/main_cpp/file.cpp")
        assert not exclusion.is_excluded("src/trailing_/file.cpp")

    def test_custom_suffixes(self):
        exclusion = ExclusionFilter(LINUX, suffixes={"gpu": "windows"})
        assert exclusion.is_excluded("src/render_gpu/a.cpp")
        assert not exclusion.is_excluded("src/render_win/a.cpp")
