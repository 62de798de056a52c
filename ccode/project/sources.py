"""Source file resolution with glob matching, path safety and platform filtering."""

import glob
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ccode.exceptions import PathSafetyError
from ccode.vars import Interpolator

from .model import OS_ARDUINO, OS_LINUX, OS_MAC, OS_WINDOWS, BuildTarget


logger = logging.getLogger(__name__)


# Directory suffixes (after the last '_') that tie a directory to one platform,
# e.g. 'source/main/cpp/file_win/' only builds on Windows.
PLATFORM_SUFFIXES: Dict[str, str] = {
    **{s: OS_WINDOWS for s in ("win", "pc", "win32", "win64", "windows", "d3d11", "d3d12")},
    **{s: OS_MAC for s in ("mac", "macos", "darwin", "cocoa", "metal", "osx")},
    **{s: OS_LINUX for s in ("linux", "unix")},
    **{s: OS_ARDUINO for s in ("arduino", "esp32", "esp8266")},
    **{s: "none" for s in ("nob", "null", "nill")},
}


class ExclusionFilter:
    """Excludes files living in directories that belong to another platform."""

    def __init__(self, target: BuildTarget, suffixes: Optional[Dict[str, str]] = None):
        self.target = target
        self.suffixes = suffixes if suffixes is not None else PLATFORM_SUFFIXES

    def _excludes_component(self, component: str) -> bool:
        component = component.lower()
        pivot = component.rfind('_')
        if pivot < 0 or pivot + 1 >= len(component):
            return False
        platform = self.suffixes.get(component[pivot + 1:])
        return platform is not None and platform != self.target.os

    def is_excluded(self, path: str) -> bool:
        """True if any directory component of ``path`` names another platform."""
        directories = Path(path).parts[:-1]
        return any(self._excludes_component(d) for d in directories)


@dataclass
class SourceResolution:
    """Results of resolving a project's source patterns."""
    files: List[str]
    excluded: List[str]
    patterns_used: Dict[str, List[str]]  # pattern -> matched files
    unmatched: List[str]


class SourceResolver:
    """Resolves source glob patterns relative to a package root."""

    def __init__(self, root: str, target: BuildTarget, interpolator: Optional[Interpolator] = None):
        """Initialize resolver.

        Args:
            root: Package root directory
            target: Build target used for platform exclusion
            interpolator: Expands variable sites in patterns before globbing
        """
        self.root = Path(root).resolve()
        self.filter = ExclusionFilter(target)
        self.interpolator = interpolator

    def resolve(self, patterns: Iterable[str]) -> SourceResolution:
        """Resolve patterns to files.

        Args:
            patterns: Glob patterns, may contain variable sites and '**'

        Returns:
            SourceResolution with files in deterministic order

        Raises:
            PathSafetyError: If a pattern or match escapes the package root
        """
        files: List[str] = []
        excluded: List[str] = []
        patterns_used: Dict[str, List[str]] = {}
        unmatched: List[str] = []

        for pattern in self._expand_patterns(patterns):
            self._validate_path_safety(pattern)

            matches = self._match(pattern)
            if not matches:
                logger.warning(f"Source pattern matched no files: {pattern}")
                unmatched.append(pattern)
                continue

            kept = []
            for match in matches:
                if self.filter.is_excluded(match):
                    excluded.append(match)
                else:
                    kept.append(match)
            patterns_used[pattern] = kept
            files.extend(kept)

        return SourceResolution(
            files=_unique(files),
            excluded=_unique(excluded),
            patterns_used=patterns_used,
            unmatched=unmatched
        )

    def _expand_patterns(self, patterns: Iterable[str]) -> List[str]:
        if self.interpolator is None:
            return list(patterns)
        return self.interpolator.resolve_list(patterns)

    def _match(self, pattern: str) -> List[str]:
        full_pattern = self.root / pattern
        matches = glob.glob(str(full_pattern), recursive=True)

        relative_matches = []
        for match in matches:
            match_path = Path(match).resolve()
            if not match_path.is_file():
                continue

            # Symlinks must not lead outside the package root
            try:
                rel_path = match_path.relative_to(self.root)
            except ValueError:
                raise PathSafetyError(
                    f"Path safety violation: '{match}' resolves outside package root"
                )
            relative_matches.append(rel_path.as_posix())

        relative_matches.sort()
        return relative_matches

    @staticmethod
    def _validate_path_safety(path: str) -> None:
        """Validate path doesn't leave the package root.

        Raises:
            PathSafetyError: If path is absolute or contains ..
        """
        if os.path.isabs(path) or Path(path).is_absolute():
            raise PathSafetyError(
                f"Path safety violation: absolute path not allowed: {path}"
            )

        if ".." in Path(path).parts:
            raise PathSafetyError(
                f"Path safety violation: parent directory traversal not allowed: {path}"
            )


def resolve_include_dirs(root: str, include_dirs: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Split include directories into (existing, missing), both relative to ``root``."""
    base = Path(root)
    existing, missing = [], []
    for include in include_dirs:
        SourceResolver._validate_path_safety(include)
        (existing if (base / include).is_dir() else missing).append(include)
    return existing, missing


def _unique(items: List[str]) -> List[str]:
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique
