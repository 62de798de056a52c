"""Package, project and build target definitions."""

import platform
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ProjectType(str, Enum):
    """What a project builds."""
    STATIC_LIBRARY = "static_library"
    SHARED_LIBRARY = "shared_library"
    EXECUTABLE = "executable"


OS_LINUX = "linux"
OS_WINDOWS = "windows"
OS_MAC = "mac"
OS_ARDUINO = "arduino"

COMPILER_GCC = "gcc"
COMPILER_CLANG = "clang"
COMPILER_VC = "vc"

ARCH_X64 = "x86_64"
ARCH_ARM64 = "arm64"
ARCH_ESP32 = "esp32"

SUPPORTED_OS = (OS_LINUX, OS_WINDOWS, OS_MAC, OS_ARDUINO)
SUPPORTED_COMPILERS = (COMPILER_GCC, COMPILER_CLANG, COMPILER_VC)

DEFAULT_CONFIGS = ["debug", "release"]


@dataclass(frozen=True)
class BuildTarget:
    """The OS / architecture / compiler combination to generate for."""
    os: str
    arch: str
    compiler: str

    @classmethod
    def host(cls) -> "BuildTarget":
        """Build target of the machine we are running on."""
        return cls.for_os(_host_os())

    @classmethod
    def for_os(cls, os_name: str, arch: Optional[str] = None, compiler: Optional[str] = None) -> "BuildTarget":
        """Target for ``os_name`` with the default arch and compiler for that OS."""
        os_name = os_name.lower()
        if arch is None:
            arch = ARCH_ESP32 if os_name == OS_ARDUINO else _host_arch()
        if compiler is None:
            if os_name == OS_WINDOWS:
                compiler = COMPILER_VC
            elif os_name == OS_MAC or (os_name == OS_LINUX and arch == ARCH_ARM64):
                compiler = COMPILER_CLANG
            else:
                compiler = COMPILER_GCC
        return cls(os=os_name, arch=arch.lower(), compiler=compiler.lower())

    @property
    def object_suffix(self) -> str:
        return ".obj" if self.compiler == COMPILER_VC else ".o"

    def library_filename(self, name: str, project_type: ProjectType) -> str:
        if project_type is ProjectType.SHARED_LIBRARY:
            if self.os == OS_WINDOWS:
                return f"{name}.dll"
            if self.os == OS_MAC:
                return f"lib{name}.dylib"
            return f"lib{name}.so"
        if self.compiler == COMPILER_VC:
            return f"{name}.lib"
        return f"lib{name}.a"

    def executable_filename(self, name: str) -> str:
        if self.os == OS_WINDOWS:
            return f"{name}.exe"
        return name

    def output_filename(self, name: str, project_type: ProjectType) -> str:
        if project_type is ProjectType.EXECUTABLE:
            return self.executable_filename(name)
        return self.library_filename(name, project_type)

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}-{self.compiler}"


def _host_os() -> str:
    system = platform.system().lower()
    if system == "darwin":
        return OS_MAC
    if system.startswith("win"):
        return OS_WINDOWS
    return OS_LINUX


def _host_arch() -> str:
    machine = platform.machine().lower()
    if machine in ("arm64", "aarch64"):
        return ARCH_ARM64
    return ARCH_X64


@dataclass
class Project:
    """
    One buildable unit of a package.

    Attributes:
        name: Project identifier, unique within the package
        type: What the project builds
        sources: Source glob patterns, relative to the package root
        include_dirs: Include directories, relative to the package root
        defines: Preprocessor defines (may contain variable sites)
        depends_on: Names of projects this one links against
        vars: Project-level variables for interpolation
    """
    name: str
    type: ProjectType = ProjectType.STATIC_LIBRARY
    sources: List[str] = field(default_factory=list)
    include_dirs: List[str] = field(default_factory=list)
    defines: List[str] = field(default_factory=list)
    depends_on: List[str] = field(default_factory=list)
    vars: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class Package:
    """A named set of projects sharing a root directory and variables."""
    name: str
    root: str
    projects: Dict[str, Project] = field(default_factory=dict)
    configs: List[str] = field(default_factory=lambda: list(DEFAULT_CONFIGS))
    vars: Dict[str, List[str]] = field(default_factory=dict)

    def add_project(self, project: Project) -> None:
        self.projects[project.name] = project
