"""
GNU Make generator.

Templates use ``{NAME}`` sites so that Make's own ``$(...)`` references
pass through untouched.
"""

import logging
from pathlib import PurePosixPath
from typing import Dict, List

from ccode.project.model import COMPILER_VC, ProjectType
from ccode.vars import VarsFormat

from .base import Generator, ProjectContext
from .writer import LineWriter


logger = logging.getLogger(__name__)


HEADER = [
    "# Generated by ccode for package {PACKAGE} ({OS}-{ARCH}-{COMPILER})",
    "",
    "CONFIG ?= {CONFIGS:i0}",
    "BUILD_DIR ?= build/$(CONFIG)",
    "ROOT := {ROOT}",
    "CC := {CC}",
    "CXX := {CXX}",
    "AR := {AR}",
    "LDFLAGS ?=",
    "",
    ".PHONY: all clean",
    "",
    "all: {OUTPUTS:p$(BUILD_DIR)/:j }",
    "",
]

FOOTER = [
    "clean:",
    "+rm -rf $(BUILD_DIR)",
]

# Each piece resolves to zero or more flags.
FLAGS = [
    "{CCOPTS_{CONFIG:u}}",
    "{PIC_{PROJECT_TYPE:u}}",
    "{DEFINES:p{DEFINE_FLAG}}",
    "{INCLUDES:p{INCLUDE_FLAG}$(ROOT)/}",
]

PROJECT_HEADER = [
    "# {PROJECT} ({PROJECT_TYPE})",
    "{PROJECT}_OBJS := {SOURCES:p$(BUILD_DIR)/{PROJECT}/:s{OBJ_SUFFIX}:j }",
]

COMPILE_RULE = [
    "$(BUILD_DIR)/{PROJECT}/%{EXT}{OBJ_SUFFIX}: $(ROOT)/%{EXT}",
    "+@mkdir -p $(dir $@)",
    "+{TOOL} $({PROJECT}_$(CONFIG)_CFLAGS) {COMPILE}",
]

LINK_RULE = [
    "$(BUILD_DIR)/{OUTPUT}: $({PROJECT}_OBJS) {DEPENDS_OUTPUT:p$(BUILD_DIR)/:j }",
    "+@mkdir -p $(dir $@)",
    "+{LINK}",
    "",
]

COMMANDS: Dict[str, Dict[str, str]] = {
    'default': {
        'COMPILE': "-c $< -o $@",
        ProjectType.STATIC_LIBRARY.value: "$(AR) rcs $@ $^",
        ProjectType.SHARED_LIBRARY.value: "$(CXX) -shared -o $@ $^ $(LDFLAGS)",
        ProjectType.EXECUTABLE.value: "$(CXX) -o $@ $^ $(LDFLAGS)",
    },
    COMPILER_VC: {
        'COMPILE': "/nologo /c $< /Fo$@",
        ProjectType.STATIC_LIBRARY.value: "$(AR) /nologo /OUT:$@ $^",
        ProjectType.SHARED_LIBRARY.value: "link /nologo /DLL /OUT:$@ $^ $(LDFLAGS)",
        ProjectType.EXECUTABLE.value: "link /nologo /OUT:$@ $^ $(LDFLAGS)",
    },
}

C_EXTENSIONS = {".c"}


class MakeGenerator(Generator):
    """Writes a single Makefile building every project of the package."""

    name = "make"
    description = "GNU Make Makefile"
    vars_format = VarsFormat.CURLY_BRACES

    FILENAME = "Makefile"

    def generate(self) -> Dict[str, LineWriter]:
        contexts = self.project_contexts()

        store = self.package_variables()
        store.set('OUTPUTS', *[c.output for c in contexts])

        writer = LineWriter()
        self.emit(writer, HEADER, store)
        for context in contexts:
            self._write_project(writer, context)
        self.emit(writer, FOOTER, store)

        logger.debug(f"Generated {self.FILENAME} with {len(contexts)} projects")
        return {self.FILENAME: writer}

    def _write_project(self, writer: LineWriter, context: ProjectContext) -> None:
        commands = COMMANDS.get(self.target.compiler, COMMANDS['default'])
        store = context.variables.copy()
        store.set('COMPILE', commands['COMPILE'])
        store.set('LINK', commands[context.project.type.value])
        if context.project.type is ProjectType.STATIC_LIBRARY:
            # Archives never contain their dependencies
            store.set('DEPENDS_OUTPUT')

        self.emit(writer, PROJECT_HEADER, store)

        for config in self.package.configs:
            flags = self.flags(context, config)
            writer.write_line(f"{context.name}_{config}_CFLAGS := {' '.join(flags)}".rstrip())
        writer.write_line()

        for extension in self._extensions(context.sources):
            store.set('EXT', extension)
            store.set('TOOL', "$(CC)" if extension in C_EXTENSIONS else "$(CXX)")
            self.emit(writer, COMPILE_RULE, store)
            writer.write_line()

        self.emit(writer, LINK_RULE, store)

    def flags(self, context: ProjectContext, config: str) -> List[str]:
        """Compiler flags of one project and configuration."""
        store = self.config_variables(context, config)
        resolved = self.template_interpolator(store).resolve_list(FLAGS)
        return [flag for flag in resolved if flag]

    @staticmethod
    def _extensions(sources: List[str]) -> List[str]:
        return sorted({PurePosixPath(s).suffix for s in sources if PurePosixPath(s).suffix})
