"""CMake generator."""

import logging
from typing import Dict, List

from ccode.project.model import ProjectType
from ccode.vars import VariableStore

from .base import Generator, ProjectContext
from .writer import LineWriter


logger = logging.getLogger(__name__)


CMAKE_MINIMUM_VERSION = "3.16"

HEADER = [
    "# Generated by ccode for package $(PACKAGE) ($(OS)-$(ARCH)-$(COMPILER))",
    "cmake_minimum_required(VERSION $(CMAKE_MINIMUM_VERSION))",
    "project($(PACKAGE) LANGUAGES C CXX)",
    "",
    "set(CCODE_ROOT ${CMAKE_CURRENT_SOURCE_DIR}/$(ROOT))",
    "",
]

TARGET_KINDS: Dict[ProjectType, str] = {
    ProjectType.STATIC_LIBRARY: "add_library($(PROJECT) STATIC",
    ProjectType.SHARED_LIBRARY: "add_library($(PROJECT) SHARED",
    ProjectType.EXECUTABLE: "add_executable($(PROJECT)",
}

SOURCE_LINE = "    ${CCODE_ROOT}/$(SOURCES:f)"
INCLUDE_LINE = "    ${CCODE_ROOT}/$(PROJECT_INCLUDES:f)"
DEFINE_LINE = "    $<$<CONFIG:$(CONFIG)>:$(DEFINES)>"
OPTION_LINE = "    $<$<CONFIG:$(CONFIG)>:$(CCOPTS_$(CONFIG:u))>"
LINK_LINE = "target_link_libraries($(PROJECT) PRIVATE $(LINKS:j ))"


class CMakeGenerator(Generator):
    """Writes a CMakeLists.txt with one target per project."""

    name = "cmake"
    description = "CMake CMakeLists.txt"

    FILENAME = "CMakeLists.txt"

    def package_variables(self) -> VariableStore:
        store = super().package_variables()
        if not store.has('CMAKE_MINIMUM_VERSION'):
            store.set('CMAKE_MINIMUM_VERSION', CMAKE_MINIMUM_VERSION)
        return store

    def generate(self) -> Dict[str, LineWriter]:
        contexts = self.project_contexts()

        writer = LineWriter()
        self.emit(writer, HEADER, self.package_variables())
        for context in contexts:
            self._write_project(writer, context)

        logger.debug(f"Generated {self.FILENAME} with {len(contexts)} targets")
        return {self.FILENAME: writer}

    def _write_project(self, writer: LineWriter, context: ProjectContext) -> None:
        store = context.variables
        self.emit(writer, ["# $(PROJECT) ($(PROJECT_TYPE))", TARGET_KINDS[context.project.type]], store)
        if context.sources:
            self.emit(writer, [SOURCE_LINE], store)
        writer.write_line(")")

        if context.include_dirs:
            self._block(writer, "target_include_directories($(PROJECT) PUBLIC", [INCLUDE_LINE], [store])

        configs = [self.config_variables(context, config) for config in self.package.configs]
        self._block(writer, "target_compile_definitions($(PROJECT) PRIVATE", [DEFINE_LINE], configs)
        self._block(writer, "target_compile_options($(PROJECT) PRIVATE", [OPTION_LINE], configs)

        if context.project.depends_on:
            self.emit(writer, [LINK_LINE], store)
        writer.write_line()

    def _block(self, writer: LineWriter, opening: str, lines: List[str], stores: List[VariableStore]) -> None:
        """Write ``opening``, the lines resolved against each store, and ')'.

        Lines whose variable resolved to nothing are dropped, and so is the
        whole block when no line is left.
        """
        body: List[str] = []
        for store in stores:
            interpolator = self.template_interpolator(store)
            empty = f"$<$<CONFIG:{store.get_one('CONFIG')}>:>"
            for template in lines:
                body.extend(line for line in interpolator.resolve(template) if line.strip() not in ("", empty))
        if not body:
            return
        self.emit(writer, [opening], stores[0])
        writer.write_lines(body)
        writer.write_line(")")
