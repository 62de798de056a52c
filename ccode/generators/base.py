"""
Generator base class.

A generator turns a loaded Package into one or more text files. The base
class does the shared work: ordering projects, resolving sources and
seeding a VariableStore per project and configuration so subclasses only
deal with templates.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ccode.exceptions import PathSafetyError
from ccode.project.graph import build_order, transitive_dependencies
from ccode.project.model import COMPILER_CLANG, COMPILER_VC, BuildTarget, Package, Project
from ccode.project.sources import SourceResolver, resolve_include_dirs
from ccode.vars import Interpolator, VariableStore, VarsFormat

from .writer import LineWriter


logger = logging.getLogger(__name__)


def toolchain_variables(target: BuildTarget) -> Dict[str, List[str]]:
    """Default compiler settings for ``target``; package vars may override them."""
    if target.compiler == COMPILER_VC:
        return {
            'CC': ['cl'], 'CXX': ['cl'], 'AR': ['lib'],
            'DEFINE_FLAG': ['/D'], 'INCLUDE_FLAG': ['/I'],
            'CCOPTS_DEBUG': ['/Od', '/Zi'], 'CCOPTS_RELEASE': ['/O2'],
            'DEFINES_DEBUG': ['_DEBUG'], 'DEFINES_RELEASE': ['NDEBUG'],
        }
    cc, cxx = ('clang', 'clang++') if target.compiler == COMPILER_CLANG else ('gcc', 'g++')
    return {
        'CC': [cc], 'CXX': [cxx], 'AR': ['ar'],
        'DEFINE_FLAG': ['-D'], 'INCLUDE_FLAG': ['-I'],
        'CCOPTS_DEBUG': ['-g', '-O0'], 'CCOPTS_RELEASE': ['-O2'],
        'DEFINES_DEBUG': ['_DEBUG'], 'DEFINES_RELEASE': ['NDEBUG'],
        'PIC_SHARED_LIBRARY': ['-fPIC'],
    }


@dataclass
class ProjectContext:
    """Everything a generator needs to emit one project."""
    project: Project
    sources: List[str]
    include_dirs: List[str]
    dependencies: List[str]
    variables: VariableStore
    output: str

    @property
    def name(self) -> str:
        return self.project.name


class Generator:
    """Base class for build file generators."""

    name = ""
    description = ""
    vars_format = VarsFormat.DOLLAR_PARENTHESIS

    def __init__(
        self,
        package: Package,
        target: BuildTarget,
        out_dir: Optional[Path] = None,
        overrides: Optional[VariableStore] = None
    ):
        """
        Args:
            package: Loaded package to generate for
            target: Build target
            out_dir: Directory receiving the generated files (default: package root)
            overrides: Variables that take precedence over everything else
        """
        self.package = package
        self.target = target
        self.out_dir = Path(out_dir) if out_dir is not None else Path(package.root)
        self.overrides = overrides or VariableStore()

    def interpolator(self, store: VariableStore) -> Interpolator:
        """Interpolator for descriptor values, which always use $(NAME) sites."""
        return Interpolator(store)

    def template_interpolator(self, store: VariableStore) -> Interpolator:
        """Interpolator for this generator's own templates.

        Bound values are already expanded, so one pass inserts them verbatim
        and text such as 'INIT={0}' in a define is never rescanned.
        """
        return Interpolator(store, format=self.vars_format, max_passes=1)

    @property
    def root_from_output(self) -> str:
        """Package root relative to the output directory, in forward-slash form."""
        rel = os.path.relpath(Path(self.package.root).resolve(), self.out_dir.resolve())
        return Path(rel).as_posix()

    def package_variables(self) -> VariableStore:
        store = VariableStore(toolchain_variables(self.target))
        store.set('PACKAGE', self.package.name)
        store.set('OS', self.target.os)
        store.set('ARCH', self.target.arch)
        store.set('COMPILER', self.target.compiler)
        store.set('OBJ_SUFFIX', self.target.object_suffix)
        store.set('ROOT', self.root_from_output)
        store.set('CONFIGS', *self.package.configs)
        store.set_many(self.package.vars)
        self._apply_overrides(store)
        return store

    def project_contexts(self) -> List[ProjectContext]:
        """Build a context for every project, dependencies first."""
        base = self.package_variables()
        built: Dict[str, ProjectContext] = {}
        for name in build_order(self.package):
            project = self.package.projects[name]
            built[name] = self._project_context(project, base, built)
        return list(built.values())

    def _project_context(
        self,
        project: Project,
        base: VariableStore,
        built: Dict[str, ProjectContext]
    ) -> ProjectContext:
        store = base.copy()
        store.set('PROJECT', project.name)
        store.set('PROJECT_TYPE', project.type.value)
        store.set_many(project.vars)
        self._apply_overrides(store)

        interpolator = self.interpolator(store)

        sources = SourceResolver(self.package.root, self.target, interpolator).resolve(project.sources).files
        if not sources:
            logger.warning(f"Project '{project.name}' has no source files")

        include_dirs = interpolator.resolve_list(project.include_dirs)
        _, missing = resolve_include_dirs(self.package.root, include_dirs)
        for include in missing:
            logger.warning(f"Project '{project.name}': include directory not found: {include}")

        dependencies = transitive_dependencies(self.package, project.name)
        output = self.target.output_filename(project.name, project.type)

        store.set('SOURCES', *sources)
        # Dependents compile against the headers of everything they link
        inherited = [d for dep in dependencies for d in built[dep].include_dirs]
        store.set('INCLUDES', *dict.fromkeys(include_dirs + inherited))
        store.set('PROJECT_INCLUDES', *include_dirs)
        store.set('DEPENDS', *dependencies)
        store.set('DEPENDS_OUTPUT', *[
            self.target.output_filename(d, self.package.projects[d].type) for d in dependencies
        ])
        store.set('OUTPUT', output)
        store.set('LINKS', *project.depends_on)

        return ProjectContext(
            project=project,
            sources=sources,
            include_dirs=include_dirs,
            dependencies=dependencies,
            variables=store,
            output=output,
        )

    def _apply_overrides(self, store: VariableStore) -> None:
        """Bind the override variables, then expand what can be expanded so far.

        Sites that depend on a later binding (such as CONFIG) are kept as text.
        """
        for key in self.overrides.keys():
            store.set(key, *(self.overrides.get_all(key) or []))
        store.resolve_values(Interpolator(store, keep_unresolved=True))

    def config_variables(self, context: ProjectContext, config: str) -> VariableStore:
        """Variables of ``context`` specialised for one configuration."""
        store = context.variables.copy()
        store.set('CONFIG', config)
        config_defines = store.get_all(f"DEFINES_{config.upper()}") or []
        store.set('DEFINES', *config_defines, *context.project.defines)
        # Unknown sites such as $(BUILD_DIR) are left for the build tool
        store.resolve_values(Interpolator(store, keep_unresolved=True))
        return store

    def emit(self, writer: LineWriter, templates: Iterable[str], store: VariableStore) -> None:
        """Resolve each template against ``store`` and write every resulting line."""
        interpolator = self.template_interpolator(store)
        for template in templates:
            for line in interpolator.resolve(template):
                writer.write_line(line.rstrip())

    def generate(self) -> Dict[str, LineWriter]:
        """Produce the output files, keyed by path relative to ``out_dir``."""
        raise NotImplementedError

    def write(self) -> List[Path]:
        """Generate and write every output file; returns the written paths."""
        written = []
        for relative, writer in self.generate().items():
            target_path = self.out_dir / relative
            if not target_path.resolve().is_relative_to(self.out_dir.resolve()):
                raise PathSafetyError(f"Generated file '{relative}' escapes output directory")
            written.append(writer.write_to_file(target_path))
        return written
