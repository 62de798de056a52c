"""Package descriptor loader and strict validation."""

from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from ccode.exceptions import PackageValidationError, ValidationError
from ccode.project.model import DEFAULT_CONFIGS, Package, Project, ProjectType


class PreservingLoader(yaml.SafeLoader):
    """YAML loader that keeps 'on', 'off', 'yes', 'no' as strings instead of booleans."""
    pass


# Defines such as 'USE_THREADS=on' or a bare 'yes' must stay text, so drop the
# implicit bool resolvers for every first letter that can start one of them.
PreservingLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != 'tag:yaml.org,2002:bool']
    for first, resolvers in PreservingLoader.yaml_implicit_resolvers.items()
}


class PackageLoader:
    """Loads and validates package descriptor YAML."""

    SUPPORTED_VERSIONS = {"1"}
    TOP_LEVEL_FIELDS = {'version', 'name', 'vars', 'configs', 'projects'}
    PROJECT_FIELDS = {'name', 'type', 'sources', 'include_dirs', 'defines', 'depends_on', 'vars'}
    LIST_FIELDS = ('sources', 'include_dirs', 'defines', 'depends_on')
    PATH_FIELDS = ('sources', 'include_dirs')
    VARIABLE_MARKER = '$('

    def __init__(self):
        self.errors: List[ValidationError] = []

    def load(self, package_path: Path) -> Package:
        """Load and validate a package descriptor.

        Raises:
            PackageValidationError: With every problem found
        """
        package_path = Path(package_path)
        self.errors = []

        try:
            with open(package_path, 'r', encoding='utf-8') as f:
                document = yaml.load(f, Loader=PreservingLoader)
        except (OSError, yaml.YAMLError) as e:
            self._add_error(f"Failed to load package: {e}")
            self._raise_validation_errors()

        return self.load_dict(document, root=package_path.resolve().parent)

    def load_dict(self, document: Any, root: Path) -> Package:
        """Validate an already parsed descriptor and build the Package."""
        self.errors = []

        if document is None or not isinstance(document, dict):
            self._add_error("Package must be a YAML object/dictionary")
            self._raise_validation_errors()

        version = document.get('version')
        if not version:
            self._add_error("'version' field is required")
        elif not isinstance(version, str):
            self._add_error(f"'version' field must be a string, got {type(version).__name__}")
        elif version not in self.SUPPORTED_VERSIONS:
            self._add_error(f"Unsupported version '{version}'. Supported: {sorted(self.SUPPORTED_VERSIONS)}")

        for key in document.keys():
            if key not in self.TOP_LEVEL_FIELDS:
                self._add_error(f"Unknown field '{key}'")

        name = document.get('name')
        if not name or not isinstance(name, str):
            self._add_error("'name' field is required and must be a string")
            name = "<package>"

        package = Package(name=name, root=str(root))
        package.vars = self._validate_vars(document.get('vars', {}), "vars")
        package.configs = self._validate_configs(document.get('configs', list(DEFAULT_CONFIGS)))

        projects = document.get('projects')
        if not projects:
            self._add_error("'projects' field is required and must not be empty")
        elif not isinstance(projects, list):
            self._add_error("'projects' must be a list")
        else:
            for i, entry in enumerate(projects):
                project = self._validate_project(entry, i, package)
                if project is not None:
                    package.add_project(project)
            self._validate_dependencies(package)

        if self.errors:
            self._raise_validation_errors()

        return package

    def _validate_vars(self, variables: Any, context: str) -> Dict[str, List[str]]:
        """Validate a vars mapping; scalar values become one-element lists."""
        if not isinstance(variables, dict):
            self._add_error(f"'{context}' must be a dictionary", context)
            return {}

        result = {}
        for key, value in variables.items():
            if not isinstance(key, str) or not key:
                self._add_error(f"variable names must be non-empty strings, got {key!r}", context)
                continue
            if isinstance(value, (str, int, float)):
                result[key] = [str(value)]
            elif isinstance(value, list) and all(isinstance(v, (str, int, float)) for v in value):
                result[key] = [str(v) for v in value]
            else:
                self._add_error(f"variable '{key}' must be a string or a list of strings", context)
        return result

    def _validate_configs(self, configs: Any) -> List[str]:
        if not isinstance(configs, list) or not configs:
            self._add_error("'configs' must be a non-empty list", "configs")
            return list(DEFAULT_CONFIGS)

        result = []
        for i, config in enumerate(configs):
            if not isinstance(config, str) or not config:
                self._add_error(f"'configs[{i}]' must be a non-empty string", "configs")
            elif config in result:
                self._add_error(f"Duplicate config '{config}'", "configs")
            else:
                result.append(config)
        return result

    def _validate_project(self, entry: Any, index: int, package: Package) -> Optional[Project]:
        if not isinstance(entry, dict):
            self._add_error(f"Project {index} must be a dictionary")
            return None

        name = entry.get('name')
        if not name:
            self._add_error(f"Project {index} missing required 'name' field")
            name = f"<project_{index}>"
        elif not isinstance(name, str):
            self._add_error(f"Project {index} name must be a string, got {type(name).__name__}")
            name = f"<project_{index}>"
        elif name in package.projects:
            self._add_error(f"Duplicate project name '{name}'")

        context = f"project '{name}'"

        for key in entry.keys():
            if key not in self.PROJECT_FIELDS:
                self._add_error(f"Unknown field '{key}'", context)

        project_type = ProjectType.STATIC_LIBRARY
        if 'type' in entry:
            try:
                project_type = ProjectType(entry['type'])
            except ValueError:
                valid = [t.value for t in ProjectType]
                self._add_error(f"type must be one of {valid}, got '{entry['type']}'", context)

        lists: Dict[str, List[str]] = {}
        for field_name in self.LIST_FIELDS:
            lists[field_name] = self._validate_string_list(entry.get(field_name, []), f"{context} {field_name}")

        for field_name in self.PATH_FIELDS:
            for path in lists[field_name]:
                self._validate_path_safety(path, f"{context} {field_name}")

        if name in lists['depends_on']:
            self._add_error("project cannot depend on itself", context)

        return Project(
            name=name,
            type=project_type,
            sources=lists['sources'],
            include_dirs=lists['include_dirs'],
            defines=lists['defines'],
            depends_on=lists['depends_on'],
            vars=self._validate_vars(entry.get('vars', {}), f"{context} vars"),
        )

    def _validate_string_list(self, value: Any, context: str) -> List[str]:
        if not isinstance(value, list):
            self._add_error("must be a list of strings", context)
            return []
        result = []
        for i, item in enumerate(value):
            if not isinstance(item, str) or not item:
                self._add_error(f"item {i} must be a non-empty string", context)
            else:
                result.append(item)
        return result

    def _validate_dependencies(self, package: Package):
        """Check every depends_on entry names a project of this package."""
        for project in package.projects.values():
            for dep in project.depends_on:
                if dep not in package.projects:
                    self._add_error(f"depends on unknown project '{dep}'", f"project '{project.name}'")

    def _validate_path_safety(self, path: str, context: str):
        """Reject absolute paths and parent traversal."""
        # Paths with variable sites are checked after interpolation
        if self.VARIABLE_MARKER in path:
            return

        if Path(path).is_absolute() or path.startswith(('/', '\\')):
            self._add_error(f"absolute paths not allowed: '{path}'", context)

        if '..' in Path(path).parts:
            self._add_error(f"parent directory traversal ('..') not allowed: '{path}'", context)

    def _add_error(self, message: str, path: str = "", exit_code: int = 2):
        self.errors.append(ValidationError(message, path, exit_code))

    def _raise_validation_errors(self):
        raise PackageValidationError(self.errors)
