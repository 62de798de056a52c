"""Tests for package descriptor loading and validation."""

import shutil
import tempfile
from pathlib import Path

import pytest
import yaml

from ccode.exceptions import PackageValidationError
from ccode.loader import PackageLoader
from ccode.project.model import ProjectType


class TestLoaderValidation:
    """Test strict descriptor validation in the loader."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.workspace = Path(self.temp_dir)
        self.loader = PackageLoader()

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def write_package(self, content) -> Path:
        """Helper to write package YAML."""
        path = self.workspace / "package.yaml"
        with open(path, 'w') as f:
            if isinstance(content, str):
                f.write(content)
            else:
                yaml.dump(content, f)
        return path

    def load_errors(self, content) -> list:
        with pytest.raises(PackageValidationError) as exc_info:
            self.loader.load(self.write_package(content))
        assert exc_info.value.exit_code == 2
        return [str(err.message) for err in exc_info.value.errors]

    def test_minimal_package_loads(self):
        path = self.write_package({
            "version": "1",
            "name": "demo",
            "projects": [{"name": "core", "sources": ["src/*.cpp"]}]
        })

        package = self.loader.load(path)

        assert package.name == "demo"
        assert package.root == str(self.workspace.resolve())
        assert package.configs == ["debug", "release"]
        core = package.projects["core"]
        assert core.type is ProjectType.STATIC_LIBRARY
        assert core.sources == ["src/*.cpp"]
        assert core.depends_on == []

    def test_full_package_loads(self):
        path = self.write_package({
            "version": "1",
            "name": "demo",
            "configs": ["debug", "release", "final"],
            "vars": {"LEVEL": 3, "PLATFORMS": ["a", "b"]},
            "projects": [
                {"name": "core", "type": "shared_library", "include_dirs": ["include"],
                 "defines": ["CORE_EXPORTS"], "vars": {"EXTRA": "x"}},
                {"name": "app", "type": "executable", "depends_on": ["core"]},
            ]
        })

        package = self.loader.load(path)

        assert package.configs == ["debug", "release", "final"]
        assert package.vars == {"LEVEL": ["3"], "PLATFORMS": ["a", "b"]}
        assert list(package.projects) == ["core", "app"]
        assert package.projects["core"].type is ProjectType.SHARED_LIBRARY
        assert package.projects["core"].vars == {"EXTRA": ["x"]}
        assert package.projects["app"].depends_on == ["core"]

    def test_yes_no_on_off_stay_strings(self):
        path = self.write_package(
            'version: "1"\n'
            'name: demo\n'
            'vars:\n'
            '  THREADS: on\n'
            'projects:\n'
            '  - name: core\n'
            '    defines: [yes, USE_X=off]\n'
        )

        package = self.loader.load(path)

        assert package.vars["THREADS"] == ["on"]
        assert package.projects["core"].defines == ["yes", "USE_X=off"]

    def test_missing_version_and_name(self):
        errors = self.load_errors({"projects": [{"name": "core"}]})
        assert any("'version' field is required" in e for e in errors)
        assert any("'name' field is required" in e for e in errors)

    def test_version_must_be_string(self):
        errors = self.load_errors({"version": 1, "name": "demo", "projects": [{"name": "core"}]})
        assert any("must be a string" in e for e in errors)

    def test_unsupported_version(self):
        errors = self.load_errors({"version": "2", "name": "demo", "projects": [{"name": "core"}]})
        assert any("Unsupported version '2'" in e for e in errors)

    def test_unknown_fields_rejected(self):
        errors = self.load_errors({
            "version": "1",
            "name": "demo",
            "toolchain": "gcc",
            "projects": [{"name": "core", "flags": ["-O3"]}]
        })
        assert any("Unknown field 'toolchain'" in e for e in errors)
        assert any("Unknown field 'flags'" in e for e in errors)

    def test_projects_required(self):
        errors = self.load_errors({"version": "1", "name": "demo"})
        assert any("'projects' field is required" in e for e in errors)

    def test_invalid_project_type(self):
        errors = self.load_errors({
            "version": "1", "name": "demo",
            "projects": [{"name": "core", "type": "dll"}]
        })
        assert any("type must be one of" in e for e in errors)

    def test_duplicate_project_names(self):
        errors = self.load_errors({
            "version": "1", "name": "demo",
            "projects": [{"name": "core"}, {"name": "core"}]
        })
        assert any("Duplicate project name 'core'" in e for e in errors)

    def test_unknown_and_self_dependencies(self):
        errors = self.load_errors({
            "version": "1", "name": "demo",
            "projects": [
                {"name": "core", "depends_on": ["core"]},
                {"name": "app", "depends_on": ["missing"]},
            ]
        })
        assert any("cannot depend on itself" in e for e in errors)
        assert any("unknown project 'missing'" in e for e in errors)

    def test_list_fields_must_hold_strings(self):
        errors = self.load_errors({
            "version": "1", "name": "demo",
            "projects": [{"name": "core", "sources": "src/*.cpp", "defines": ["A", 3]}]
        })
        assert any("must be a list of strings" in e for e in errors)
        assert any("item 1 must be a non-empty string" in e for e in errors)

    def test_path_safety(self):
        errors = self.load_errors({
            "version": "1", "name": "demo",
            "projects": [{"name": "core", "sources": ["/etc/*.c"], "include_dirs": ["../include"]}]
        })
        assert any("absolute paths not allowed" in e for e in errors)
        assert any("parent directory traversal" in e for e in errors)

    def test_paths_with_variables_are_checked_later(self):
        path = self.write_package({
            "version": "1", "name": "demo",
            "projects": [{"name": "core", "sources": ["$(SRC_DIR)/*.c"]}]
        })
        assert self.loader.load(path).projects["core"].sources == ["$(SRC_DIR)/*.c"]

    def test_braces_do_not_skip_path_checks(self):
        errors = self.load_errors({
            "version": "1", "name": "demo",
            "projects": [{"name": "core", "sources": ["/{src}/*.c"], "include_dirs": ["{gen}/../../include"]}]
        })
        assert any("absolute paths not allowed: '/{src}/*.c'" in e for e in errors)
        assert any("parent directory traversal" in e for e in errors)

    def test_configs_validation(self):
        errors = self.load_errors({
            "version": "1", "name": "demo",
            "configs": ["debug", "debug", ""],
            "projects": [{"name": "core"}]
        })
        assert any("Duplicate config 'debug'" in e for e in errors)
        assert any("'configs[2]' must be a non-empty string" in e for e in errors)

    def test_vars_must_be_strings_or_lists(self):
        errors = self.load_errors({
            "version": "1", "name": "demo",
            "vars": {"NESTED": {"a": 1}},
            "projects": [{"name": "core"}]
        })
        assert any("variable 'NESTED' must be a string or a list of strings" in e for e in errors)

    def test_all_errors_reported_together(self):
        with pytest.raises(PackageValidationError) as exc_info:
            self.loader.load(self.write_package({
                "version": "9", "name": "demo",
                "projects": [{"name": "core", "type": "bogus", "depends_on": ["nope"]}]
            }))
        assert len(exc_info.value.errors) == 3
        message = str(exc_info.value)
        assert "Validation error:" in message
        assert "project 'core'" in message

    def test_malformed_yaml(self):
        errors = self.load_errors("version: '1'\nprojects: [\n")
        assert any("Failed to load package" in e for e in errors)

    def test_non_mapping_document(self):
        errors = self.load_errors("- just\n- a list\n")
        assert errors == ["Package must be a YAML object/dictionary"]
