"""Package model, dependency ordering and source resolution."""

from .model import BuildTarget, Package, Project, ProjectType
from .graph import build_order, transitive_dependencies
from .sources import ExclusionFilter, SourceResolver

__all__ = [
    "BuildTarget",
    "Package",
    "Project",
    "ProjectType",
    "build_order",
    "transitive_dependencies",
    "ExclusionFilter",
    "SourceResolver",
]
