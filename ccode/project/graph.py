"""Dependency ordering of the projects in a package."""

from graphlib import CycleError, TopologicalSorter
from typing import Dict, List

from ccode.exceptions import DependencyCycleError

from .model import Package


def build_order(package: Package) -> List[str]:
    """
    Order project names so that every project follows its dependencies.

    Raises:
        DependencyCycleError: If the dependencies form a cycle
    """
    sorter: TopologicalSorter = TopologicalSorter()
    for name, project in package.projects.items():
        sorter.add(name, *project.depends_on)

    try:
        return list(sorter.static_order())
    except CycleError as e:
        raise DependencyCycleError(list(e.args[1])) from e


def transitive_dependencies(package: Package, name: str) -> List[str]:
    """
    All projects ``name`` depends on, directly or indirectly.

    Returned in link order: a project appears before the projects it
    depends on, as static linkers want them.
    """
    order = build_order(package)
    position: Dict[str, int] = {n: i for i, n in enumerate(order)}

    seen = set()
    stack = list(package.projects[name].depends_on)
    while stack:
        dep = stack.pop()
        if dep in seen:
            continue
        seen.add(dep)
        stack.extend(package.projects[dep].depends_on)

    return sorted(seen, key=lambda n: position[n], reverse=True)
