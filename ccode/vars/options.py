"""
Interpolation options.

Each option is a single letter followed by an optional literal parameter,
e.g. ``$(SOURCES:p-I:j )``. An option maps a list of values to a new list
of values; all of them work per value except ``j`` and ``i``, which
operate on the whole list.
"""

import os
from typing import Callable, Dict, List


OptionAction = Callable[[List[str], str], List[str]]

UNKNOWN_OPTION_MARKER = "?"


def _last_separator(path: str) -> int:
    return max(path.rfind("/"), path.rfind("\\"))


def path_filename(path: str, with_extension: bool = True) -> str:
    """Return the last component of ``path``, optionally without extension."""
    name = path[_last_separator(path) + 1:]
    if with_extension:
        return name
    dot = name.rfind(".")
    if dot <= 0:
        return name
    return name[:dot]


def path_dirname(path: str) -> str:
    """Return ``path`` without its last component ('.' when there is none)."""
    pivot = _last_separator(path)
    if pivot < 0:
        return "."
    if pivot == 0:
        return path[0]
    return path[:pivot]


def forward_slashes(values: List[str], param: str) -> List[str]:
    return [v.replace("\\", "/") for v in values]


def backward_slashes(values: List[str], param: str) -> List[str]:
    return [v.replace("/", "\\") for v in values]


def native_slashes(values: List[str], param: str) -> List[str]:
    native = os.sep
    foreign = "\\" if native == "/" else "/"
    return [v.replace(foreign, native) for v in values]


def upper_case(values: List[str], param: str) -> List[str]:
    return [v.upper() for v in values]


def lower_case(values: List[str], param: str) -> List[str]:
    return [v.lower() for v in values]


def base_name(values: List[str], param: str) -> List[str]:
    return [path_filename(v, with_extension=False) for v in values]


def file_name(values: List[str], param: str) -> List[str]:
    return [path_filename(v, with_extension=True) for v in values]


def dir_name(values: List[str], param: str) -> List[str]:
    return [path_dirname(v) for v in values]


def prefix(values: List[str], param: str) -> List[str]:
    return [param + v for v in values]


def suffix(values: List[str], param: str) -> List[str]:
    return [v + param for v in values]


def prefix_if_missing(values: List[str], param: str) -> List[str]:
    return [v if v.startswith(param) else param + v for v in values]


def suffix_if_missing(values: List[str], param: str) -> List[str]:
    return [v if v.endswith(param) else v + param for v in values]


def join(values: List[str], param: str) -> List[str]:
    return [param.join(values)]


def index(values: List[str], param: str) -> List[str]:
    """Keep a single value by 0-based position; out of range yields ``""``."""
    try:
        position = int(param) if param else 0
    except ValueError:
        position = 0
    if 0 <= position < len(values):
        return [values[position]]
    return [""]


OPTIONS: Dict[str, OptionAction] = {
    'f': forward_slashes,
    'b': backward_slashes,
    'n': native_slashes,
    'u': upper_case,
    'l': lower_case,
    'B': base_name,
    'F': file_name,
    'D': dir_name,
    'p': prefix,
    's': suffix,
    'P': prefix_if_missing,
    'S': suffix_if_missing,
    'j': join,
    'i': index,
}
