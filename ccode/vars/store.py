"""
Variable store.

Holds named variables, each bound to an ordered list of string values.
A variable with one value is a scalar, with more it is a list that fans
out during interpolation.
"""

from typing import TYPE_CHECKING, Dict, Iterator, List, Mapping, Optional, Sequence, Union

if TYPE_CHECKING:
    from .interpolation import Interpolator


Values = Union[str, Sequence[str]]


def _as_list(values: Values) -> List[str]:
    if isinstance(values, str):
        return [values]
    return [str(v) for v in values]


class VariableStore:
    """
    Key to value-list bindings with soft lookup.

    Missing keys never raise: ``get_one`` returns ``""`` and ``get_all``
    returns ``None`` so the caller decides how to default.
    """

    def __init__(self, initial: Optional[Mapping[str, Values]] = None):
        self._values: Dict[str, List[str]] = {}
        if initial:
            self.set_many(initial)

    def set(self, key: str, *values: str) -> None:
        """Replace all values of ``key``."""
        self._values[key] = [str(v) for v in values]

    def set_many(self, variables: Mapping[str, Values]) -> None:
        for key, values in variables.items():
            self._values[key] = _as_list(values)

    def append(self, key: str, *values: str) -> None:
        """Append to the values of ``key``, creating it when absent."""
        self._values.setdefault(key, []).extend(str(v) for v in values)

    def prepend(self, key: str, *values: str) -> None:
        self._values[key] = [str(v) for v in values] + self._values.get(key, [])

    def get_one(self, key: str) -> str:
        values = self._values.get(key)
        if values:
            return values[0]
        return ""

    def get_all(self, key: str) -> Optional[List[str]]:
        return self._values.get(key)

    def has(self, key: str) -> bool:
        return key in self._values

    def keys(self) -> List[str]:
        return list(self._values.keys())

    def copy(self) -> "VariableStore":
        clone = VariableStore()
        clone._values = {k: list(v) for k, v in self._values.items()}
        return clone

    def merge(self, other: "VariableStore") -> None:
        """Add the keys of ``other`` that are not bound here; never overwrites."""
        for key in other.keys():
            if key not in self._values:
                self._values[key] = list(other.get_all(key) or [])

    def as_dict(self) -> Dict[str, str]:
        """Flatten to a plain dict holding the first value of each non-empty key."""
        return {k: v[0] for k, v in self._values.items() if v}

    def cull(self) -> None:
        """Drop keys that are bound to no values."""
        self._values = {k: v for k, v in self._values.items() if v}

    def resolve_values(self, interpolator: "Interpolator") -> None:
        """Expand every stored value in place using ``interpolator``.

        A value that expands to several strings is replaced by all of them.
        """
        for key in self.keys():
            expanded: List[str] = []
            for value in self._values[key]:
                expanded.extend(interpolator.resolve(value))
            self._values[key] = expanded

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values.keys()))

    def __repr__(self) -> str:
        return f"VariableStore({self._values!r})"
