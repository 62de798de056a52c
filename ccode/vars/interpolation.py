"""
Variable interpolation.

Expands template strings against a VariableStore. A template holds zero or
more sites of the form ``$(NAME)`` or ``$(NAME:opt1:opt2...)``; sites nest
inside names and options, e.g. ``$(CCOPTS_$(VARIANT:u))``.

Examples, with FOO = "String" and BAR = ["A", "B", "C"]:

    $(FOO:u)             -> ["STRING"]
    $(FOO:p__:s__)       -> ["__String__"]
    $(BAR)               -> ["A", "B", "C"]
    $(BAR:p__:s__:j!)    -> ["__A__!__B__!__C__"]
    $(BAR:p\\::s!)       -> [":A!", ":B!", ":C!"]
    x$(FOO)$(BAR)        -> ["xStringA", "xStringB", "xStringC"]
"""

import itertools
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Iterable, List, Optional, Set, Tuple, Union

from ccode.exceptions import UndefinedVariableError

from .options import OPTIONS, UNKNOWN_OPTION_MARKER
from .store import VariableStore


logger = logging.getLogger(__name__)

DEFAULT_MAX_PASSES = 8

# A part is either literal text or the arena index of a nested site.
Part = Union[str, int]


class VarsFormat(str, Enum):
    """Site delimiters."""
    DOLLAR_PARENTHESIS = "$()"
    CURLY_BRACES = "{}"

    @property
    def opener(self) -> str:
        return self.value[:-1]

    @property
    def closer(self) -> str:
        return self.value[-1]


@dataclass
class Site:
    """
    One interpolation site found by the parser.

    Attributes:
        start: Offset of the opening delimiter in the source text
        end: Offset just past the closing delimiter (-1 while still open)
        parent: Arena index of the enclosing site, -1 for top-level sites
        name: Parts forming the variable name
        options: Parts of each option, in pipeline order
    """
    start: int
    parent: int = -1
    end: int = -1
    name: List[Part] = field(default_factory=list)
    options: List[List[Part]] = field(default_factory=list)

    def open_parts(self) -> List[Part]:
        """The part list currently being filled (last option, else the name)."""
        if self.options:
            return self.options[-1]
        return self.name


@dataclass
class ParsedTemplate:
    """Top-level parts plus the arena of sites they reference."""
    parts: List[Part]
    sites: List[Site]


class Interpolator:
    """
    Resolves templates against a VariableStore.

    A missing variable contributes nothing to the result and its name is
    recorded in ``undefined``. With ``strict`` an UndefinedVariableError is
    raised after the resolution, with ``keep_unresolved`` the site is put
    back as text instead.
    """

    def __init__(
        self,
        store: VariableStore,
        format: VarsFormat = VarsFormat.DOLLAR_PARENTHESIS,
        strict: bool = False,
        keep_unresolved: bool = False,
        max_passes: int = DEFAULT_MAX_PASSES,
        log: Optional[logging.Logger] = None
    ):
        self.store = store
        self.format = VarsFormat(format)
        self.strict = strict
        self.keep_unresolved = keep_unresolved
        self.max_passes = max(1, max_passes)
        self.logger = log or logger
        self.undefined: Set[str] = set()

    def resolve(self, text: str) -> List[str]:
        """
        Expand ``text`` into one or more strings.

        Values produced by a pass are resolved again, so a variable whose
        value contains further sites expands fully. Passes stop when a pass
        resolves nothing or after ``max_passes``; with ``max_passes=1`` the
        first pass is final and bound values are inserted verbatim.

        Raises:
            UndefinedVariableError: In strict mode, if a variable was missing
        """
        self.undefined.clear()

        final: List[str] = []
        pending: Deque[Tuple[str, int]] = deque([(text, 0)])
        while pending:
            current, passes = pending.popleft()
            results, resolved_count = self._resolve_once(current)
            if resolved_count == 0:
                final.extend(results)
                continue
            if passes + 1 >= self.max_passes:
                if self.max_passes > 1:
                    self.logger.warning(
                        "Interpolation of '%s' did not settle after %d passes", text, self.max_passes
                    )
                final.extend(results)
                continue
            pending.extendleft(reversed([(r, passes + 1) for r in results]))

        if self.strict and self.undefined:
            raise UndefinedVariableError(self.undefined, text)
        return final

    def resolve_string(self, text: str, sep: str = " ") -> str:
        """Expand ``text`` and join all results with ``sep``."""
        return sep.join(self.resolve(text))

    def resolve_list(self, texts: Iterable[str]) -> List[str]:
        """Expand each text and flatten the results, keeping order."""
        undefined: Set[str] = set()
        resolved: List[str] = []
        for text in texts:
            resolved.extend(self.resolve(text))
            undefined |= self.undefined
        self.undefined = undefined
        return resolved

    def parse(self, text: str) -> Optional[ParsedTemplate]:
        """
        Scan ``text`` for sites.

        Open sites are tracked on an explicit stack of arena indices. A
        nested site is registered as a part of its parent's name or option.
        Inside a site, ``\\`` makes the next character literal.

        Returns:
            ParsedTemplate, or None if a site is never closed
        """
        opener = self.format.opener
        closer = self.format.closer

        top: List[Part] = []
        sites: List[Site] = []
        stack: List[int] = []
        literal: List[str] = []

        def open_parts() -> List[Part]:
            return sites[stack[-1]].open_parts() if stack else top

        def flush() -> None:
            if literal:
                open_parts().append("".join(literal))
                literal.clear()

        i = 0
        length = len(text)
        while i < length:
            if text.startswith(opener, i):
                flush()
                index = len(sites)
                sites.append(Site(start=i, parent=stack[-1] if stack else -1))
                open_parts().append(index)
                stack.append(index)
                i += len(opener)
                continue

            c = text[i]
            if not stack:
                literal.append(c)
            elif c == '\\' and i + 1 < length:
                literal.append(text[i + 1])
                i += 1
            elif c == ':':
                flush()
                sites[stack[-1]].options.append([])
            elif c == closer:
                flush()
                sites[stack.pop()].end = i + 1
            else:
                literal.append(c)
            i += 1

        if stack:
            return None
        flush()
        return ParsedTemplate(parts=top, sites=sites)

    def _resolve_once(self, text: str) -> Tuple[List[str], int]:
        """One pass over ``text``; returns the results and how many sites resolved."""
        if self.format.opener not in text:
            return [text], 0

        parsed = self.parse(text)
        if parsed is None:
            self.logger.warning("Invalid variable pair in string: %s", text)
            return [text], 0
        if not parsed.sites:
            return [text], 0

        # Children are always registered after their parent, so walking the
        # arena backwards resolves every inner site before its enclosing one.
        resolved: List[List[str]] = [[] for _ in parsed.sites]
        resolved_count = 0
        for index in range(len(parsed.sites) - 1, -1, -1):
            values, found = self._resolve_site(text, parsed.sites[index], resolved)
            resolved[index] = values
            resolved_count += found

        return self._expand(parsed.parts, resolved), resolved_count

    def _resolve_site(self, text: str, site: Site, resolved: List[List[str]]) -> Tuple[List[str], int]:
        names = self._expand(site.name, resolved)
        pipelines = list(itertools.product(*(self._expand(o, resolved) for o in site.options)))

        values: List[str] = []
        found = 0
        kept = False
        for name in names:
            bound = self.store.get_all(name)
            if bound is None:
                self.undefined.add(name)
                self.logger.debug("Variable '%s' is not defined", name)
                if self.keep_unresolved and not kept:
                    # The source text keeps nested sites intact for a later pass
                    values.append(text[site.start:site.end])
                    kept = True
                continue

            found += 1
            for pipeline in pipelines:
                values.extend(self._apply_options(name, list(bound), pipeline))
        return values, found

    def _apply_options(self, name: str, values: List[str], pipeline: Tuple[str, ...]) -> List[str]:
        for option in pipeline:
            if not option:
                continue
            letter, param = option[0], option[1:]
            action = OPTIONS.get(letter)
            if action is None:
                self.logger.warning(
                    "Unknown interpolation option '%s' as part of $(%s:%s)",
                    letter, name, ":".join(pipeline)
                )
                values = [UNKNOWN_OPTION_MARKER for _ in values]
                continue
            values = action(values, param)
        return values

    @staticmethod
    def _expand(parts: List[Part], resolved: List[List[str]]) -> List[str]:
        """
        Concatenate parts into all result combinations.

        A site with several values multiplies the results: the outer loop
        runs over existing results, the inner loop over the new values. A
        site with no values contributes nothing.
        """
        results = [""]
        for part in parts:
            if isinstance(part, str):
                results = [r + part for r in results]
                continue
            values = resolved[part]
            if not values:
                continue
            results = [r + v for r in results for v in values]
        return results


def interpolate(text: str, store: VariableStore, **kwargs) -> List[str]:
    """Shortcut for ``Interpolator(store, **kwargs).resolve(text)``."""
    return Interpolator(store, **kwargs).resolve(text)
