"""Line based text output for generated build files."""

import logging
from pathlib import Path
from typing import Iterable, List, Union


logger = logging.getLogger(__name__)

TAB_MARKER = "+"


class LineWriter:
    """
    Collects lines of a generated file.

    A run of leading '+' characters is written as that many tabs, so
    Makefile recipe lines can be composed without literal tab characters.
    """

    def __init__(self):
        self.lines: List[str] = []
        self._current: List[str] = []

    def write(self, text: str) -> None:
        """Append ``text`` to the current, unfinished line."""
        self._current.append(text)

    def write_line(self, text: str = "") -> None:
        self._current.append(text)
        self.new_line()

    def write_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write_line(line)

    def new_line(self) -> None:
        self.lines.append("".join(self._current))
        self._current = []

    def _finalize(self) -> None:
        if self._current:
            self.new_line()

    @staticmethod
    def render_line(line: str) -> str:
        stripped = line.lstrip(TAB_MARKER)
        return "\t" * (len(line) - len(stripped)) + stripped

    def text(self) -> str:
        self._finalize()
        return "".join(self.render_line(line) + "\n" for line in self.lines)

    def write_to_file(self, path: Union[str, Path]) -> Path:
        """Write all lines to ``path``, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(self.text())
        logger.info(f"Wrote {len(self.lines)} lines to {path}")
        return path
